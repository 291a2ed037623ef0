"""Multi-event API example: embed muon IDs and count muons per tier.

Run from repository root without installation:
    PYTHONPATH=src python examples/multi_event_api.py
"""

from __future__ import annotations

from pathlib import Path

from muonid import USER_INT_KEYS, MuonIdEmbedder
from muonid.io import load_events_json, write_embedded_table


def main() -> int:
    """Load events, embed IDs, print per-flag counts and write a parquet table."""
    events = load_events_json("examples/events.json")
    per_event = MuonIdEmbedder().embed_events(events, skip_failed=True)
    embedded = [mu for _, muons in per_event for mu in muons]
    for flag in USER_INT_KEYS:
        n_pass = sum(mu.user_ints[flag] for mu in embedded)
        print(f"{flag:>20s}: {n_pass}/{len(embedded)}")
    out_path = Path("examples/multi_event_output.parquet")
    write_embedded_table(out_path, embedded)
    print(f"Wrote {len(embedded)} muons from {len(per_event)} events to {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
