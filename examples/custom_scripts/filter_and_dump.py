"""Example custom callback: keep isolated tight muons and dump a compact JSON report."""

from __future__ import annotations

import json
from pathlib import Path


def process(results, context):
    """Select WZ-tight, high-purity muons above 20 GeV and write them next to the table."""
    selected = [
        m
        for m in results
        if m.flag("isWZTightMuon") and m.flag("highPurityTrack") and m.candidate.pt > 20.0
    ]
    payload = {
        "n_input": len(results),
        "n_selected": len(selected),
        "selected": [
            {
                "event_id": m.event_id,
                "muon_id": m.candidate.muon_id,
                "pt": m.candidate.pt,
                "segmentCompatibility": m.flag("segmentCompatibility"),
            }
            for m in selected
        ],
    }
    out = Path(context["output_path"]).with_name("selected_muons.json")
    out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    print(f"Wrote {out}")
