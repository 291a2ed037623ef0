"""Command-line interface for embedding muon identification flags into event inputs."""

from __future__ import annotations

import argparse
import importlib.util
import logging
from pathlib import Path
from typing import Any

from .embedder import USER_INT_KEYS, MuonIdEmbedder, select_embedded
from .io import load_event_json, load_events_json, write_embedded_table
from .models import EmbeddedMuon

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="muon-id-embedder",
        description="Evaluate tiered muon identification flags for every muon of every event.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--events", help="Input JSON with key 'events' (list of event objects).")
    source.add_argument("--event", help="Input JSON for one event with keys 'muons' and 'vertices'.")
    parser.add_argument(
        "--out",
        required=True,
        help="Output table file for embedded muons (.parquet, .csv, .pkl).",
    )
    parser.add_argument(
        "--skip-failed-events",
        action="store_true",
        help="Skip events without vertices or with non-positive muon pt instead of failing.",
    )
    parser.add_argument(
        "--select",
        default=None,
        choices=USER_INT_KEYS,
        help="Only write muons passing this flag.",
    )
    parser.add_argument(
        "--custom-script",
        default=None,
        help="Path to Python file with process(results, context) function.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint: load events, embed IDs, write table, optional custom hook."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.events:
        events = load_events_json(args.events)
    else:
        events = [load_event_json(args.event)]

    embedder = MuonIdEmbedder()
    per_event = embedder.embed_events(events, skip_failed=args.skip_failed_events)
    results: list[EmbeddedMuon] = [mu for _, embedded in per_event for mu in embedded]
    if args.select:
        results = select_embedded(results, args.select)
    n_rows = write_embedded_table(args.out, results)
    logger.info(
        "Wrote %d muon(s) from %d/%d event(s) to %s",
        n_rows,
        len(per_event),
        len(events),
        args.out,
    )

    if args.custom_script:
        run_custom_script(
            script_path=args.custom_script,
            results=results,
            context={
                "input_path": args.events or args.event,
                "selection": args.select,
                "n_events": len(events),
                "n_events_processed": len(per_event),
                "output_path": args.out,
            },
        )
    return 0


def run_custom_script(
    script_path: str, results: list[EmbeddedMuon], context: dict[str, Any]
) -> None:
    """Execute user-supplied post-processing callback `process(results, context)`."""
    module = _load_module(script_path)
    process = getattr(module, "process", None)
    if process is None or not callable(process):
        raise ValueError(
            f"Custom script {script_path} must define callable process(results, context)."
        )
    process(results, context)


def _load_module(script_path: str):
    """Import a Python module from an arbitrary file path."""
    path = Path(script_path)
    spec = importlib.util.spec_from_file_location(path.stem, path)
    if spec is None or spec.loader is None:
        raise ValueError(f"Cannot import custom script: {script_path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


if __name__ == "__main__":
    raise SystemExit(main())
