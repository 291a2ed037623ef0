"""Input/output helpers for JSON event inputs and tabular flag export."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from .embedder import USER_FLOAT_KEYS, USER_INT_KEYS
from .models import (
    CombinedQuality,
    EmbeddedMuon,
    EventInput,
    InnerTrack,
    MuonCandidate,
    PFIsolation,
    Vertex,
)

logger = logging.getLogger(__name__)


def load_event_json(path: str | Path, event_id: str | None = None) -> EventInput:
    """Load a single-event JSON document into an `EventInput`.

    Expected shape: `{"muons": [...], "vertices": [...]}`; the vertex list may
    also be given as `primary_vertices`. The event id is taken from the
    `event_id` argument, then the document's `event_id`, then the file stem.
    """
    data = _load_json(path)
    if event_id is not None:
        resolved_id = str(event_id)
    else:
        resolved_id = str(data.get("event_id", Path(path).stem))
    return _parse_event(data, event_id=resolved_id, context=f"{path}")


def load_events_json(path: str | Path) -> list[EventInput]:
    """Load multi-event input JSON into `EventInput` objects.

    Expected shape:
    {
      "events": [
        {"event_id": "...", "muons": [...], "vertices": [...]},
        ...
      ]
    }
    """
    data = _load_json(path)
    events_data = data.get("events")
    if not isinstance(events_data, list):
        raise ValueError("Events JSON must contain a list under key 'events'.")
    out: list[EventInput] = []
    for idx, event in enumerate(events_data):
        if not isinstance(event, dict):
            raise ValueError(f"Event entry at index {idx} must be an object.")
        event_id = str(event.get("event_id", f"evt{idx}"))
        out.append(_parse_event(event, event_id=event_id, context=f"event '{event_id}'"))
    logger.debug("Loaded %d event(s) from %s", len(out), path)
    return out


def write_embedded_table(path: str | Path, embedded: Iterable[EmbeddedMuon]) -> int:
    """Write embedded muons into a Parquet/CSV/Pickle table; return the row count."""
    pd = _require_pandas()
    rows = _embedded_rows(embedded)
    df = pd.DataFrame(rows, columns=_TABLE_COLUMNS)
    out = Path(path)
    suffix = out.suffix.lower()
    if suffix == ".parquet":
        df.to_parquet(out, index=False)
    elif suffix in (".pkl", ".pickle"):
        df.to_pickle(out)
    elif suffix == ".csv":
        df.to_csv(out, index=False)
    else:
        raise ValueError(
            f"Unsupported output format '{suffix}'. Use .parquet, .csv, or .pkl"
        )
    return len(rows)


_TABLE_COLUMNS: list[str] = [
    "event_id",
    "muon_id",
    "pt",
    "eta",
    "phi",
    "charge",
    *USER_INT_KEYS,
    *USER_FLOAT_KEYS,
]


def _embedded_rows(embedded: Iterable[EmbeddedMuon]) -> list[dict[str, Any]]:
    """Flatten embedded muons into DataFrame-ready row dictionaries."""
    rows: list[dict[str, Any]] = []
    for mu in embedded:
        cand = mu.candidate
        row: dict[str, Any] = {
            "event_id": mu.event_id,
            "muon_id": cand.muon_id,
            "pt": cand.pt,
            "eta": cand.eta,
            "phi": cand.phi,
            "charge": cand.charge,
        }
        row.update(mu.user_data)
        rows.append(row)
    return rows


def _require_pandas():
    """Import pandas lazily and provide a clear installation hint on failure."""
    try:
        import pandas as pd  # type: ignore
    except ModuleNotFoundError as exc:
        raise ModuleNotFoundError(
            "pandas is required to write output tables. Install pandas and pyarrow."
        ) from exc
    return pd


def _parse_event(data: dict[str, Any], event_id: str, context: str) -> EventInput:
    """Parse the muon and vertex containers of one event object."""
    muons_data = data.get("muons")
    if not isinstance(muons_data, list):
        raise ValueError(f"Event payload in {context} must contain a list under key 'muons'.")
    vertices_data = data.get("vertices", data.get("primary_vertices"))
    if not isinstance(vertices_data, list):
        raise ValueError(
            f"Event payload in {context} must contain a 'vertices' (or 'primary_vertices') list."
        )
    muons = tuple(
        _parse_muon_item(item=item, idx=idx, context=context)
        for idx, item in enumerate(muons_data)
    )
    vertices = tuple(
        _parse_vertex_item(item=item, idx=idx, context=context)
        for idx, item in enumerate(vertices_data)
    )
    return EventInput(event_id=event_id, muons=muons, vertices=vertices)


def _parse_muon_item(item: Any, idx: int, context: str) -> MuonCandidate:
    """Parse one muon dictionary into a `MuonCandidate`."""
    if not isinstance(item, dict):
        raise ValueError(f"Muon entry at index {idx} in {context} must be an object.")
    if "pt" not in item:
        raise ValueError(f"Muon at index {idx} in {context} must define 'pt'.")
    quality = _optional_object(item, "combinedQuality", idx, context)
    iso = _optional_object(item, "pfIsolationR04", idx, context)
    track_data = item.get("innerTrack")
    return MuonCandidate(
        muon_id=str(item.get("muon_id", f"mu{idx}")),
        pt=float(item["pt"]),
        eta=float(item.get("eta", 0.0)),
        phi=float(item.get("phi", 0.0)),
        charge=int(item.get("charge", 0)),
        is_global_muon=bool(item.get("isGlobalMuon", False)),
        global_normalized_chi2=float(item.get("normalizedChi2", 0.0)),
        inner_track=None if track_data is None else _parse_inner_track(track_data, idx, context),
        combined_quality=CombinedQuality(
            chi2_local_position=float(quality.get("chi2LocalPosition", 0.0)),
            trk_kink=float(quality.get("trkKink", 0.0)),
        ),
        pf_isolation_r04=PFIsolation(
            sum_charged_hadron_pt=float(iso.get("sumChargedHadronPt", 0.0)),
            sum_neutral_hadron_et=float(iso.get("sumNeutralHadronEt", 0.0)),
            sum_photon_et=float(iso.get("sumPhotonEt", 0.0)),
            sum_pu_pt=float(iso.get("sumPUPt", 0.0)),
        ),
        track_iso=float(item.get("trackIso", 0.0)),
        segment_compatibility=float(item.get("segmentCompatibility", 0.0)),
        is_tight_muon_base=bool(item.get("isTightMuon", False)),
        is_soft_muon_base=bool(item.get("isSoftMuon", False)),
        is_high_pt_muon_base=bool(item.get("isHighPtMuon", False)),
        is_loose_muon_base=bool(item.get("isLooseMuon", False)),
        is_good_muon_one_station_tight=bool(item.get("isGoodMuonTMOneStationTight", False)),
    )


def _parse_inner_track(item: Any, idx: int, context: str) -> InnerTrack:
    """Parse the `innerTrack` object of one muon."""
    if not isinstance(item, dict):
        raise ValueError(f"Inner track of muon {idx} in {context} must be an object.")
    try:
        return InnerTrack(
            vx=float(item["vx"]),
            vy=float(item["vy"]),
            vz=float(item["vz"]),
            px=float(item["px"]),
            py=float(item["py"]),
            pz=float(item["pz"]),
            valid_fraction=float(item.get("validFraction", 1.0)),
            tracker_layers_with_measurement=int(item.get("trackerLayersWithMeasurement", 0)),
            pixel_layers_with_measurement=int(item.get("pixelLayersWithMeasurement", 0)),
            high_purity=bool(item.get("highPurity", False)),
        )
    except KeyError as exc:
        raise ValueError(
            f"Inner track of muon {idx} in {context} is missing field {exc.args[0]!r}."
        ) from exc


def _parse_vertex_item(item: Any, idx: int, context: str) -> Vertex:
    """Parse one vertex dictionary into a `Vertex`."""
    if not isinstance(item, dict):
        raise ValueError(f"Vertex at index {idx} in {context} must be an object.")
    position = item.get("position")
    if position is not None:
        if not isinstance(position, list) or len(position) != 3:
            raise ValueError(f"Vertex position at index {idx} in {context} must be a 3-item list.")
        x, y, z = (float(v) for v in position)
    else:
        x, y, z = float(item["x"]), float(item["y"]), float(item["z"])
    return Vertex(vertex_id=str(item.get("vertex_id", f"pv{idx}")), x=x, y=y, z=z)


def _optional_object(item: dict[str, Any], key: str, idx: int, context: str) -> dict[str, Any]:
    """Return a nested object field, or an empty dict when absent."""
    value = item.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Field '{key}' of muon {idx} in {context} must be an object.")
    return value


def _load_json(path: str | Path) -> dict[str, Any]:
    """Read and validate a JSON object document from disk."""
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"JSON document at {path} must be an object.")
    return data
