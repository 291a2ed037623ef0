"""Named identification tiers built from the predicates in `predicates`.

Tight and medium WZ tiers start from the upstream tight ID, while the loose
WZ tiers start from the ICHEP medium ID.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import MuonCandidate, Vertex
from .predicates import (
    is_medium_ichep,
    is_soft_ichep,
    near_vertex_tight,
    passes_pf_isolation,
    passes_track_isolation,
)

WZ_TIGHT_MAX_PF_ISO = 0.15
WZ_MEDIUM_MAX_PF_ISO = 0.40
WZ_LOOSE_MAX_PF_ISO = 0.4
WZ_LOOSE_MAX_TRACK_ISO = 0.4


@dataclass(frozen=True)
class TierFlags:
    """All identification tiers of one candidate."""

    is_medium_muon_ichep: bool
    is_wz_medium_muon: bool
    is_wz_tight_muon: bool
    is_wz_tight_muon_no_iso: bool
    is_wz_loose_muon: bool
    is_wz_loose_muon_no_iso: bool
    is_soft_muon_ichep: bool


def is_wz_tight_muon_no_iso(muon: MuonCandidate, vertex: Vertex) -> bool:
    return muon.is_tight_muon_base and near_vertex_tight(muon, vertex)


def is_wz_tight_muon(muon: MuonCandidate, vertex: Vertex) -> bool:
    return is_wz_tight_muon_no_iso(muon, vertex) and passes_pf_isolation(muon, WZ_TIGHT_MAX_PF_ISO)


def is_wz_medium_muon(muon: MuonCandidate, vertex: Vertex) -> bool:
    return is_wz_tight_muon_no_iso(muon, vertex) and passes_pf_isolation(muon, WZ_MEDIUM_MAX_PF_ISO)


def is_wz_loose_muon_no_iso(muon: MuonCandidate, vertex: Vertex) -> bool:
    return (
        is_medium_ichep(muon)
        and near_vertex_tight(muon, vertex)
        and passes_track_isolation(muon, WZ_LOOSE_MAX_TRACK_ISO)
    )


def is_wz_loose_muon(muon: MuonCandidate, vertex: Vertex) -> bool:
    return is_wz_loose_muon_no_iso(muon, vertex) and passes_pf_isolation(muon, WZ_LOOSE_MAX_PF_ISO)


def is_soft_muon_ichep(muon: MuonCandidate, vertex: Vertex) -> bool:
    return is_soft_ichep(muon, vertex)


def is_medium_muon_ichep(muon: MuonCandidate) -> bool:
    return is_medium_ichep(muon)


def evaluate_tiers(muon: MuonCandidate, vertex: Vertex) -> TierFlags:
    """Evaluate every tier of one candidate against the primary vertex.

    Each no-isolation tier is computed once and reused by its isolated
    counterpart; results are identical to calling the tier functions one by one.
    """
    tight_no_iso = is_wz_tight_muon_no_iso(muon, vertex)
    loose_no_iso = is_wz_loose_muon_no_iso(muon, vertex)
    return TierFlags(
        is_medium_muon_ichep=is_medium_muon_ichep(muon),
        is_wz_medium_muon=tight_no_iso and passes_pf_isolation(muon, WZ_MEDIUM_MAX_PF_ISO),
        is_wz_tight_muon=tight_no_iso and passes_pf_isolation(muon, WZ_TIGHT_MAX_PF_ISO),
        is_wz_tight_muon_no_iso=tight_no_iso,
        is_wz_loose_muon=loose_no_iso and passes_pf_isolation(muon, WZ_LOOSE_MAX_PF_ISO),
        is_wz_loose_muon_no_iso=loose_no_iso,
        is_soft_muon_ichep=is_soft_muon_ichep(muon, vertex),
    )
