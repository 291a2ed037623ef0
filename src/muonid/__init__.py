"""Public package exports for the tiered muon identification embedder."""

from .embedder import USER_FLOAT_KEYS, USER_INT_KEYS, MuonIdEmbedder, select_embedded
from .errors import InvalidMomentumError, MissingVertexError
from .models import (
    CombinedQuality,
    EmbeddedMuon,
    EventInput,
    InnerTrack,
    MuonCandidate,
    PFIsolation,
    Vertex,
)
from .predicates import (
    is_medium_ichep,
    is_soft_ichep,
    near_vertex_tight,
    pf_isolation_ratio_04,
    track_iso_ratio,
)
from .tiers import (
    TierFlags,
    evaluate_tiers,
    is_medium_muon_ichep,
    is_soft_muon_ichep,
    is_wz_loose_muon,
    is_wz_loose_muon_no_iso,
    is_wz_medium_muon,
    is_wz_tight_muon,
    is_wz_tight_muon_no_iso,
)
from .vertex import select_primary_vertex

__all__ = [
    "MuonIdEmbedder",
    "select_embedded",
    "USER_INT_KEYS",
    "USER_FLOAT_KEYS",
    "MissingVertexError",
    "InvalidMomentumError",
    "Vertex",
    "InnerTrack",
    "CombinedQuality",
    "PFIsolation",
    "MuonCandidate",
    "EmbeddedMuon",
    "EventInput",
    "select_primary_vertex",
    "is_medium_ichep",
    "is_soft_ichep",
    "near_vertex_tight",
    "pf_isolation_ratio_04",
    "track_iso_ratio",
    "TierFlags",
    "evaluate_tiers",
    "is_wz_tight_muon_no_iso",
    "is_wz_tight_muon",
    "is_wz_medium_muon",
    "is_wz_loose_muon_no_iso",
    "is_wz_loose_muon",
    "is_soft_muon_ichep",
    "is_medium_muon_ichep",
]
