"""Quality, isolation and impact-parameter predicates for muon candidates.

Every function here is pure: it reads one candidate (and, where needed, the
event primary vertex) and returns a boolean or a number. Requirements on the
inner track fail when the candidate has none.
"""

from __future__ import annotations

import struct

from .errors import InvalidMomentumError
from .models import MuonCandidate, Vertex

# Short-term medium ID used for ICHEP 2016.
GOOD_GLOBAL_MAX_NORMALIZED_CHI2 = 3.0
GOOD_GLOBAL_MAX_CHI2_LOCAL_POSITION = 12.0
GOOD_GLOBAL_MAX_TRK_KINK = 20.0
MEDIUM_MIN_VALID_FRACTION = 0.49
MEDIUM_MIN_SEGMENT_COMPAT_GOOD_GLOBAL = 0.303
MEDIUM_MIN_SEGMENT_COMPAT = 0.451

# Soft ID, ICHEP 2016 revision.
SOFT_MIN_TRACKER_LAYERS = 5
SOFT_MIN_PIXEL_LAYERS = 0
SOFT_MAX_DXY = 0.3
SOFT_MAX_DZ = 20.0

TIGHT_MAX_DXY = 0.02
TIGHT_MAX_DZ = 0.1

PU_CORRECTION_FACTOR = 0.5


def is_good_global(muon: MuonCandidate) -> bool:
    """Global muon with a well-behaved global fit and tracker/muon matching."""
    return (
        muon.is_global_muon
        and muon.global_normalized_chi2 < GOOD_GLOBAL_MAX_NORMALIZED_CHI2
        and muon.combined_quality.chi2_local_position < GOOD_GLOBAL_MAX_CHI2_LOCAL_POSITION
        and muon.combined_quality.trk_kink < GOOD_GLOBAL_MAX_TRK_KINK
    )


def is_medium_ichep(muon: MuonCandidate) -> bool:
    """ICHEP medium ID: loose base plus inner-track and segment-matching quality.

    The segment-compatibility threshold is relaxed for good global muons.
    """
    if not muon.is_loose_muon_base or muon.inner_track is None:
        return False
    min_compat = (
        MEDIUM_MIN_SEGMENT_COMPAT_GOOD_GLOBAL if is_good_global(muon) else MEDIUM_MIN_SEGMENT_COMPAT
    )
    return (
        muon.inner_track.valid_fraction > MEDIUM_MIN_VALID_FRACTION
        and muon.segment_compatibility > min_compat
    )


def pf_isolation_ratio_04(muon: MuonCandidate) -> float:
    """Delta-beta corrected relative PF isolation in a 0.4 cone."""
    _require_positive_pt(muon)
    iso = muon.pf_isolation_r04
    neutral = max(
        0.0,
        iso.sum_neutral_hadron_et + iso.sum_photon_et - PU_CORRECTION_FACTOR * iso.sum_pu_pt,
    )
    return (iso.sum_charged_hadron_pt + neutral) / muon.pt


def track_iso_ratio(muon: MuonCandidate) -> float:
    """Tracker isolation sum relative to the candidate pt."""
    _require_positive_pt(muon)
    return muon.track_iso / muon.pt


def passes_pf_isolation(muon: MuonCandidate, max_ratio: float) -> bool:
    """Relative PF isolation cut; the ratio is compared in single precision."""
    return single_precision(pf_isolation_ratio_04(muon)) < max_ratio


def passes_track_isolation(muon: MuonCandidate, max_ratio: float) -> bool:
    return track_iso_ratio(muon) < max_ratio


def near_vertex_tight(muon: MuonCandidate, vertex: Vertex) -> bool:
    """Tight impact-parameter window around the primary vertex."""
    if muon.inner_track is None:
        return False
    return abs(muon.dxy(vertex)) < TIGHT_MAX_DXY and abs(muon.dz(vertex)) < TIGHT_MAX_DZ


def is_soft_ichep(muon: MuonCandidate, vertex: Vertex) -> bool:
    """ICHEP soft ID: one-station-tight arbitration plus hit pattern and loose IP."""
    if not muon.is_good_muon_one_station_tight or muon.inner_track is None:
        return False
    track = muon.inner_track
    return (
        track.tracker_layers_with_measurement > SOFT_MIN_TRACKER_LAYERS
        and track.pixel_layers_with_measurement > SOFT_MIN_PIXEL_LAYERS
        and abs(muon.dxy(vertex)) < SOFT_MAX_DXY
        and abs(muon.dz(vertex)) < SOFT_MAX_DZ
    )


def has_high_purity_track(muon: MuonCandidate) -> bool:
    """True when an inner track exists and carries the high-purity quality bit."""
    return muon.inner_track is not None and muon.inner_track.high_purity


def _require_positive_pt(muon: MuonCandidate) -> None:
    if not muon.pt > 0.0:
        raise InvalidMomentumError(muon.muon_id, muon.pt)


def single_precision(value: float) -> float:
    """Round a double to the nearest IEEE single-precision value."""
    return struct.unpack("f", struct.pack("f", value))[0]
