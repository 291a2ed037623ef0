"""Core data models used by the muon identification embedder.

This module defines:
- the reference point of an event (`Vertex`)
- the reconstructed objects attached to a muon (`InnerTrack`,
  `CombinedQuality`, `PFIsolation`)
- the input candidate (`MuonCandidate`) and its augmented output
  (`EmbeddedMuon`)
- the per-event container used by the loaders (`EventInput`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .errors import InvalidMomentumError

Point3 = tuple[float, float, float]


@dataclass(frozen=True)
class Vertex:
    """Reconstructed interaction point; only its position is consumed."""

    vertex_id: str
    x: float
    y: float
    z: float

    @property
    def position(self) -> Point3:
        return self.x, self.y, self.z


@dataclass(frozen=True)
class InnerTrack:
    """Tracker track of a muon, parameterized at its reference point.

    `(vx, vy, vz)` is the reference point and `(px, py, pz)` the momentum
    there. Impact parameters use the straight-line perigee approximation.
    """

    vx: float
    vy: float
    vz: float
    px: float
    py: float
    pz: float
    valid_fraction: float = 1.0
    tracker_layers_with_measurement: int = 0
    pixel_layers_with_measurement: int = 0
    high_purity: bool = False

    @property
    def pt(self) -> float:
        """Transverse momentum of the track."""
        return (self.px * self.px + self.py * self.py) ** 0.5

    def dxy(self, position: Point3) -> float:
        """Signed transverse impact parameter w.r.t. `position`."""
        x, y, _ = position
        return (-(self.vx - x) * self.py + (self.vy - y) * self.px) / self.pt

    def dz(self, position: Point3) -> float:
        """Signed longitudinal impact parameter w.r.t. `position`."""
        x, y, z = position
        pt = self.pt
        transverse = ((self.vx - x) * self.px + (self.vy - y) * self.py) / pt
        return (self.vz - z) - transverse * (self.pz / pt)


@dataclass(frozen=True)
class CombinedQuality:
    """Quality of the tracker/muon-system combined fit."""

    chi2_local_position: float = 0.0
    trk_kink: float = 0.0


@dataclass(frozen=True)
class PFIsolation:
    """Particle-flow isolation sums in a cone of radius 0.4."""

    sum_charged_hadron_pt: float = 0.0
    sum_neutral_hadron_et: float = 0.0
    sum_photon_et: float = 0.0
    sum_pu_pt: float = 0.0


@dataclass(frozen=True)
class MuonCandidate:
    """Reconstructed muon candidate with quality, isolation and base ID flags.

    The `is_*_base` flags and `is_good_muon_one_station_tight` come from the
    upstream reconstruction. The vertex-dependent ones were evaluated there
    against the event primary vertex and are passed through unchanged.
    """

    muon_id: str
    pt: float
    eta: float = 0.0
    phi: float = 0.0
    charge: int = 0
    is_global_muon: bool = False
    global_normalized_chi2: float = 0.0
    inner_track: InnerTrack | None = None
    combined_quality: CombinedQuality = field(default_factory=CombinedQuality)
    pf_isolation_r04: PFIsolation = field(default_factory=PFIsolation)
    track_iso: float = 0.0
    segment_compatibility: float = 0.0
    is_tight_muon_base: bool = False
    is_soft_muon_base: bool = False
    is_high_pt_muon_base: bool = False
    is_loose_muon_base: bool = False
    is_good_muon_one_station_tight: bool = False

    @property
    def has_inner_track(self) -> bool:
        return self.inner_track is not None

    def dxy(self, vertex: Vertex) -> float:
        """Transverse impact parameter of the inner track w.r.t. `vertex`."""
        return self._measurable_track().dxy(vertex.position)

    def dz(self, vertex: Vertex) -> float:
        """Longitudinal impact parameter of the inner track w.r.t. `vertex`."""
        return self._measurable_track().dz(vertex.position)

    def _measurable_track(self) -> InnerTrack:
        """Inner track with a defined transverse direction."""
        if self.inner_track is None:
            raise ValueError(f"Muon '{self.muon_id}' has no inner track.")
        if not self.inner_track.pt > 0.0:
            raise InvalidMomentumError(
                self.muon_id,
                self.inner_track.pt,
                quantity="inner track pt",
                needed_by="impact parameters",
            )
        return self.inner_track


@dataclass(frozen=True)
class EmbeddedMuon:
    """One input candidate plus the identification flags computed for it.

    The flag mappings are stored as read-only views, so a built record
    cannot change.
    """

    candidate: MuonCandidate
    user_ints: Mapping[str, int]
    user_floats: Mapping[str, float]
    event_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "user_ints", MappingProxyType(dict(self.user_ints)))
        object.__setattr__(self, "user_floats", MappingProxyType(dict(self.user_floats)))

    @property
    def user_data(self) -> dict[str, int | float]:
        """Merged view of integer and float flags."""
        merged: dict[str, int | float] = dict(self.user_ints)
        merged.update(self.user_floats)
        return merged

    def flag(self, name: str) -> int | float:
        """Return one embedded value by name."""
        if name in self.user_ints:
            return self.user_ints[name]
        if name in self.user_floats:
            return self.user_floats[name]
        raise KeyError(f"Muon '{self.candidate.muon_id}' has no embedded value '{name}'.")


@dataclass(frozen=True)
class EventInput:
    """One event payload with its muon candidates and reconstructed vertices."""

    event_id: str
    muons: tuple[MuonCandidate, ...]
    vertices: tuple[Vertex, ...]
