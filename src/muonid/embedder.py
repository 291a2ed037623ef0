"""Per-event embedding of identification flags into muon candidates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .errors import InvalidMomentumError, MissingVertexError
from .models import EmbeddedMuon, EventInput, MuonCandidate, Vertex
from .predicates import has_high_purity_track
from .tiers import evaluate_tiers
from .vertex import select_primary_vertex

logger = logging.getLogger(__name__)

USER_INT_KEYS: tuple[str, ...] = (
    "isTightMuon",
    "isMediumMuonICHEP",
    "isWZMediumMuon",
    "isWZTightMuon",
    "isWZTightMuonNoIso",
    "isWZLooseMuon",
    "isWZLooseMuonNoIso",
    "isSoftMuon",
    "isSoftMuonICHEP",
    "isHighPtMuon",
    "isGoodMuon",
    "highPurityTrack",
)
USER_FLOAT_KEYS: tuple[str, ...] = ("segmentCompatibility",)


@dataclass
class MuonIdEmbedder:
    """Attach the identification flags to every muon candidate of an event."""

    def embed(
        self,
        candidates: Sequence[MuonCandidate],
        vertices: Sequence[Vertex],
        event_id: str | None = None,
    ) -> list[EmbeddedMuon]:
        """Return one `EmbeddedMuon` per candidate, in input order.

        The primary vertex is selected before any candidate is looked at, so
        an event without vertices fails as a whole.
        """
        pv = select_primary_vertex(vertices)
        out = [self.embed_candidate(muon, pv, event_id=event_id) for muon in candidates]
        logger.debug(
            "Embedded IDs for %d muon(s) of event %s using vertex %s",
            len(out),
            event_id,
            pv.vertex_id,
        )
        return out

    def embed_candidate(
        self,
        muon: MuonCandidate,
        pv: Vertex,
        event_id: str | None = None,
    ) -> EmbeddedMuon:
        """Compute all flags of one candidate and build its output record."""
        if not muon.pt > 0.0:
            raise InvalidMomentumError(muon.muon_id, muon.pt)
        tiers = evaluate_tiers(muon, pv)
        user_ints = {
            "isTightMuon": int(muon.is_tight_muon_base),
            "isMediumMuonICHEP": int(tiers.is_medium_muon_ichep),
            "isWZMediumMuon": int(tiers.is_wz_medium_muon),
            "isWZTightMuon": int(tiers.is_wz_tight_muon),
            "isWZTightMuonNoIso": int(tiers.is_wz_tight_muon_no_iso),
            "isWZLooseMuon": int(tiers.is_wz_loose_muon),
            "isWZLooseMuonNoIso": int(tiers.is_wz_loose_muon_no_iso),
            "isSoftMuon": int(muon.is_soft_muon_base),
            "isSoftMuonICHEP": int(tiers.is_soft_muon_ichep),
            "isHighPtMuon": int(muon.is_high_pt_muon_base),
            "isGoodMuon": int(muon.is_good_muon_one_station_tight),
            "highPurityTrack": int(has_high_purity_track(muon)),
        }
        user_floats = {"segmentCompatibility": float(muon.segment_compatibility)}
        return EmbeddedMuon(
            candidate=muon,
            user_ints=user_ints,
            user_floats=user_floats,
            event_id=event_id,
        )

    def embed_event(self, event: EventInput) -> list[EmbeddedMuon]:
        """Run `embed` on one loaded event."""
        return self.embed(event.muons, event.vertices, event_id=event.event_id)

    def embed_events(
        self,
        events: Sequence[EventInput],
        skip_failed: bool = False,
    ) -> list[tuple[str, list[EmbeddedMuon]]]:
        """Run `embed_event` on a list of events, keeping results grouped by event.

        With `skip_failed`, events without vertices or with an invalid
        candidate are logged and left out instead of aborting the batch.
        """
        out: list[tuple[str, list[EmbeddedMuon]]] = []
        for event in events:
            try:
                embedded = self.embed_event(event)
            except (MissingVertexError, InvalidMomentumError) as exc:
                if not skip_failed:
                    raise
                logger.warning("Skipping event %s: %s", event.event_id, exc)
                continue
            out.append((event.event_id, embedded))
        return out


def select_embedded(embedded: Sequence[EmbeddedMuon], flag: str) -> list[EmbeddedMuon]:
    """Keep the records whose integer flag `flag` is set."""
    if flag not in USER_INT_KEYS:
        supported = ", ".join(USER_INT_KEYS)
        raise ValueError(f"Unknown selection flag '{flag}'. Supported flags: {supported}")
    return [m for m in embedded if m.user_ints[flag]]
