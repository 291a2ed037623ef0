"""Exceptions raised while evaluating muon identification flags."""

from __future__ import annotations


class MissingVertexError(ValueError):
    """The event has no reconstructed vertex to compute impact parameters against."""


class InvalidMomentumError(ValueError):
    """A candidate or its inner track has non-positive transverse momentum.

    `quantity` names the momentum that failed (`pt` of the candidate or
    `inner track pt`) and `needed_by` what cannot be computed without it.
    """

    def __init__(
        self,
        muon_id: str,
        pt: float,
        quantity: str = "pt",
        needed_by: str = "isolation ratios",
    ) -> None:
        super().__init__(
            f"Muon '{muon_id}' has {quantity}={pt!r}; {needed_by} need {quantity} > 0."
        )
        self.muon_id = muon_id
        self.pt = pt
        self.quantity = quantity
