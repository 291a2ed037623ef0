"""Unit tests for the quality, isolation and impact-parameter predicates."""

from __future__ import annotations

import unittest
from dataclasses import replace

from muonid import (
    CombinedQuality,
    InnerTrack,
    InvalidMomentumError,
    MuonCandidate,
    PFIsolation,
    Vertex,
    is_medium_ichep,
    is_soft_ichep,
    near_vertex_tight,
    pf_isolation_ratio_04,
    track_iso_ratio,
)
from muonid.tiers import is_wz_medium_muon, is_wz_tight_muon
from muonid.predicates import has_high_purity_track, is_good_global, passes_pf_isolation


def _pv() -> Vertex:
    """Primary vertex at the origin."""
    return Vertex(vertex_id="pv0", x=0.0, y=0.0, z=0.0)


def _track(**overrides) -> InnerTrack:
    """Inner track pointing straight at the origin with good hit pattern."""
    base = InnerTrack(
        vx=0.0,
        vy=0.0,
        vz=0.0,
        px=30.0,
        py=40.0,
        pz=10.0,
        valid_fraction=0.6,
        tracker_layers_with_measurement=10,
        pixel_layers_with_measurement=3,
        high_purity=True,
    )
    return replace(base, **overrides)


def _muon(**overrides) -> MuonCandidate:
    """Muon passing every tier; individual fields are overridden per test."""
    base = MuonCandidate(
        muon_id="mu0",
        pt=50.0,
        is_global_muon=True,
        global_normalized_chi2=2.0,
        inner_track=_track(),
        combined_quality=CombinedQuality(chi2_local_position=5.0, trk_kink=10.0),
        pf_isolation_r04=PFIsolation(
            sum_charged_hadron_pt=2.0,
            sum_neutral_hadron_et=3.0,
            sum_photon_et=1.0,
            sum_pu_pt=4.0,
        ),
        track_iso=1.0,
        segment_compatibility=0.5,
        is_tight_muon_base=True,
        is_soft_muon_base=True,
        is_high_pt_muon_base=False,
        is_loose_muon_base=True,
        is_good_muon_one_station_tight=True,
    )
    return replace(base, **overrides)


class TestMediumICHEP(unittest.TestCase):
    """Validate the ICHEP medium ID and its good-global switch."""

    def test_good_global_uses_relaxed_segment_threshold(self) -> None:
        """A good global muon with compatibility 0.5 passes the 0.303 threshold."""
        muon = _muon()
        self.assertTrue(is_good_global(muon))
        self.assertTrue(is_medium_ichep(muon))

    def test_low_segment_compatibility_fails(self) -> None:
        """Compatibility 0.2 is below both thresholds."""
        self.assertFalse(is_medium_ichep(_muon(segment_compatibility=0.2)))

    def test_segment_threshold_is_strict(self) -> None:
        """A compatibility exactly on the threshold does not pass."""
        self.assertFalse(is_medium_ichep(_muon(segment_compatibility=0.303)))

    def test_non_global_muon_uses_tight_segment_threshold(self) -> None:
        """Without a good global fit the threshold moves to 0.451."""
        self.assertFalse(is_medium_ichep(_muon(is_global_muon=False, segment_compatibility=0.4)))
        self.assertTrue(is_medium_ichep(_muon(is_global_muon=False, segment_compatibility=0.46)))

    def test_bad_global_fit_quantities_disable_good_global(self) -> None:
        """Any failing global-fit requirement switches to the stricter threshold."""
        for muon in (
            _muon(global_normalized_chi2=3.0),
            _muon(combined_quality=CombinedQuality(chi2_local_position=12.0, trk_kink=10.0)),
            _muon(combined_quality=CombinedQuality(chi2_local_position=5.0, trk_kink=20.0)),
        ):
            self.assertFalse(is_good_global(muon))
            self.assertFalse(is_medium_ichep(replace(muon, segment_compatibility=0.4)))

    def test_requires_loose_base_and_valid_fraction(self) -> None:
        """Loose base flag and inner-track valid fraction are both required."""
        self.assertFalse(is_medium_ichep(_muon(is_loose_muon_base=False)))
        self.assertFalse(is_medium_ichep(_muon(inner_track=_track(valid_fraction=0.49))))

    def test_missing_inner_track_fails(self) -> None:
        """A loose muon without inner track cannot pass the medium ID."""
        self.assertFalse(is_medium_ichep(_muon(inner_track=None)))


class TestIsolation(unittest.TestCase):
    """Validate relative PF and tracker isolation."""

    def test_pf_isolation_with_pileup_correction(self) -> None:
        """(2 + max(0, 3 + 1 - 2)) / 50 = 0.08."""
        muon = _muon()
        self.assertAlmostEqual(pf_isolation_ratio_04(muon), 0.08, places=12)
        self.assertTrue(passes_pf_isolation(muon, 0.15))
        self.assertTrue(passes_pf_isolation(muon, 0.40))

    def test_pileup_correction_is_clamped_at_zero(self) -> None:
        """A large PU sum cannot make the neutral component negative."""
        muon = _muon(
            pf_isolation_r04=PFIsolation(
                sum_charged_hadron_pt=5.0,
                sum_neutral_hadron_et=1.0,
                sum_photon_et=0.0,
                sum_pu_pt=10.0,
            )
        )
        self.assertAlmostEqual(pf_isolation_ratio_04(muon), 0.1, places=12)

    def test_track_iso_ratio(self) -> None:
        self.assertAlmostEqual(track_iso_ratio(_muon(track_iso=10.0)), 0.2, places=12)

    def test_pf_isolation_cut_uses_single_precision_ratio(self) -> None:
        """A ratio just below 0.15 rounds up to 0.15000000596 in single precision and fails."""
        muon = _muon(pf_isolation_r04=PFIsolation(sum_charged_hadron_pt=0.14999999999 * 50.0))
        self.assertLess(pf_isolation_ratio_04(muon), 0.15)
        self.assertFalse(passes_pf_isolation(muon, 0.15))
        self.assertTrue(passes_pf_isolation(muon, 0.40))
        self.assertFalse(is_wz_tight_muon(muon, _pv()))
        self.assertTrue(is_wz_medium_muon(muon, _pv()))

    def test_tighter_threshold_never_recovers_a_failure(self) -> None:
        """Lowering the isolation cut can only turn a pass into a fail."""
        thresholds = [0.5, 0.4, 0.2, 0.15, 0.08, 0.05, 0.0]
        for charged in (0.0, 2.0, 5.0, 10.0, 30.0):
            muon = _muon(pf_isolation_r04=PFIsolation(sum_charged_hadron_pt=charged))
            results = [passes_pf_isolation(muon, t) for t in thresholds]
            first_fail = results.index(False) if False in results else len(results)
            self.assertTrue(all(results[:first_fail]))
            self.assertFalse(any(results[first_fail:]))

    def test_non_positive_pt_raises(self) -> None:
        """Ratios are undefined for pt <= 0 and must not silently become inf/nan."""
        for pt in (0.0, -1.0):
            with self.assertRaises(InvalidMomentumError) as ctx:
                pf_isolation_ratio_04(_muon(pt=pt))
            self.assertEqual(ctx.exception.muon_id, "mu0")
            with self.assertRaises(InvalidMomentumError):
                track_iso_ratio(_muon(pt=pt))


class TestImpactParameters(unittest.TestCase):
    """Validate dxy/dz and the vertex-dependent predicates."""

    def test_dxy_dz_signs_and_values(self) -> None:
        """Perigee impact parameters for simple straight tracks."""
        pv = _pv()
        displaced_x = _muon(inner_track=_track(vx=0.01, px=0.0, py=10.0, pz=5.0))
        self.assertAlmostEqual(displaced_x.dxy(pv), -0.01, places=12)
        self.assertAlmostEqual(displaced_x.dz(pv), 0.0, places=12)

        displaced_z = _muon(inner_track=_track(vz=0.05, px=10.0, py=0.0, pz=0.0))
        self.assertAlmostEqual(displaced_z.dxy(pv), 0.0, places=12)
        self.assertAlmostEqual(displaced_z.dz(pv), 0.05, places=12)

        along_track = _muon(inner_track=_track(vx=1.0, vz=0.2, px=10.0, py=0.0, pz=10.0))
        self.assertAlmostEqual(along_track.dxy(pv), 0.0, places=12)
        self.assertAlmostEqual(along_track.dz(pv), -0.8, places=12)

    def test_impact_parameters_are_relative_to_vertex(self) -> None:
        """Moving the vertex shifts dz by the same amount."""
        muon = _muon(inner_track=_track(vz=0.05, px=10.0, py=0.0, pz=0.0))
        shifted = Vertex(vertex_id="pv1", x=0.0, y=0.0, z=0.05)
        self.assertAlmostEqual(muon.dz(shifted), 0.0, places=12)

    def test_near_vertex_tight_window(self) -> None:
        pv = _pv()
        self.assertTrue(near_vertex_tight(_muon(), pv))
        self.assertFalse(near_vertex_tight(_muon(inner_track=_track(vx=0.025, px=0.0, py=10.0)), pv))
        self.assertFalse(near_vertex_tight(_muon(inner_track=_track(vz=0.1)), pv))
        self.assertFalse(near_vertex_tight(_muon(inner_track=None), pv))

    def test_soft_ichep(self) -> None:
        """Soft ID combines station arbitration, hit pattern and a loose IP window."""
        pv = _pv()
        self.assertTrue(is_soft_ichep(_muon(), pv))
        self.assertTrue(is_soft_ichep(_muon(inner_track=_track(vz=19.0)), pv))
        self.assertFalse(is_soft_ichep(_muon(inner_track=_track(vz=20.0)), pv))
        self.assertFalse(is_soft_ichep(_muon(inner_track=_track(vx=0.35, px=0.0, py=10.0)), pv))
        self.assertFalse(is_soft_ichep(_muon(inner_track=_track(tracker_layers_with_measurement=5)), pv))
        self.assertFalse(is_soft_ichep(_muon(inner_track=_track(pixel_layers_with_measurement=0)), pv))
        self.assertFalse(is_soft_ichep(_muon(is_good_muon_one_station_tight=False), pv))
        self.assertFalse(is_soft_ichep(_muon(inner_track=None), pv))

    def test_missing_inner_track_has_no_high_purity(self) -> None:
        self.assertTrue(has_high_purity_track(_muon()))
        self.assertFalse(has_high_purity_track(_muon(inner_track=_track(high_purity=False))))
        self.assertFalse(has_high_purity_track(_muon(inner_track=None)))


if __name__ == "__main__":
    unittest.main()
