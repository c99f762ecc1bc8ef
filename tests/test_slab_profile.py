"""Tests for densityMD.density.SlabProfile."""

import logging

import numpy as np
import pytest

from densityMD.density import NoFramesError, SlabProfile, symmetrize
from densityMD.utils import AMU_PER_NM3_TO_KG_PER_M3


class TestConstruction:
    """Tests for SlabProfile configuration checks."""

    def test_initial_state(self):
        profile = SlabProfile(10, axis='Z', ngroups=2, density_type='number')
        assert profile.bins.shape == (2, 10)
        assert profile.axis == 2
        assert profile.progress == 'initialized'
        assert profile.nframes == 0

    @pytest.mark.parametrize("nslices", [0, -3])
    def test_non_positive_slices_raise(self, nslices):
        with pytest.raises(ValueError, match="number of slices"):
            SlabProfile(nslices)

    def test_invalid_axis_raises(self):
        with pytest.raises(ValueError, match="Invalid axis"):
            SlabProfile(10, axis='W')

    def test_invalid_groups_raise(self):
        with pytest.raises(ValueError, match="ngroups"):
            SlabProfile(10, ngroups=0)

    def test_invalid_density_type_raises(self):
        with pytest.raises(ValueError, match="density_type"):
            SlabProfile(10, density_type='polarisation')


class TestAccumulation:
    """Tests for start_frame / deposit / finalize."""

    def test_single_atom_in_cubic_box(self):
        profile = SlabProfile(10, axis='Z', density_type='number')
        profile.start_frame(np.diag([10.0, 10.0, 10.0]))
        assert profile.slice_width == pytest.approx(1.0)
        assert profile.inverse_volume == pytest.approx(0.01)

        profile.deposit(0, np.array([5.0, 5.0, 5.0]))
        density = profile.finalize()

        expected = np.zeros(10)
        expected[5] = 0.01
        np.testing.assert_allclose(density[0], expected)
        assert profile.progress == 'finalized'

    def test_mass_density_is_converted(self):
        profile = SlabProfile(10, density_type='mass')
        profile.start_frame(np.array([10.0, 10.0, 10.0]))
        profile.deposit(0, np.array([[1.0, 1.0, 2.5]]), np.array([18.0]))
        density = profile.finalize()
        assert density[0, 2] == pytest.approx(18.0 * 0.01 * AMU_PER_NM3_TO_KG_PER_M3)

    def test_positions_outside_box_are_wrapped(self):
        profile = SlabProfile(4, axis='X', density_type='number')
        profile.start_frame(np.diag([4.0, 1.0, 1.0]))
        profile.deposit(0, np.array([[-0.5, 0.0, 0.0], [4.0, 0.0, 0.0], [9.5, 0.0, 0.0]]))
        density = profile.finalize()
        counts = density[0] / profile.inverse_volume
        np.testing.assert_allclose(counts, [1.0, 1.0, 0.0, 1.0])

    @pytest.mark.parametrize("axis", [0, 1, 2])
    def test_weight_is_conserved(self, axis):
        rng = np.random.default_rng(axis)
        box = np.array([3.0, 4.0, 5.0])
        positions = rng.uniform(-10.0, 10.0, size=(500, 3))
        weights = rng.uniform(0.5, 2.0, size=500)

        profile = SlabProfile(17, axis=axis, ngroups=1, density_type='charge')
        profile.start_frame(np.diag(box))
        profile.deposit(0, positions, weights)
        density = profile.finalize()

        slice_volume = np.prod(box) / 17
        assert density.sum() * slice_volume == pytest.approx(weights.sum(), rel=1e-12)
        assert profile.n_dropped == 0

    def test_slice_index_is_monotonic_in_coordinate(self):
        profile = SlabProfile(8, density_type='number')
        profile.start_frame(np.diag([1.0, 1.0, 8.0]))
        previous = -1
        for z in np.linspace(0.0, 7.99, 40):
            before = profile.bins[0].copy()
            profile.deposit(0, np.array([0.0, 0.0, z]))
            index = int(np.flatnonzero(profile.bins[0] != before)[0])
            assert index >= previous
            previous = index

    def test_average_over_frames_with_changing_box(self):
        profile = SlabProfile(2, density_type='number')
        profile.start_frame(np.diag([1.0, 1.0, 2.0]))
        profile.deposit(0, np.array([0.0, 0.0, 0.5]))
        profile.start_frame(np.diag([1.0, 1.0, 4.0]))
        profile.deposit(0, np.array([0.0, 0.0, 3.0]))
        density = profile.finalize()

        np.testing.assert_allclose(density[0], [0.5 * 1.0, 0.5 * 0.5])
        assert profile.mean_slice_width == pytest.approx(1.5)
        np.testing.assert_allclose(profile.slice_coordinates(), [0.0, 1.5])

    def test_groups_are_independent(self):
        profile = SlabProfile(2, ngroups=2, density_type='number')
        profile.start_frame(np.diag([1.0, 1.0, 2.0]))
        profile.deposit(1, np.array([0.0, 0.0, 1.5]))
        density = profile.finalize()
        assert density[0].sum() == 0.0
        assert density[1, 1] > 0.0


class TestStateMachine:
    """Tests for the accumulator life cycle."""

    def test_deposit_before_start_frame_raises(self):
        profile = SlabProfile(4)
        with pytest.raises(RuntimeError, match="start_frame"):
            profile.deposit(0, np.zeros(3))

    def test_deposit_after_finalize_raises(self):
        profile = SlabProfile(4)
        profile.start_frame(np.eye(3))
        profile.finalize()
        with pytest.raises(RuntimeError, match="finalized"):
            profile.deposit(0, np.zeros(3))
        with pytest.raises(RuntimeError, match="finalized"):
            profile.start_frame(np.eye(3))

    def test_finalize_twice_raises(self):
        profile = SlabProfile(4)
        profile.start_frame(np.eye(3))
        profile.finalize()
        with pytest.raises(RuntimeError, match="already been called"):
            profile.finalize()

    def test_finalize_without_frames_raises(self):
        with pytest.raises(NoFramesError):
            SlabProfile(4).finalize()

    def test_bad_group_index_raises(self):
        profile = SlabProfile(4, ngroups=2)
        profile.start_frame(np.eye(3))
        with pytest.raises(IndexError):
            profile.deposit(2, np.zeros(3))

    def test_malformed_box_raises(self):
        profile = SlabProfile(4)
        with pytest.raises(ValueError, match="positive and finite"):
            profile.start_frame(np.diag([1.0, 0.0, 1.0]))
        assert profile.nframes == 0


class TestSymmetrize:
    """Tests for symmetrize()."""

    def test_mirror_average(self):
        np.testing.assert_allclose(symmetrize(np.array([1.0, 2.0, 3.0, 6.0])), [3.5, 2.5, 2.5, 3.5])

    def test_involutive_on_symmetric_input(self):
        profile = symmetrize(np.random.default_rng(0).uniform(size=(3, 11)))
        np.testing.assert_allclose(symmetrize(profile), profile)

    def test_preserves_total(self):
        profile = np.random.default_rng(1).uniform(size=9)
        assert symmetrize(profile).sum() == pytest.approx(profile.sum())


def test_dropped_atoms_are_logged(caplog, monkeypatch):
    """Atoms whose slice index falls outside the profile are dropped and reported."""
    import densityMD.density.slab_profile as slab_module

    profile = SlabProfile(4, density_type='number')
    profile.start_frame(np.diag([1.0, 1.0, 4.0]))
    # a wrap that leaves coordinates untouched lets an out-of-box atom through
    monkeypatch.setattr(slab_module, "wrap_coordinates", lambda values, length: values)
    with caplog.at_level(logging.DEBUG, logger="densityMD.density._base"):
        profile.deposit(0, np.array([[0.0, 0.0, 1.5], [0.0, 0.0, 7.0], [0.0, 0.0, -1.0]]))
    assert profile.n_dropped == 2
    assert "dropped 2 atom(s)" in caplog.text
    assert profile.bins[0].sum() == pytest.approx(profile.inverse_volume)
