"""Tests for densityMD.density.HeightGrid."""

import numpy as np
import pytest

from densityMD.density import HeightGrid, NoFramesError


class TestConstruction:
    """Tests for HeightGrid configuration checks."""

    @pytest.mark.parametrize("normal, expected", [('X', (0, 1, 2)), ('Y', (1, 0, 2)), ('Z', (2, 0, 1))])
    def test_in_plane_axes(self, normal, expected):
        assert HeightGrid((3, 4), normal_axis=normal).axes == expected

    @pytest.mark.parametrize("shape", [(0, 4), (4, -1)])
    def test_bad_shape_raises(self, shape):
        with pytest.raises(ValueError, match="I can not build a grid"):
            HeightGrid(shape)

    def test_storage_shape(self):
        assert HeightGrid((3, 5), ngroups=2).grids.shape == (2, 3, 5)


class TestAccumulation:
    """Tests for start_frame / deposit / finalize."""

    def test_single_atom_lands_in_its_column(self):
        grid = HeightGrid((4, 2), normal_axis='Z', density_type='number')
        grid.start_frame(np.diag([4.0, 2.0, 10.0]))
        assert grid.inverse_volume == pytest.approx(8 / 80.0)
        np.testing.assert_allclose(grid.widths, [1.0, 1.0])

        grid.deposit(0, np.array([2.5, 0.5, 7.0]))
        density = grid.finalize()

        expected = np.zeros((4, 2))
        expected[2, 0] = 0.1
        np.testing.assert_allclose(density[0], expected)

    def test_normal_x_uses_y_then_z(self):
        grid = HeightGrid((2, 3), normal_axis='X', density_type='number')
        grid.start_frame(np.diag([5.0, 2.0, 3.0]))
        grid.deposit(0, np.array([4.0, 1.5, 2.5]))
        density = grid.finalize()
        assert density[0, 1, 2] > 0
        assert np.count_nonzero(density) == 1

    def test_positions_are_wrapped_on_all_axes(self):
        grid = HeightGrid((2, 2), density_type='number')
        grid.start_frame(np.diag([2.0, 2.0, 2.0]))
        grid.deposit(0, np.array([[-0.5, 2.5, -9.0]]))
        density = grid.finalize()
        assert density[0, 1, 0] > 0

    def test_weight_is_conserved(self):
        rng = np.random.default_rng(5)
        box = np.array([3.0, 2.0, 6.0])
        positions = rng.uniform(-5.0, 9.0, size=(400, 3))
        weights = rng.uniform(0.1, 1.0, size=400)

        grid = HeightGrid((6, 5), normal_axis='Z', density_type='charge')
        grid.start_frame(np.diag(box))
        grid.deposit(0, positions, weights)
        density = grid.finalize()

        cell_volume = np.prod(box) / 30
        assert density.sum() * cell_volume == pytest.approx(weights.sum(), rel=1e-12)

    def test_mean_widths_over_frames(self):
        grid = HeightGrid((2, 4), normal_axis='Z')
        grid.start_frame(np.diag([2.0, 4.0, 1.0]))
        grid.start_frame(np.diag([4.0, 8.0, 1.0]))
        np.testing.assert_allclose(grid.mean_widths, [1.5, 1.5])

    def test_out_of_grid_indices_are_dropped(self, monkeypatch):
        import densityMD.density.height_grid as grid_module

        grid = HeightGrid((2, 2), density_type='number')
        grid.start_frame(np.diag([2.0, 2.0, 2.0]))
        monkeypatch.setattr(grid_module, "wrap_positions", lambda positions, box: positions)
        grid.deposit(0, np.array([[0.5, 0.5, 0.5], [2.0, 0.5, 0.5], [0.5, -0.1, 0.5]]))
        assert grid.n_dropped == 2
        assert grid.grids[0].sum() == pytest.approx(grid.inverse_volume)


class TestStateMachine:
    """Tests for the accumulator life cycle."""

    def test_deposit_before_start_frame_raises(self):
        with pytest.raises(RuntimeError, match="start_frame"):
            HeightGrid((2, 2)).deposit(0, np.zeros(3))

    def test_finalize_without_frames_raises(self):
        with pytest.raises(NoFramesError):
            HeightGrid((2, 2)).finalize()

    def test_finalize_twice_raises(self):
        grid = HeightGrid((2, 2))
        grid.start_frame(np.eye(3))
        grid.finalize()
        with pytest.raises(RuntimeError):
            grid.finalize()
