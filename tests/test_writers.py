"""Tests for densityMD.density.writers."""

import io

import numpy as np
import pytest

from densityMD.density import write_grid, write_profile


class TestWriteProfile:
    """Tests for the XVG profile writer."""

    def test_header_and_rows(self):
        sink = io.StringIO()
        write_profile(
            sink,
            np.array([0.0, 0.5]),
            np.array([[1.0, 2.0], [3.0, 4.0]]),
            title="Partial densities",
            xlabel="Box (nm)",
            ylabel="Density",
            legend=["SOL", "ION"],
        )
        lines = sink.getvalue().splitlines()
        assert lines[0].startswith("# ")
        assert '@    title "Partial densities"' in lines
        assert '@    xaxis  label "Box (nm)"' in lines
        assert '@    yaxis  label "Density"' in lines
        assert "@TYPE xy" in lines
        assert '@ s0 legend "SOL"' in lines
        assert '@ s1 legend "ION"' in lines

        rows = [line for line in lines if not line.startswith(("#", "@"))]
        assert len(rows) == 2
        np.testing.assert_allclose([float(v) for v in rows[1].split("\t")], [0.5, 2.0, 4.0])

    def test_path_sink_is_written_and_closed(self, tmp_path):
        path = tmp_path / "density.xvg"
        write_profile(path, np.arange(3.0), np.ones((1, 3)), title="t", xlabel="x", ylabel="y")
        rows = [line for line in path.read_text().splitlines() if not line.startswith(("#", "@"))]
        assert len(rows) == 3

    def test_handle_is_left_open(self):
        sink = io.StringIO()
        write_profile(sink, np.arange(2.0), np.zeros(2), title="t", xlabel="x", ylabel="y")
        assert not sink.closed

    def test_incommensurate_inputs_raise(self):
        with pytest.raises(ValueError, match="incommensurate"):
            write_profile(io.StringIO(), np.arange(3.0), np.ones((1, 2)), title="t", xlabel="x", ylabel="y")


class TestWriteGrid:
    """Tests for the height grid writer."""

    def test_block_format(self):
        sink = io.StringIO()
        grids = np.arange(12.0).reshape(2, 2, 3)
        write_grid(sink, grids, [0.25, 1.5], ["X", "Y"], "Partial mass density (kg/m^3)")
        lines = sink.getvalue().splitlines()

        assert lines[:5] == [
            "@xwidth   0.250",
            "@ywidth   1.500",
            "@xlabel X (nm)",
            "@ylabel Y (nm)",
            "@legend Partial mass density (kg/m^3)",
        ]
        body = lines[5:]
        assert body[2] == "&&"
        assert body[5] == "&&"
        assert len(body) == 6
        np.testing.assert_allclose([float(v) for v in body[4].split("\t")], [9.0, 10.0, 11.0])

    def test_grid_shape_checked(self):
        with pytest.raises(ValueError, match="ngroups, rows, cols"):
            write_grid(io.StringIO(), np.zeros((2, 2)), [1.0, 1.0], ["X", "Y"], "legend")
