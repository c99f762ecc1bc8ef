"""Tests for densityMD.electron_table."""

import logging

import numpy as np
import pytest

from densityMD.electron_table import (
    ElectronTable,
    ElectronTableError,
    electron_weights,
    read_electron_table,
)


def _write(tmp_path, text):
    path = tmp_path / "electrons.dat"
    path.write_text(text)
    return path


class TestElectronTable:
    """Tests for the sorted name lookup."""

    def test_lookup_found_and_missing(self):
        table = ElectronTable([("OW", 8), ("HW", 1), ("C", 6)])
        assert table.lookup("OW") == 8
        assert table.lookup("HW") == 1
        assert table.lookup("N") is None
        assert "C" in table
        assert "N" not in table
        assert len(table) == 3

    def test_names_are_sorted_by_code_point(self):
        table = ElectronTable([("b", 1), ("C", 6), ("a", 2), ("B", 5)])
        assert table.names == ["B", "C", "a", "b"]

    def test_lookup_is_independent_of_insertion_order(self):
        entries = [("OW", 8), ("HW1", 1), ("HW2", 1), ("NA", 11), ("CL", 17)]
        forward = ElectronTable(entries)
        backward = ElectronTable(reversed(entries))
        for name, _ in entries:
            assert forward.lookup(name) == backward.lookup(name)

    def test_duplicate_names_keep_first_entry(self):
        table = ElectronTable([("OW", 8), ("HW", 1), ("OW", 10)])
        assert table.lookup("OW") == 8

    def test_lookup_is_case_sensitive(self):
        table = ElectronTable([("OW", 8)])
        assert table.lookup("ow") is None


class TestReadElectronTable:
    """Tests for read_electron_table()."""

    def test_reads_entries(self, tmp_path, caplog):
        path = _write(tmp_path, "3\nOW = 8\nHW1=1\n  NA   =  11  sodium\n")
        with caplog.at_level(logging.INFO, logger="densityMD.electron_table"):
            table = read_electron_table(path)
        assert len(table) == 3
        assert table.lookup("NA") == 11
        assert table.lookup("HW1") == 1
        assert "Read 3 atom types" in caplog.text

    def test_leading_blank_lines_and_extra_lines_ignored(self, tmp_path):
        path = _write(tmp_path, "\n\n1\nOW = 8\nnot an entry\n")
        table = read_electron_table(path)
        assert table.names == ["OW"]

    def test_zero_entries(self, tmp_path):
        assert len(read_electron_table(_write(tmp_path, "0\n"))) == 0

    def test_missing_file_raises_oserror(self, tmp_path):
        with pytest.raises(OSError):
            read_electron_table(tmp_path / "absent.dat")

    def test_empty_file_raises(self, tmp_path):
        with pytest.raises(ElectronTableError, match="empty"):
            read_electron_table(_write(tmp_path, "\n  \n"))

    def test_non_integer_count_raises(self, tmp_path):
        with pytest.raises(ElectronTableError, match="Invalid number of atom types"):
            read_electron_table(_write(tmp_path, "two\nOW = 8\n"))

    def test_negative_count_raises(self, tmp_path):
        with pytest.raises(ElectronTableError, match="Invalid number of atom types"):
            read_electron_table(_write(tmp_path, "-1\n"))

    def test_too_few_entries_raises(self, tmp_path):
        with pytest.raises(ElectronTableError, match="declares 3 atom types but only 2"):
            read_electron_table(_write(tmp_path, "3\nOW = 8\nHW = 1\n"))

    def test_malformed_entry_raises(self, tmp_path):
        with pytest.raises(ElectronTableError, match="entry 2"):
            read_electron_table(_write(tmp_path, "2\nOW = 8\nHW : 1\n"))

    def test_error_is_a_value_error(self):
        assert issubclass(ElectronTableError, ValueError)


class TestElectronWeights:
    """Tests for electron_weights()."""

    def test_electrons_minus_charge(self):
        table = ElectronTable([("OW", 8), ("HW", 1)])
        weights, missing = electron_weights(table, ["OW", "HW", "HW"], np.array([-0.8, 0.4, 0.4]))
        np.testing.assert_allclose(weights, [8.8, 0.6, 0.6])
        assert not missing.any()

    def test_unknown_names_get_zero_and_are_flagged(self):
        table = ElectronTable([("OW", 8)])
        weights, missing = electron_weights(table, ["OW", "XX"], np.array([0.0, 0.5]))
        np.testing.assert_allclose(weights, [8.0, 0.0])
        np.testing.assert_array_equal(missing, [False, True])

    def test_incommensurate_inputs_raise(self):
        with pytest.raises(ValueError, match="incommensurate"):
            electron_weights(ElectronTable([]), ["OW"], np.array([0.0, 1.0]))
