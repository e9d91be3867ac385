"""
Tests for the binary format and ASCII/CSV files.
"""

import struct

import numpy as np
import pytest

from pymatrix import ComplexDoubleMatrix, ComplexFloatMatrix, DoubleMatrix, FloatMatrix
from pymatrix.core.exceptions import MatrixFormatError


class TestBinaryFormat:

    @pytest.mark.parametrize("cls,values", [
        (DoubleMatrix, [[1.5, -2.0], [3.25, 4.0], [0.0, 1e-300]]),
        (FloatMatrix, [[1.5, -2.0], [3.25, 4.0], [0.0, 7.0]]),
        (ComplexDoubleMatrix, [[1 + 2j, -3j], [0.5, 4 - 4j], [0, 1]]),
        (ComplexFloatMatrix, [[1 + 2j, -3j], [0.5, 4 - 4j], [0, 1]]),
    ])
    def test_round_trip(self, tmp_path, cls, values):
        path = tmp_path / "m.bin"
        original = cls.from_rows(values)
        original.save(path)
        assert cls.load(path).equals(original)

    def test_header_layout(self, tmp_path):
        path = tmp_path / "m.bin"
        DoubleMatrix.from_rows([[1.0, 2.0, 3.0]]).save(path)
        raw = path.read_bytes()
        (tag_length,) = struct.unpack('>H', raw[:2])
        assert raw[2:2 + tag_length] == b'double'
        columns, rows, count = struct.unpack('>iii', raw[2 + tag_length:14 + tag_length])
        assert (columns, rows, count) == (3, 1, 3)
        np.testing.assert_array_equal(
            np.frombuffer(raw[14 + tag_length:], dtype='>f8'), [1.0, 2.0, 3.0]
        )

    def test_complex_counts_components(self, tmp_path):
        path = tmp_path / "c.bin"
        ComplexFloatMatrix.from_rows([[1 + 1j, 2]]).save(path)
        raw = path.read_bytes()
        assert raw[2:7] == b'float'
        assert struct.unpack('>i', raw[15:19])[0] == 4

    def test_wrong_type_rejected(self, tmp_path):
        path = tmp_path / "m.bin"
        FloatMatrix.ones(2, 2).save(path)
        with pytest.raises(MatrixFormatError, match="not of the correct type") as excinfo:
            DoubleMatrix.load(path)
        assert excinfo.value.path == str(path)

    def test_truncated_file(self, tmp_path):
        path = tmp_path / "m.bin"
        DoubleMatrix.ones(2, 2).save(path)
        path.write_bytes(path.read_bytes()[:-4])
        with pytest.raises(MatrixFormatError, match="unexpected end of file"):
            DoubleMatrix.load(path)

    def test_inconsistent_count(self, tmp_path):
        path = tmp_path / "m.bin"
        tag = b'double'
        path.write_bytes(struct.pack('>H', len(tag)) + tag + struct.pack('>iii', 2, 2, 3)
                         + np.zeros(3, dtype='>f8').tobytes())
        with pytest.raises(MatrixFormatError, match="do not form a 2x2"):
            DoubleMatrix.load(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            DoubleMatrix.load(tmp_path / "absent.bin")


class TestTextFormats:

    def test_load_ascii(self, tmp_path):
        path = tmp_path / "m.txt"
        path.write_text("1 2 3\n4\t5  6\n\n")
        m = DoubleMatrix.load_ascii(path)
        assert m.equals(DoubleMatrix.from_rows([[1, 2, 3], [4, 5, 6]]))

    def test_load_csv(self, tmp_path):
        path = tmp_path / "m.csv"
        path.write_text("1, 2\n3,4\n")
        assert DoubleMatrix.load_csv(path).equals(DoubleMatrix.from_rows([[1, 2], [3, 4]]))

    def test_changing_column_count(self, tmp_path):
        path = tmp_path / "m.txt"
        path.write_text("1 2 3\n4 5\n")
        with pytest.raises(MatrixFormatError, match="Number of elements changes") as excinfo:
            DoubleMatrix.load_ascii(path)
        assert excinfo.value.line == 2

    def test_unparsable(self, tmp_path):
        path = tmp_path / "m.csv"
        path.write_text("1,abc\n")
        with pytest.raises(MatrixFormatError, match="cannot parse"):
            DoubleMatrix.load_csv(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "m.txt"
        path.write_text("")
        assert DoubleMatrix.load_ascii(path).is_empty()

    def test_save_ascii_round_trip(self, tmp_path, rng):
        path = tmp_path / "m.txt"
        original = DoubleMatrix.from_array(rng.standard_normal((3, 2)))
        original.save_ascii(path)
        assert DoubleMatrix.load_ascii(path).equals(original)

    def test_complex_ascii_round_trip(self, tmp_path):
        path = tmp_path / "c.txt"
        original = ComplexDoubleMatrix.from_rows([[1 + 2j, -1j]])
        original.save_ascii(path)
        assert ComplexDoubleMatrix.load_ascii(path).equals(original)
