import io
import struct

import numpy as np
import pytest

from DICHROME.enums import CellState, FrameProtocol
from DICHROME.colors import pack_rgb
from DICHROME.encoders import (
    END_OF_FRAME, FrameWriteError, FrameWriter, create_writer, decode_sparse_pixels,
    encode_dense_cells, encode_dense_pixels, encode_sparse_pixels,
)


def sample_grid():
    # width 3, height 2, indexed [x, y]
    grid = np.zeros((3, 2), dtype=np.uint8)
    grid[0, 0] = CellState.BLUE
    grid[2, 0] = CellState.ORANGE
    grid[1, 1] = CellState.DEAD1
    grid[2, 1] = CellState.DEAD3
    return grid


def test_dense_cells_is_row_major():
    assert encode_dense_cells(sample_grid()) == bytes([1, 0, 2, 0, 4, 6])


def test_dense_pixels_layout_and_palette():
    data = encode_dense_pixels(sample_grid())
    assert len(data) == 3 * 2 * 4
    words = struct.unpack('<6I', data)
    assert words == (
        pack_rgb(0, 0, 255), pack_rgb(255, 255, 255), pack_rgb(255, 128, 0),
        pack_rgb(255, 255, 255), pack_rgb(136, 136, 136), pack_rgb(238, 238, 238),
    )
    # blue, green, red, 0
    assert data[:4] == bytes([255, 0, 0, 0])
    assert data[8:12] == bytes([0, 128, 255, 0])


def test_dense_pixels_remaining_colors():
    grid = np.array([[CellState.DEAD], [CellState.DEAD2]], dtype=np.uint8)
    words = struct.unpack('<2I', encode_dense_pixels(grid))
    assert words == (pack_rgb(0, 0, 0), pack_rgb(160, 160, 160))


def test_sparse_pixels_word_packing():
    data = encode_sparse_pixels(sample_grid())
    words = struct.unpack(f'<{len(data) // 4}I', data)
    assert words == (
        0 | (0 << 12) | (1 << 24),
        2 | (0 << 12) | (2 << 24),
        1 | (1 << 12) | (4 << 24),
        2 | (1 << 12) | (6 << 24),
        END_OF_FRAME,
    )


def test_sparse_pixels_round_trip():
    rng = np.random.default_rng(42)
    grid = rng.integers(0, 7, size=(70, 45), dtype=np.uint8)
    grid[69, 44] = CellState.ORANGE
    data = encode_sparse_pixels(grid)
    assert data[-4:] == b'\xff\xff\xff\xff'

    decoded = decode_sparse_pixels(data)
    expected = {(int(x), int(y), int(grid[x, y])) for x, y in zip(*np.nonzero(grid))}
    assert set(decoded) == expected
    assert len(decoded) == len(expected)
    assert [(y, x) for x, y, _ in decoded] == sorted((y, x) for x, y, _ in decoded)


def test_sparse_pixels_empty_grid_is_just_the_marker():
    assert encode_sparse_pixels(np.zeros((8, 8), dtype=np.uint8)) == b'\xff\xff\xff\xff'


def test_sparse_pixels_coordinate_limit():
    encode_sparse_pixels(np.zeros((4096, 1), dtype=np.uint8))
    with pytest.raises(ValueError):
        encode_sparse_pixels(np.zeros((4097, 1), dtype=np.uint8))


def test_decode_rejects_malformed_frames():
    with pytest.raises(ValueError):
        decode_sparse_pixels(b'\x01\x02\x03')
    with pytest.raises(ValueError):
        decode_sparse_pixels(struct.pack('<I', 1 << 24))
    with pytest.raises(ValueError):
        decode_sparse_pixels(struct.pack('<3I', END_OF_FRAME, 1 << 24, END_OF_FRAME))


def test_writer_emits_whole_frames():
    sink = io.BytesIO()
    writer = FrameWriter(sink, FrameProtocol.DENSE_CELLS)
    grid = sample_grid()
    assert writer.write(grid) == 6
    assert writer.write(grid) == 6
    assert sink.getvalue() == encode_dense_cells(grid) * 2
    assert writer.frames_written == 2
    assert writer.bytes_written == 12


class ShortSink(io.RawIOBase):
    def writable(self):
        return True

    def write(self, data):
        return len(data) // 2


class ClosedPipe(io.RawIOBase):
    def writable(self):
        return True

    def write(self, data):
        raise BrokenPipeError(32, "Broken pipe")


def test_writer_reports_short_writes():
    writer = FrameWriter(ShortSink(), FrameProtocol.SPARSE_PIXELS)
    with pytest.raises(FrameWriteError):
        writer.write(sample_grid())
    assert writer.frames_written == 0


def test_writer_wraps_os_errors():
    writer = FrameWriter(ClosedPipe(), FrameProtocol.DENSE_PIXELS)
    with pytest.raises(FrameWriteError) as excinfo:
        writer.write(sample_grid())
    assert isinstance(excinfo.value.__cause__, BrokenPipeError)


def test_create_writer():
    assert create_writer(FrameProtocol.OFF, None) is None
    assert create_writer(FrameProtocol.OFF, io.BytesIO()) is None
    writer = create_writer(FrameProtocol.SPARSE_PIXELS, io.BytesIO())
    assert writer.protocol == FrameProtocol.SPARSE_PIXELS
    with pytest.raises(ValueError):
        create_writer(FrameProtocol.DENSE_CELLS, None)
    with pytest.raises(ValueError):
        FrameWriter(io.BytesIO(), FrameProtocol.OFF)


def test_writer_checks_sparse_shape_up_front():
    sink = io.BytesIO()
    with pytest.raises(ValueError):
        create_writer(FrameProtocol.SPARSE_PIXELS, sink, (5000, 8))
    with pytest.raises(ValueError):
        FrameWriter(sink, FrameProtocol.SPARSE_PIXELS, (8, 4097))
    assert sink.getvalue() == b''
    assert create_writer(FrameProtocol.SPARSE_PIXELS, sink, (4096, 4096)) is not None
    assert create_writer(FrameProtocol.DENSE_CELLS, sink, (5000, 8)) is not None
