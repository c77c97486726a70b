# =========== START of encoders.py ===========
"""Binary frame formats for streaming generations.

All formats are row-major: row ``y`` holds the cells ``(0, y) .. (width-1, y)``.
Multi-byte words are little-endian.

- dense cells: one byte per cell, the raw state value.
- dense pixels: one packed RGB word per cell (see ``colors.pack_rgb``).
- sparse pixels: one word per non-empty cell, ``x`` in bits 0-11, ``y`` in
  bits 12-23 and the state in bits 24-31, followed by ``0xFFFFFFFF``.
"""
from __future__ import annotations
from typing import BinaryIO, Callable, Dict, List, Optional, Tuple

import numpy as np

from .logging_config import DETAIL_LEVEL_NUM, logger
from .enums import FrameProtocol, GridArray
from .colors import pixel_lookup_table


END_OF_FRAME = 0xFFFFFFFF
SPARSE_COORD_LIMIT = 1 << 12

_PIXEL_TABLE = pixel_lookup_table()


class FrameWriteError(IOError):
    """A frame could not be written in full."""


def encode_dense_cells(grid: GridArray) -> bytes:
    return grid.T.astype(np.uint8, copy=False).tobytes()


def encode_dense_pixels(grid: GridArray) -> bytes:
    return _PIXEL_TABLE[grid.T].astype('<u4', copy=False).tobytes()


def check_sparse_shape(width: int, height: int):
    if width > SPARSE_COORD_LIMIT or height > SPARSE_COORD_LIMIT:
        raise ValueError(f"Sparse pixel frames address at most {SPARSE_COORD_LIMIT}x{SPARSE_COORD_LIMIT} cells, "
                         f"got {width}x{height}")


def encode_sparse_pixels(grid: GridArray) -> bytes:
    check_sparse_shape(*grid.shape)
    rows = grid.T
    ys, xs = np.nonzero(rows) # Row-major order
    states = rows[ys, xs].astype(np.uint32)
    words = np.empty(len(xs) + 1, dtype='<u4')
    words[:-1] = xs.astype(np.uint32) | (ys.astype(np.uint32) << 12) | (states << 24)
    words[-1] = END_OF_FRAME
    return words.tobytes()


def decode_sparse_pixels(data: bytes) -> List[Tuple[int, int, int]]:
    """Decode one sparse-pixel frame into ``(x, y, state)`` triples."""
    if len(data) % 4 != 0:
        raise ValueError(f"Sparse pixel frame length {len(data)} is not a multiple of 4")
    words = np.frombuffer(data, dtype='<u4')
    if len(words) == 0 or words[-1] != END_OF_FRAME:
        raise ValueError("Sparse pixel frame is missing its end-of-frame marker")
    body = words[:-1]
    if np.any(body == END_OF_FRAME):
        raise ValueError("Sparse pixel data contains more than one frame")
    xs = body & 0xFFF
    ys = (body >> 12) & 0xFFF
    states = body >> 24
    return [(int(x), int(y), int(s)) for x, y, s in zip(xs, ys, states)]


ENCODERS: Dict[FrameProtocol, Callable[[GridArray], bytes]] = {
    FrameProtocol.DENSE_CELLS: encode_dense_cells,
    FrameProtocol.DENSE_PIXELS: encode_dense_pixels,
    FrameProtocol.SPARSE_PIXELS: encode_sparse_pixels,
}


class FrameWriter:
    """Encodes the current generation and writes it to a binary sink.

    Each frame is encoded in memory and handed to the sink in a single write.
    A sink that raises or accepts fewer bytes than the frame holds causes a
    FrameWriteError; the frame is never resumed.
    """

    def __init__(self, sink: BinaryIO, protocol: FrameProtocol, shape: Optional[Tuple[int, int]] = None):
        if protocol not in ENCODERS:
            raise ValueError(f"No encoder for protocol {protocol}")
        if shape is not None and protocol == FrameProtocol.SPARSE_PIXELS:
            check_sparse_shape(*shape)
        self.sink = sink
        self.protocol = protocol
        self.encode = ENCODERS[protocol]
        self.frames_written = 0
        self.bytes_written = 0

    def write(self, grid: GridArray) -> int:
        payload = self.encode(grid)
        try:
            written = self.sink.write(payload)
            self.sink.flush()
        except OSError as e:
            raise FrameWriteError(f"Failed to write frame {self.frames_written} ({self.protocol.name}): {e}") from e
        if written is not None and written != len(payload):
            raise FrameWriteError(
                f"Short write for frame {self.frames_written} ({self.protocol.name}): "
                f"{written} of {len(payload)} bytes"
            )
        self.frames_written += 1
        self.bytes_written += len(payload)
        if logger.isEnabledFor(DETAIL_LEVEL_NUM):
            logger.detail(f"Wrote frame {self.frames_written} ({len(payload)} bytes)")  # type: ignore [attr-defined]
        return len(payload)


def create_writer(protocol: FrameProtocol, sink: Optional[BinaryIO],
                  shape: Optional[Tuple[int, int]] = None) -> Optional[FrameWriter]:
    if protocol == FrameProtocol.OFF:
        return None
    if sink is None:
        raise ValueError(f"Protocol {protocol.name} needs an output sink")
    return FrameWriter(sink, protocol, shape)


# =========== END of encoders.py ===========
