from .enums import CellState, FrameProtocol
from .grid import GenerationPair
from .rules import count_neighbors, neighbor_counts, next_state, transition, update_rows
from .scheduler import ParallelUpdateScheduler, UpdateAbortedError, partition_rows
from .encoders import (
    FrameWriter, FrameWriteError, decode_sparse_pixels,
    encode_dense_cells, encode_dense_pixels, encode_sparse_pixels,
)
