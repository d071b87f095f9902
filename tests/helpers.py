import numpy as np

from block_blast.game import BLOCK_COLORS, Board, Piece, as_shape


def make_piece(rows, color=BLOCK_COLORS[0], piece_id="test-0"):
    return Piece(id=piece_id, base_name=piece_id.split("-")[0], shape=as_shape(rows), color=color)


def filled_board(height=8, width=8, gaps=()):
    """Board with every cell occupied except the (row, col) cells in `gaps`."""
    board = Board(height, width)
    board.grid[:, :] = 1
    for row, col in gaps:
        board.grid[row, col] = 0
    return board


def occupancy(board):
    return (board.grid != 0).astype(np.int8)
