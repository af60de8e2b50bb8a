import random
from typing import List, Optional, Sequence, Tuple

BOARD_INDEXES = range(9)

# Rows, columns, diagonals of the row-major 3x3 board
WIN_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


def find_winner(board: Sequence) -> Optional[Tuple[object, List[int]]]:
    """Return ``(mark, line)`` for the first completed line, or None."""
    for a, b, c in WIN_LINES:
        if board[a] is not None and board[a] == board[b] == board[c]:
            return board[a], [a, b, c]
    return None


def is_board_full(board: Sequence) -> bool:
    return all(cell is not None for cell in board)


def assign_symbols(creator_id: str, joiner_id: str, rng=random) -> Tuple[str, str]:
    """Flip a fair coin for who plays X.

    ``rng`` is anything with a ``random()`` method returning a float in
    [0, 1). Returns ``(x_id, o_id)``.
    """
    if rng.random() < 0.5:
        return creator_id, joiner_id
    return joiner_id, creator_id
