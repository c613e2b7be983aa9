"""Board geometry, cell contents and board text parsing."""

import enum
from collections import namedtuple
from typing import Dict, List, Tuple


# Board dimensions and the fixed number of bad items hidden in it
BoardConfig = namedtuple('BoardConfig', ['rows', 'cols', 'total_bad'])


class CellContent(enum.Enum):
    """What the player found in a cell.

    Rupees are clues bounding the number of bad items around them. Rupoors
    and bombs are both bad items and are treated identically by the solver.
    """
    UNDUG = 'undug'
    GREEN = 'green'
    BLUE = 'blue'
    RED = 'red'
    SILVER = 'silver'
    GOLD = 'gold'
    RUPOOR = 'rupoor'
    BOMB = 'bomb'

    @property
    def is_clue(self) -> bool:
        return self in CLUE_RANGES

    @property
    def is_bad(self) -> bool:
        return self in (CellContent.RUPOOR, CellContent.BOMB)

    @property
    def is_revealed(self) -> bool:
        return self is not CellContent.UNDUG

    @property
    def symbol(self) -> str:
        return _CONTENT_SYMBOLS[self]

    @classmethod
    def from_symbol(cls, text: str) -> 'CellContent':
        """Resolve a board symbol ('G', '2', 'X' ...) or a content name ('green').

        Raises:
            ValueError: If the text names no content.
        """
        key = text.strip()
        if len(key) == 1 and key.upper() in SYMBOLS:
            return SYMBOLS[key.upper()]
        try:
            return cls(key.lower())
        except ValueError:
            raise ValueError(f"Unknown cell content: {text!r}") from None


# Bad-neighbor range (min, max) reported by each rupee
CLUE_RANGES: Dict[CellContent, Tuple[int, int]] = {
    CellContent.GREEN: (0, 0),
    CellContent.BLUE: (1, 2),
    CellContent.RED: (3, 4),
    CellContent.SILVER: (5, 6),
    CellContent.GOLD: (7, 8),
}

# Rupees in rank order, so clues can also be written as 0-4
CLUE_RANKS = [CellContent.GREEN, CellContent.BLUE, CellContent.RED,
              CellContent.SILVER, CellContent.GOLD]

_CONTENT_SYMBOLS = {
    CellContent.UNDUG: '.',
    CellContent.GREEN: 'G',
    CellContent.BLUE: 'B',
    CellContent.RED: 'R',
    CellContent.SILVER: 'S',
    CellContent.GOLD: 'Y',
    CellContent.RUPOOR: 'P',
    CellContent.BOMB: 'X',
}

SYMBOLS: Dict[str, CellContent] = {s: c for c, s in _CONTENT_SYMBOLS.items()}
SYMBOLS.update({str(rank): content for rank, content in enumerate(CLUE_RANKS)})


def make_config(rows: int, cols: int, total_bad: int) -> BoardConfig:
    """Build a validated board configuration.

    Raises:
        ValueError: If the grid is empty or holds fewer cells than bad items.
    """
    if rows <= 0 or cols <= 0:
        raise ValueError(f"Board dimensions must be positive, got {rows}x{cols}")
    if not 0 <= total_bad <= rows * cols:
        raise ValueError(
            f"Bad item count {total_bad} does not fit a {rows}x{cols} board")
    return BoardConfig(rows=rows, cols=cols, total_bad=total_bad)


# Thrill Digger difficulties
BEGINNER = make_config(4, 5, 4)
INTERMEDIATE = make_config(5, 6, 8)
EXPERT = make_config(5, 8, 16)

PRESETS = {
    'beginner': BEGINNER,
    'intermediate': INTERMEDIATE,
    'expert': EXPERT,
}


def get_neighbors(idx: int, rows: int, cols: int) -> List[int]:
    """Get the indices of all cells touching a cell, diagonals included.

    Args:
        idx: Flat cell index (row * cols + col).
        rows: Number of board rows.
        cols: Number of board columns.

    Returns:
        Neighbor indices in row-major order: 3 for a corner, 5 for an edge,
        8 otherwise.
    """
    row, col = divmod(idx, cols)
    neighbors = []
    for dr in [-1, 0, 1]:
        for dc in [-1, 0, 1]:
            if dr == 0 and dc == 0:
                continue
            nr, nc = row + dr, col + dc
            if 0 <= nr < rows and 0 <= nc < cols:
                neighbors.append(nr * cols + nc)
    return neighbors


def parse_board(text: str, config: BoardConfig) -> List[CellContent]:
    """Parse a board drawn one row per line into a flat content list.

    Args:
        text: Board text; whitespace within a row and blank lines are ignored.
        config: Expected board dimensions.

    Returns:
        Flat list of rows * cols contents in row-major order.

    Raises:
        ValueError: If the shape does not match or a symbol is unknown.
    """
    lines = [''.join(line.split()) for line in text.splitlines()]
    lines = [line for line in lines if line]
    if len(lines) != config.rows:
        raise ValueError(f"Expected {config.rows} rows, got {len(lines)}")

    cells = []
    for row, line in enumerate(lines):
        if len(line) != config.cols:
            raise ValueError(
                f"Row {row} has {len(line)} cells, expected {config.cols}")
        for symbol in line:
            if symbol.upper() not in SYMBOLS:
                raise ValueError(f"Unknown cell symbol {symbol!r} in row {row}")
            cells.append(SYMBOLS[symbol.upper()])
    return cells


def format_board(cells: List[CellContent], config: BoardConfig) -> str:
    """Write a flat content list back out in the parse_board format."""
    return '\n'.join(
        ''.join(cells[row * config.cols + col].symbol for col in range(config.cols))
        for row in range(config.rows)
    )
