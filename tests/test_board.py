"""Unit tests for the board module."""

import unittest

import board
from board import CellContent


class TestNeighbors(unittest.TestCase):
    """Test neighbor geometry on the expert board."""

    def test_corner_edge_interior_counts(self) -> None:
        rows, cols = board.EXPERT.rows, board.EXPERT.cols
        for idx in range(rows * cols):
            row, col = divmod(idx, cols)
            on_row_edge = row in (0, rows - 1)
            on_col_edge = col in (0, cols - 1)
            expected = 3 if on_row_edge and on_col_edge else 5 if on_row_edge or on_col_edge else 8
            with self.subTest(row=row, col=col):
                self.assertEqual(len(board.get_neighbors(idx, rows, cols)), expected)

    def test_corner_neighbors(self) -> None:
        self.assertEqual(board.get_neighbors(0, 5, 8), [1, 8, 9])
        self.assertEqual(board.get_neighbors(39, 5, 8), [30, 31, 38])

    def test_interior_neighbors(self) -> None:
        # (2, 3) on a 5x8 board
        self.assertEqual(board.get_neighbors(19, 5, 8), [10, 11, 12, 18, 20, 26, 27, 28])

    def test_neighbors_exclude_self_and_are_symmetric(self) -> None:
        for idx in range(20):
            nbrs = board.get_neighbors(idx, 4, 5)
            self.assertNotIn(idx, nbrs)
            for n in nbrs:
                self.assertIn(idx, board.get_neighbors(n, 4, 5))

    def test_single_row_board(self) -> None:
        self.assertEqual(board.get_neighbors(0, 1, 3), [1])
        self.assertEqual(board.get_neighbors(1, 1, 3), [0, 2])


class TestCellContent(unittest.TestCase):
    """Test CellContent classification and lookup."""

    def test_clues(self) -> None:
        for content in board.CLUE_RANKS:
            self.assertTrue(content.is_clue)
            self.assertFalse(content.is_bad)
        self.assertFalse(CellContent.UNDUG.is_clue)
        self.assertFalse(CellContent.BOMB.is_clue)

    def test_bad_kinds(self) -> None:
        self.assertTrue(CellContent.BOMB.is_bad)
        self.assertTrue(CellContent.RUPOOR.is_bad)
        self.assertFalse(CellContent.GOLD.is_bad)

    def test_revealed(self) -> None:
        self.assertFalse(CellContent.UNDUG.is_revealed)
        self.assertTrue(CellContent.GREEN.is_revealed)
        self.assertTrue(CellContent.BOMB.is_revealed)

    def test_clue_ranges(self) -> None:
        self.assertEqual(
            [board.CLUE_RANGES[c] for c in board.CLUE_RANKS],
            [(0, 0), (1, 2), (3, 4), (5, 6), (7, 8)])

    def test_from_symbol(self) -> None:
        self.assertIs(CellContent.from_symbol('G'), CellContent.GREEN)
        self.assertIs(CellContent.from_symbol('g'), CellContent.GREEN)
        self.assertIs(CellContent.from_symbol('2'), CellContent.RED)
        self.assertIs(CellContent.from_symbol('X'), CellContent.BOMB)
        self.assertIs(CellContent.from_symbol('.'), CellContent.UNDUG)
        self.assertIs(CellContent.from_symbol('Silver'), CellContent.SILVER)
        self.assertIs(CellContent.from_symbol('rupoor'), CellContent.RUPOOR)

    def test_from_symbol_unknown(self) -> None:
        with self.assertRaises(ValueError):
            CellContent.from_symbol('diamond')
        with self.assertRaises(ValueError):
            CellContent.from_symbol('7')


class TestConfig(unittest.TestCase):
    """Test board configuration and presets."""

    def test_expert_is_reference_board(self) -> None:
        self.assertEqual(board.EXPERT, board.BoardConfig(rows=5, cols=8, total_bad=16))
        self.assertIs(board.PRESETS['expert'], board.EXPERT)

    def test_presets_fit(self) -> None:
        for name, config in board.PRESETS.items():
            with self.subTest(name=name):
                self.assertLessEqual(config.total_bad, config.rows * config.cols)

    def test_make_config_rejects_too_many_bad(self) -> None:
        with self.assertRaises(ValueError):
            board.make_config(2, 2, 5)
        with self.assertRaises(ValueError):
            board.make_config(2, 2, -1)

    def test_make_config_rejects_empty_board(self) -> None:
        with self.assertRaises(ValueError):
            board.make_config(0, 8, 0)

    def test_make_config_allows_full_board(self) -> None:
        self.assertEqual(board.make_config(2, 2, 4).total_bad, 4)


class TestParseBoard(unittest.TestCase):
    """Test board text parsing and formatting."""

    TEXT = """
        G . . B
        . . X .
        4 . . P
    """

    def setUp(self) -> None:
        self.config = board.make_config(3, 4, 3)

    def test_parse(self) -> None:
        cells = board.parse_board(self.TEXT, self.config)
        self.assertEqual(len(cells), 12)
        self.assertIs(cells[0], CellContent.GREEN)
        self.assertIs(cells[3], CellContent.BLUE)
        self.assertIs(cells[6], CellContent.BOMB)
        self.assertIs(cells[8], CellContent.GOLD)
        self.assertIs(cells[11], CellContent.RUPOOR)
        self.assertEqual(cells.count(CellContent.UNDUG), 7)

    def test_format_inverts_parse(self) -> None:
        cells = board.parse_board(self.TEXT, self.config)
        self.assertEqual(board.format_board(cells, self.config), "G..B\n..X.\nY..P")
        self.assertEqual(board.parse_board(board.format_board(cells, self.config), self.config), cells)

    def test_wrong_row_count(self) -> None:
        with self.assertRaises(ValueError):
            board.parse_board("....\n....", self.config)

    def test_wrong_row_length(self) -> None:
        with self.assertRaises(ValueError):
            board.parse_board("....\n...\n....", self.config)

    def test_unknown_symbol(self) -> None:
        with self.assertRaises(ValueError):
            board.parse_board("....\n..Q.\n....", self.config)


if __name__ == '__main__':
    unittest.main()
