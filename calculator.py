"""Command-line Thrill Digger calculator."""

import argparse
import logging
import sys

from board import PRESETS, CellContent, make_config, parse_board
from heatmap import save_heatmap
from solver import Solver


HELP = """Commands:
  set ROW COL CONTENT   record a dug cell (undug, green, blue, red, silver,
                        gold, rupoor, bomb, or a board symbol)
  reset                 clear the board
  show                  print the board and probabilities
  image PATH            save a heatmap image
  quit                  exit"""


def print_board(solver: Solver):
    """Print current board contents to console."""
    print("\nCurrent board:")
    print("  " + " ".join(f"{c:2}" for c in range(solver.cols)))
    print("  " + "-" * (solver.cols * 3))
    for row, cells in enumerate(solver.grid):
        print(f"{row:2}|" + "".join(f" {content.symbol} " for content in cells))
    print()


def print_probabilities(solver: Solver):
    """Print each undug cell's bad probability as a percentage."""
    print("Bad probability (%):")
    print("  " + "".join(f"{c:>5}" for c in range(solver.cols)))
    for row in range(solver.rows):
        line = []
        for col in range(solver.cols):
            content = solver.cell(row, col)
            if content is CellContent.UNDUG:
                line.append(f"{solver.probability(row, col) * 100:5.0f}")
            else:
                line.append(f"{content.symbol:>5}")
        print(f"{row:2}" + "".join(line))
    print()


def print_summary(solver: Solver):
    summary = solver.summary()
    print(f"Revealed: {summary.revealed} / {solver.total_cells}    |    "
          f"Bad spots found: {summary.found_bad} / {solver.total_bad}    |    "
          f"Remaining bad: {summary.remaining_bad}")
    if solver.contradiction:
        print("Warning: revealed cells contradict each other, "
              "showing a uniform guess.")
        return

    safest = solver.safest_cells()
    if safest:
        row, col = safest[0]
        safe_pct = (1 - solver.probability(row, col)) * 100
        print(f"Safest dig: ({row}, {col}) - {safe_pct:.0f}% safe"
              + (f" (tied with {len(safest) - 1} more)" if len(safest) > 1 else ""))


def show(solver: Solver):
    print_board(solver)
    print_probabilities(solver)
    print_summary(solver)


def run_command(solver: Solver, line: str) -> bool:
    """Apply one interactive command.

    Returns:
        False if the user asked to quit, True otherwise.

    Raises:
        ValueError: If the command or its arguments are invalid.
    """
    parts = line.split()
    if not parts:
        return True

    command, args = parts[0].lower(), parts[1:]
    if command in ('quit', 'q', 'exit'):
        return False
    if command == 'help':
        print(HELP)
    elif command == 'reset':
        solver.reset()
        show(solver)
    elif command == 'show':
        show(solver)
    elif command == 'set':
        if len(args) != 3:
            raise ValueError("usage: set ROW COL CONTENT")
        try:
            row, col = int(args[0]), int(args[1])
        except ValueError:
            raise ValueError(f"invalid coordinate ({args[0]}, {args[1]})") from None
        solver.set_cell(row, col, CellContent.from_symbol(args[2]))
        solver.solve()
        show(solver)
    elif command == 'image':
        if len(args) != 1:
            raise ValueError("usage: image PATH")
        save_heatmap(solver, args[0])
        print(f"Saved heatmap to {args[0]}")
    else:
        raise ValueError(f"unknown command {command!r} (try 'help')")
    return True


def interactive(solver: Solver, stream=None):
    """Read commands until 'quit' or end of input.

    Args:
        solver: Solver to drive.
        stream: Iterable of command lines; defaults to stdin.
    """
    print("Thrill Digger calculator. Type 'help' for commands.")
    show(solver)
    stream = sys.stdin if stream is None else stream
    for line in stream:
        try:
            if not run_command(solver, line):
                break
        except ValueError as e:
            print(f"Error: {e}")


def main(argv=None) -> int:
    """Entry point with argument parsing."""
    parser = argparse.ArgumentParser(description='Thrill Digger probability calculator')
    parser.add_argument('--preset', choices=sorted(PRESETS), default='expert',
                        help='Board difficulty (default: expert)')
    parser.add_argument('--rows', type=int, help='Override the number of rows')
    parser.add_argument('--cols', type=int, help='Override the number of columns')
    parser.add_argument('--bad', type=int, help='Override the total number of bad items')
    parser.add_argument('--board', metavar='FILE',
                        help='Solve a board file once instead of running interactively')
    parser.add_argument('--image', metavar='PATH',
                        help='Save a heatmap of the solved board file to PATH')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    preset = PRESETS[args.preset]
    try:
        config = make_config(
            args.rows if args.rows is not None else preset.rows,
            args.cols if args.cols is not None else preset.cols,
            args.bad if args.bad is not None else preset.total_bad,
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    solver = Solver(config)

    if args.board is None:
        interactive(solver)
        return 0

    try:
        with open(args.board) as f:
            solver.load(parse_board(f.read(), config))
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    solver.solve()
    show(solver)
    if args.image:
        save_heatmap(solver, args.image)
        print(f"Saved heatmap to {args.image}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
