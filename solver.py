"""Thrill Digger solver logic."""

import logging
import math
from collections import namedtuple
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from board import BoardConfig, CellContent, CLUE_RANGES, EXPERT, get_neighbors

logger = logging.getLogger(__name__)

# Revealed/found/remaining counters shown under the board
Summary = namedtuple('Summary', ['revealed', 'found_bad', 'remaining_bad'])


@dataclass
class Constraint:
    """Represents a constraint from a revealed rupee.

    A rupee bounds the number of bad items around it. Bad items already dug
    up next to it are subtracted, leaving a range over its undug neighbors.
    """
    clue: int                  # Index of the rupee cell
    cells: Tuple[int, ...]     # Undug neighbors
    min_bad: int
    max_bad: int


@dataclass
class Component:
    """Frontier cells transitively linked by shared constraints."""
    cells: List[int]           # Sorted, so cells[0] identifies the component
    constraints: List[Constraint]


@dataclass
class ComponentResult:
    """Exact world counts for one component.

    counts[k] is the number of valid assignments with exactly k bad cells;
    bad_counts[i][k] is how many of those mark cells[i] bad.
    """
    cells: List[int]
    counts: np.ndarray
    bad_counts: np.ndarray


def convolve_all(polys: Iterable[np.ndarray]) -> np.ndarray:
    """Multiply generating polynomials given as coefficient arrays."""
    product = np.ones(1)
    for poly in polys:
        product = np.convolve(product, poly)
    return product


def binomial_poly(n: int) -> np.ndarray:
    """Coefficients C(n, m) for m = 0..n: ways to pick m bad cells out of n."""
    return np.array([math.comb(n, m) for m in range(n + 1)], dtype=float)


def coefficient(poly: np.ndarray, k: int) -> float:
    """Coefficient of x^k, zero outside the polynomial's degree range."""
    if 0 <= k < len(poly):
        return float(poly[k])
    return 0.0


def enumerate_component(component: Component, remaining_bad: int) -> ComponentResult:
    """Count every valid bad/safe assignment of a component using backtracking.

    Cells referenced by more constraints are decided first. After each
    decision every constraint touching the cell is checked: too many bad
    cells, or too few even if every undecided member turns out bad (which
    also covers a constraint with nothing left undecided). Branches holding
    more bad items than remain on the board are cut.

    Each call returns the counts for the cells still to decide rather than
    adding to shared totals, so suffixes are cached. A suffix depends only on
    its position, the bad counts of the constraints that still have
    undecided members, and the bad items left to place; a result computed
    with a larger allowance is truncated to serve a smaller one.

    Args:
        component: Cells to assign and the constraints over them.
        remaining_bad: Bad items not yet dug up anywhere on the board.

    Returns:
        ComponentResult with exact counts (stored as floats).
    """
    cells = component.cells
    size = len(cells)
    local = {cell: i for i, cell in enumerate(cells)}

    members = [[local[c] for c in con.cells] for con in component.constraints]
    min_bad = [con.min_bad for con in component.constraints]
    max_bad = [con.max_bad for con in component.constraints]

    cell_constraints: List[List[int]] = [[] for _ in range(size)]
    for ci, member in enumerate(members):
        for li in member:
            cell_constraints[li].append(ci)

    # Most constrained first = earliest pruning; sorted() is stable so ties
    # keep cell order
    order = sorted(range(size), key=lambda li: len(cell_constraints[li]), reverse=True)
    order_pos = {li: pos for pos, li in enumerate(order)}

    # Constraints with a member at position pos or later
    last_pos = [max(order_pos[li] for li in member) for member in members]
    active = [[ci for ci, last in enumerate(last_pos) if last >= pos]
              for pos in range(size + 1)]

    bad_so_far = [0] * len(members)
    undecided = [len(member) for member in members]
    memo: Dict[tuple, Tuple[int, np.ndarray, np.ndarray]] = {}

    def still_possible(cell: int) -> bool:
        for ci in cell_constraints[cell]:
            bad = bad_so_far[ci]
            if bad > max_bad[ci]:
                return False
            if bad + undecided[ci] < min_bad[ci]:
                return False
        return True

    def backtrack(pos: int, budget: int) -> Tuple[np.ndarray, np.ndarray]:
        """Count completions of order[pos:] with at most budget bad cells.

        Returns:
            (counts, bad) where counts[j] is the number of valid completions
            with j bad cells and bad[p][j] how many of them mark
            order[pos + p] bad.
        """
        length = size - pos
        budget = min(budget, length)
        if length == 0:
            return np.ones(1), np.zeros((0, 1))

        key = (pos,) + tuple(bad_so_far[ci] for ci in active[pos])
        cached = memo.get(key)
        if cached is not None and cached[0] >= budget:
            stored, counts, bad = cached
            if stored == budget:
                return counts, bad
            counts, bad = counts.copy(), bad.copy()
            counts[budget + 1:] = 0
            bad[:, budget + 1:] = 0
            return counts, bad

        counts = np.zeros(length + 1)
        bad = np.zeros((length, length + 1))

        cell = order[pos]
        touched = cell_constraints[cell]
        for ci in touched:
            undecided[ci] -= 1

        # Try SAFE
        if still_possible(cell):
            sub_counts, sub_bad = backtrack(pos + 1, budget)
            counts[:length] += sub_counts
            bad[1:, :length] += sub_bad

        # Try BAD
        if budget > 0:
            for ci in touched:
                bad_so_far[ci] += 1
            if still_possible(cell):
                sub_counts, sub_bad = backtrack(pos + 1, budget - 1)
                counts[1:] += sub_counts
                bad[0, 1:] = sub_counts
                bad[1:, 1:] += sub_bad
            for ci in touched:
                bad_so_far[ci] -= 1

        for ci in touched:
            undecided[ci] += 1

        memo[key] = (budget, counts, bad)
        return counts, bad

    counts, bad_by_pos = backtrack(0, remaining_bad) if remaining_bad >= 0 else (
        np.zeros(size + 1), np.zeros((size, size + 1)))
    logger.debug("component of %d cells: %d cached suffixes", size, len(memo))

    bad_counts = np.zeros((size, size + 1))
    bad_counts[np.array(order)] = bad_by_pos

    return ComponentResult(
        cells=list(cells),
        counts=counts.copy(),
        bad_counts=bad_counts,
    )


def combine(results: List[ComponentResult], interior_size: int,
            remaining_bad: int) -> Optional[Tuple[Dict[int, float], float]]:
    """Combine component counts with the interior pool under the global bad count.

    Each component's counts are a polynomial in x (x^k = k bad items in that
    component), the interior contributes sum C(n, m) x^m, and the product's
    x^remaining_bad coefficient is the number of valid worlds.

    Args:
        results: Enumerated components.
        interior_size: Number of undug cells touching no rupee.
        remaining_bad: Bad items not yet dug up.

    Returns:
        (frontier probabilities by cell, shared interior probability), or
        None if no world is valid.
    """
    interior_poly = binomial_poly(interior_size)
    components_poly = convolve_all(r.counts for r in results)
    total_ways = coefficient(np.convolve(components_poly, interior_poly), remaining_bad)
    if total_ways <= 0:
        return None

    frontier_probs = {}
    for i, result in enumerate(results):
        others = convolve_all(
            [interior_poly] + [r.counts for j, r in enumerate(results) if j != i])
        weights = np.array([coefficient(others, remaining_bad - k)
                            for k in range(len(result.counts))])
        numerators = result.bad_counts @ weights
        for cell, numerator in zip(result.cells, numerators):
            frontier_probs[cell] = float(numerator) / total_ways

    # A given interior cell is one of the m bad ones in C(n-1, m-1) of the
    # C(n, m) interior layouts
    interior_numerator = 0.0
    for m in range(1, min(interior_size, remaining_bad) + 1):
        interior_numerator += (math.comb(interior_size - 1, m - 1)
                               * coefficient(components_poly, remaining_bad - m))

    return frontier_probs, interior_numerator / total_ways


class Solver:
    """Computes the chance that each undug cell hides a bad item.

    Owns the board contents and the probabilities from the last solve().
    """

    def __init__(self, config: BoardConfig = EXPERT):
        """Initialize an empty board.

        Args:
            config: Board dimensions and total bad item count.
        """
        self.config = config
        self.rows = config.rows
        self.cols = config.cols
        self.total_cells = config.rows * config.cols
        self.total_bad = config.total_bad
        self.neighbors = [get_neighbors(i, self.rows, self.cols)
                          for i in range(self.total_cells)]

        self.cells: List[CellContent] = []
        self.probabilities: List[float] = []
        # Set by solve() when no layout of bad items fits the revealed cells
        self.contradiction = False
        self.reset()

    def reset(self):
        """Clear the board back to all undug cells at the flat prior."""
        self.cells = [CellContent.UNDUG] * self.total_cells
        prior = self.total_bad / self.total_cells
        self.probabilities = [prior] * self.total_cells
        self.contradiction = False

    def index(self, row: int, col: int) -> int:
        """Flat index of a cell.

        Raises:
            ValueError: If the coordinate is off the board.
        """
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise ValueError(
                f"invalid coordinate ({row}, {col}) for a {self.rows}x{self.cols} board")
        return row * self.cols + col

    def set_cell(self, row: int, col: int, content):
        """Record what was found in a cell. Probabilities update on solve().

        Args:
            row: Row index.
            col: Column index.
            content: CellContent or its value ('green', 'bomb' ...).
        """
        idx = self.index(row, col)
        self.cells[idx] = CellContent(content)

    def load(self, cells: List[CellContent]):
        """Replace every cell at once, e.g. with board.parse_board() output."""
        if len(cells) != self.total_cells:
            raise ValueError(f"Expected {self.total_cells} cells, got {len(cells)}")
        self.cells = [CellContent(c) for c in cells]

    def cell(self, row: int, col: int) -> CellContent:
        return self.cells[self.index(row, col)]

    def probability(self, row: int, col: int) -> float:
        return self.probabilities[self.index(row, col)]

    @property
    def grid(self) -> List[List[CellContent]]:
        return [self.cells[r * self.cols:(r + 1) * self.cols] for r in range(self.rows)]

    def summary(self) -> Summary:
        revealed = sum(1 for c in self.cells if c.is_revealed)
        found_bad = sum(1 for c in self.cells if c.is_bad)
        return Summary(revealed, found_bad, self.total_bad - found_bad)

    def safest_cells(self) -> List[Tuple[int, int]]:
        """Undug cells sharing the lowest bad probability, in board order."""
        undug = [i for i, c in enumerate(self.cells) if c is CellContent.UNDUG]
        if not undug:
            return []
        best = min(self.probabilities[i] for i in undug)
        return [divmod(i, self.cols) for i in undug if self.probabilities[i] == best]

    def solve(self):
        """Recompute every cell's bad probability from the current contents.

        Never raises for board contents: if the revealed cells contradict
        each other, undug cells fall back to a uniform probability and
        self.contradiction is set.
        """
        probs = [0.0] * self.total_cells
        self.contradiction = False

        undug = []
        clues = []
        found_bad = 0
        for i, content in enumerate(self.cells):
            if content.is_bad:
                probs[i] = 1.0
                found_bad += 1
            elif content.is_clue:
                probs[i] = 0.0
                clues.append(i)
            else:
                undug.append(i)

        remaining_bad = self.total_bad - found_bad
        constraints, consistent = self._build_constraints(clues)
        logger.debug("%d undug, %d constraints, %d bad remaining",
                     len(undug), len(constraints), remaining_bad)

        if not undug:
            self.contradiction = remaining_bad != 0 or not consistent
        elif remaining_bad <= 0:
            # Every bad item is dug up, so every undug cell is safe
            self.contradiction = (remaining_bad < 0 or not consistent
                                  or any(c.min_bad > 0 for c in constraints))
            for idx in undug:
                probs[idx] = 0.0
        elif not consistent:
            self.contradiction = True
        elif not constraints:
            self._fill_uniform(probs, undug, remaining_bad)
        else:
            self.contradiction = not self._solve_constraints(
                probs, undug, constraints, remaining_bad)

        if self.contradiction:
            logger.warning("Revealed cells are contradictory; "
                           "using a uniform probability for undug cells")
            if undug and remaining_bad > 0:
                self._fill_uniform(probs, undug, remaining_bad)

        self.probabilities = [min(1.0, max(0.0, p)) for p in probs]

    def _fill_uniform(self, probs: List[float], undug: List[int], remaining_bad: int):
        p = remaining_bad / len(undug)
        for idx in undug:
            probs[idx] = p

    def _build_constraints(self, clues: List[int]) -> Tuple[List[Constraint], bool]:
        """Build constraint list from all revealed rupees.

        Returns:
            Tuple of (constraints, consistent). consistent is False if some
            rupee already has more bad neighbors than it allows, or too few
            undug neighbors left to reach its minimum.
        """
        constraints = []
        consistent = True
        for clue in clues:
            low, high = CLUE_RANGES[self.cells[clue]]
            known_bad = 0
            undug = []
            for n in self.neighbors[clue]:
                if self.cells[n].is_bad:
                    known_bad += 1
                elif self.cells[n] is CellContent.UNDUG:
                    undug.append(n)

            if known_bad > high or known_bad + len(undug) < low:
                consistent = False
            if not undug:
                continue

            constraints.append(Constraint(
                clue=clue,
                cells=tuple(undug),
                min_bad=min(max(0, low - known_bad), len(undug)),
                max_bad=min(max(0, high - known_bad), len(undug)),
            ))
        return constraints, consistent

    def _find_components(self, frontier: List[int],
                         constraints: List[Constraint]) -> List[Component]:
        """Group frontier cells into components that share constraints.

        Args:
            frontier: Sorted undug cells touching at least one rupee.
            constraints: Constraints over those cells.

        Returns:
            Components ordered by their smallest cell, cells sorted within.
        """
        position = {cell: i for i, cell in enumerate(frontier)}

        # Union-Find over frontier positions; find() compresses paths in place
        parent = list(range(len(frontier)))

        def find(x):
            if parent[x] != x:
                parent[x] = find(parent[x])
            return parent[x]

        def union(x, y):
            px, py = find(x), find(y)
            if px != py:
                parent[px] = py

        for constraint in constraints:
            first = position[constraint.cells[0]]
            for cell in constraint.cells[1:]:
                union(first, position[cell])

        groups: Dict[int, Component] = {}
        for i, cell in enumerate(frontier):
            root = find(i)
            if root not in groups:
                groups[root] = Component(cells=[], constraints=[])
            groups[root].cells.append(cell)

        for constraint in constraints:
            groups[find(position[constraint.cells[0]])].constraints.append(constraint)

        return sorted(groups.values(), key=lambda comp: comp.cells[0])

    def _solve_constraints(self, probs: List[float], undug: List[int],
                           constraints: List[Constraint], remaining_bad: int) -> bool:
        """Fill in probabilities for undug cells. Returns False on contradiction."""
        frontier = sorted({cell for con in constraints for cell in con.cells})
        frontier_set = set(frontier)
        interior = [idx for idx in undug if idx not in frontier_set]

        components = self._find_components(frontier, constraints)
        results = []
        for component in components:
            result = enumerate_component(component, remaining_bad)
            logger.debug("component at %d: %d cells, %d constraints, %d worlds",
                         component.cells[0], len(component.cells),
                         len(component.constraints), int(result.counts.sum()))
            results.append(result)

        combined = combine(results, len(interior), remaining_bad)
        if combined is None:
            return False

        frontier_probs, interior_prob = combined
        for cell, p in frontier_probs.items():
            probs[cell] = p
        for idx in interior:
            probs[idx] = interior_prob
        return True
