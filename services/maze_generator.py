"""Procedural maze generation and grid reachability helpers."""

from __future__ import annotations

import logging
import random
from collections import deque
from collections.abc import Callable

import numpy as np

from models.session import OPEN, WALL

logger = logging.getLogger(__name__)

Cell = tuple[int, int]
Grid = list[list[int]]

# Odd coordinates are cell centres, even coordinates are the wall slots between them.
_CARVE_STEPS = ((0, -2), (2, 0), (0, 2), (-2, 0))
CARDINALS = ((0, -1), (1, 0), (0, 1), (-1, 0))

MIN_SIZE = 5


def generate_maze(
    width: int,
    height: int,
    extra_connections: int = 10,
    *,
    rng: random.Random | None = None,
) -> Grid:
    """
    Carve a connected maze and return it as a row-major grid (0=open, 1=wall).

    Recursive backtracking from (1, 1) produces a spanning tree over the odd
    cells. Start (1, 1), goal (w-2, h-2), the whole top corridor row and the
    whole right corridor column are then forced open so there is always a
    start->goal corridor. Finally up to ``10 * extra_connections`` random
    attempts knock out ``extra_connections`` interior walls that sit between
    two open cells, giving easier difficulties more than one route.
    """
    if width < MIN_SIZE or height < MIN_SIZE or width % 2 == 0 or height % 2 == 0:
        raise ValueError(f"maze dimensions must be odd and >= {MIN_SIZE}, got {width}x{height}")
    if extra_connections < 0:
        raise ValueError("extra_connections must be >= 0")
    rng = rng or random.Random()

    grid = np.full((height, width), WALL, dtype=np.int8)
    visited = np.zeros((height, width), dtype=bool)

    x, y = 1, 1
    grid[y, x] = OPEN
    visited[y, x] = True
    stack: list[Cell] = []
    while True:
        neighbours = [
            (x + dx, y + dy)
            for dx, dy in _CARVE_STEPS
            if 0 < x + dx < width - 1 and 0 < y + dy < height - 1 and not visited[y + dy, x + dx]
        ]
        if neighbours:
            nx, ny = rng.choice(neighbours)
            grid[(y + ny) // 2, (x + nx) // 2] = OPEN
            grid[ny, nx] = OPEN
            visited[ny, nx] = True
            stack.append((x, y))
            x, y = nx, ny
        elif stack:
            x, y = stack.pop()
        else:
            break

    grid[1, 1] = OPEN
    grid[height - 2, width - 2] = OPEN
    grid[1, 1 : width - 1] = OPEN
    grid[1 : height - 1, width - 2] = OPEN

    added = 0
    for _ in range(extra_connections * 10):
        if added >= extra_connections:
            break
        cx = rng.randrange(1, width - 1)
        cy = rng.randrange(1, height - 1)
        if grid[cy, cx] != WALL:
            continue
        horizontal = grid[cy, cx - 1] == OPEN and grid[cy, cx + 1] == OPEN
        vertical = grid[cy - 1, cx] == OPEN and grid[cy + 1, cx] == OPEN
        if horizontal or vertical:
            grid[cy, cx] = OPEN
            added += 1

    logger.debug(
        "[maze_generator] Generated %dx%d maze with %d/%d extra connections",
        width,
        height,
        added,
        extra_connections,
    )
    return grid.tolist()


def _bfs(
    maze: Grid,
    start: Cell,
    *,
    passable: Callable[[int, int], bool],
    max_depth: int | None = None,
) -> dict[Cell, tuple[int, Cell | None]]:
    """Breadth-first search returning ``{cell: (distance, parent)}``."""
    seen: dict[Cell, tuple[int, Cell | None]] = {start: (0, None)}
    queue: deque[Cell] = deque([start])
    while queue:
        cx, cy = queue.popleft()
        depth = seen[(cx, cy)][0]
        if max_depth is not None and depth >= max_depth:
            continue
        for dx, dy in CARDINALS:
            nxt = (cx + dx, cy + dy)
            if nxt in seen or not passable(*nxt):
                continue
            seen[nxt] = (depth + 1, (cx, cy))
            queue.append(nxt)
    return seen


def _open_in(maze: Grid) -> Callable[[int, int], bool]:
    height = len(maze)
    width = len(maze[0]) if height else 0

    def passable(x: int, y: int) -> bool:
        return 0 <= x < width and 0 <= y < height and maze[y][x] == OPEN

    return passable


def find_path(maze: Grid, start: Cell, goal: Cell) -> list[Cell] | None:
    """Shortest path of open cells from start to goal (inclusive), or None."""
    passable = _open_in(maze)
    if not passable(*start) or not passable(*goal):
        return None
    seen = _bfs(maze, start, passable=passable)
    if goal not in seen:
        return None
    path: list[Cell] = []
    node: Cell | None = goal
    while node is not None:
        path.append(node)
        node = seen[node][1]
    path.reverse()
    return path


def open_cells_within(
    maze: Grid,
    origin: Cell,
    max_steps: int,
    *,
    blocked: set[Cell] | frozenset[Cell] = frozenset(),
) -> dict[Cell, int]:
    """
    Open cells reachable from ``origin`` in at most ``max_steps`` moves,
    mapped to their step distance. Cells in ``blocked`` are not entered.
    """
    is_open = _open_in(maze)

    def passable(x: int, y: int) -> bool:
        return is_open(x, y) and (x, y) not in blocked

    seen = _bfs(maze, origin, passable=passable, max_depth=max_steps)
    return {cell: depth for cell, (depth, _) in seen.items()}


def open_cells(maze: Grid) -> list[Cell]:
    return [(x, y) for y, row in enumerate(maze) for x, value in enumerate(row) if value == OPEN]
