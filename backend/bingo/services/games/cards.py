import random
from typing import List, Sequence, Union

GRID_SIZE = 5
CENTER = (2, 2)
# Sentinel for the free centre cell; never equal to a theme string
FREE_CELL = 0
BLANK_CELL = ''

Cell = Union[str, int]


def shuffled_pool(items: Sequence[str], rng=random) -> List[str]:
    pool = list(items)
    rng.shuffle(pool)
    return pool


def generate_card(pool: Sequence[str], rng=random) -> List[List[Cell]]:
    """Build a 5x5 card from a theme's item pool.

    Items are popped from a shuffled copy of the pool in row-major order.
    Once the copy runs dry, the remaining cells are drawn with replacement
    from the original pool. An empty pool yields a blank card.
    """
    items = list(pool or [])
    remaining = shuffled_pool(items, rng)
    card: List[List[Cell]] = []
    for r in range(GRID_SIZE):
        row: List[Cell] = []
        for c in range(GRID_SIZE):
            if (r, c) == CENTER:
                row.append(FREE_CELL)
            elif not items:
                row.append(BLANK_CELL)
            elif remaining:
                row.append(remaining.pop())
            else:
                row.append(rng.choice(items))
        card.append(row)
    return card


def new_marks() -> List[List[bool]]:
    marks = [[False] * GRID_SIZE for _ in range(GRID_SIZE)]
    marks[CENTER[0]][CENTER[1]] = True
    return marks


def is_card_complete(marks) -> bool:
    """A win requires every non-free cell to be marked."""
    for r in range(GRID_SIZE):
        for c in range(GRID_SIZE):
            if (r, c) == CENTER:
                continue
            if not marks[r][c]:
                return False
    return True
