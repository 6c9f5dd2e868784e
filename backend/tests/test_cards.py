import random

from bingo.services.games.cards import (
    BLANK_CELL,
    FREE_CELL,
    generate_card,
    is_card_complete,
    new_marks,
    shuffled_pool,
)
from bingo.themes import get_theme


def _non_free(card):
    return [card[r][c] for r in range(5) for c in range(5) if (r, c) != (2, 2)]


def test_card_from_full_theme_is_distinct_and_themed():
    items = get_theme('ds9').items
    for seed in range(20):
        card = generate_card(items, rng=random.Random(seed))
        assert len(card) == 5 and all(len(row) == 5 for row in card)
        assert card[2][2] == FREE_CELL
        cells = _non_free(card)
        assert len(cells) == 24
        assert len(set(cells)) == 24
        assert set(cells) <= set(items)


def test_free_sentinel_never_collides_with_theme_strings():
    items = get_theme('ds9').items
    assert FREE_CELL not in items


def test_large_pool_draws_subset_without_repeats():
    pool = [f"item {i}" for i in range(60)]
    card = generate_card(pool, rng=random.Random(7))
    cells = _non_free(card)
    assert len(set(cells)) == 24
    assert set(cells) <= set(pool)


def test_small_pool_falls_back_to_repeats():
    pool = ['a', 'b', 'c']
    card = generate_card(pool, rng=random.Random(3))
    cells = _non_free(card)
    assert len(cells) == 24
    assert set(cells) == set(pool)
    assert card[2][2] == FREE_CELL


def test_empty_pool_gives_blank_card():
    for pool in ([], None):
        card = generate_card(pool)
        assert card[2][2] == FREE_CELL
        assert all(cell == BLANK_CELL for cell in _non_free(card))


def test_generate_does_not_mutate_pool():
    pool = ['x%d' % i for i in range(30)]
    before = list(pool)
    generate_card(pool)
    assert pool == before


def test_shuffled_pool_is_a_permutation():
    items = get_theme('ds9').items
    pool = shuffled_pool(items, rng=random.Random(1))
    assert sorted(pool) == sorted(items)
    assert pool is not items


def test_new_marks_has_free_centre():
    marks = new_marks()
    assert marks[2][2] is True
    assert sum(cell for row in marks for cell in row) == 1


def test_card_complete_requires_all_24_cells():
    marks = new_marks()
    assert not is_card_complete(marks)
    for r in range(5):
        for c in range(5):
            marks[r][c] = True
    assert is_card_complete(marks)
    marks[0][4] = False
    assert not is_card_complete(marks)


def test_centre_is_implicitly_satisfied():
    marks = [[True] * 5 for _ in range(5)]
    marks[2][2] = False
    assert is_card_complete(marks)
