import pytest

from app.services.snake import draft_order, manager_on_clock


def test_three_manager_snake():
    roster = ["a", "b", "c"]
    assert [manager_on_clock(roster, p) for p in range(6)] == ["a", "b", "c", "c", "b", "a"]
    assert manager_on_clock(roster, 6) == "a"


def test_empty_roster_has_nobody_on_clock():
    assert manager_on_clock([], 0) is None
    assert manager_on_clock([], 5) is None


def test_single_manager_always_picks():
    assert {manager_on_clock(["solo"], p) for p in range(7)} == {"solo"}


@pytest.mark.parametrize("roster", [["a"], ["a", "b"], ["a", "b", "c", "d", "e"]])
def test_repeats_every_two_rounds(roster):
    n = len(roster)
    for p in range(4 * n):
        assert manager_on_clock(roster, p) == manager_on_clock(roster, p + 2 * n)


def test_odd_rounds_run_reversed():
    roster = ["a", "b", "c", "d"]
    for within in range(4):
        assert manager_on_clock(roster, 4 + within) == list(reversed(roster))[within]


def test_draft_order_covers_every_pick():
    order = draft_order(["alex", "bob"], 14)
    assert len(order) == 14
    assert order[:4] == ["alex", "bob", "bob", "alex"]
    assert order.count("alex") == order.count("bob") == 7
