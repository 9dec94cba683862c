import pytest

from andiamo.services.ambassador_income import calculate_ambassador_income


def _reference(n: int) -> int:
    # Rule list written out independently of the implementation
    if n <= 7:
        return 0
    total = (n - 7) * 3
    if n >= 15:
        total += 15
    if n >= 25:
        total += 20
    if n >= 35:
        total += ((n - 35) // 10) * 20
    return total


@pytest.mark.parametrize("tickets,expected", [
    (0, 0),
    (7, 0),
    (8, 3),
    (14, 21),
    (15, 39),
    (24, 66),
    (25, 89),
    (34, 116),
    (35, 119),
    (44, 146),
    (45, 169),
    (55, 219),
])
def test_boundary_values(tickets, expected):
    assert calculate_ambassador_income(tickets) == expected


def test_matches_rule_list():
    for n in range(0, 500):
        assert calculate_ambassador_income(n) == _reference(n)


def test_non_decreasing():
    previous = calculate_ambassador_income(0)
    for n in range(1, 2000):
        current = calculate_ambassador_income(n)
        assert current >= previous, f"income dropped at {n}"
        previous = current


@pytest.mark.parametrize("bad", [7.5, "10", None, True])
def test_rejects_non_integers(bad):
    with pytest.raises(TypeError):
        calculate_ambassador_income(bad)
