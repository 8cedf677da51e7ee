import itertools
import numpy as np
import pytest
from sat_heuristics import Formula

def brute_force(clauses, x):
    return [any(x[abs(l) - 1] if l > 0 else not x[abs(l) - 1] for l in c) for c in clauses]

def test_recompute_matches_reference():
    cnf = Formula.random_ksat(6, 25, seed=3)
    clauses = cnf.clause_list()
    for bits in itertools.product([False, True], repeat=6):
        cnf.load_assignment(bits)
        count = cnf.recompute()
        expected = brute_force(clauses, bits)
        assert list(cnf.clause_satisfied) == expected
        assert count == sum(expected)
        assert cnf.is_satisfied() == all(expected)

def test_mixed_clause_widths():
    cnf = Formula(4, [(1,), (-1, 2, -3, 4), (-4, 0)])
    cnf.load_assignment([False, False, True, True])
    assert cnf.recompute() == 1
    assert list(cnf.clause_satisfied) == [False, True, False]

def test_flip_twice_restores_count():
    cnf = Formula.random_ksat(20, 80, seed=5)
    cnf.randomize(np.random.default_rng(0))
    before = cnf.recompute()
    for i in range(cnf.num_vars):
        cnf.flip(i)
        cnf.recompute()
        cnf.flip(i)
        assert cnf.recompute() == before

def test_set_assignment_does_not_touch_cache():
    cnf = Formula(1, [(1,)])
    cnf.recompute()
    cnf.set_assignment(0, True)
    assert not cnf.is_satisfied()
    assert cnf.recompute() == 1
    assert cnf.is_satisfied()

def test_clone_is_independent():
    cnf = Formula.random_ksat(10, 40, seed=1)
    cnf.randomize(np.random.default_rng(7))
    before = cnf.recompute()
    snapshot = cnf.assignment.copy()

    twin = cnf.clone()
    for i in range(twin.num_vars):
        twin.flip(i)
    twin.recompute()
    assert cnf.recompute() == before
    assert np.array_equal(cnf.assignment, snapshot)
    assert np.array_equal(twin.assignment, ~snapshot)

def test_views_are_read_only():
    cnf = Formula(2, [(1, -2)])
    with pytest.raises(ValueError):
        cnf.assignment[0] = True
    with pytest.raises(ValueError):
        cnf.literals[0, 0] = 2

def test_clause_variables_sorted_distinct():
    cnf = Formula(5, [(4, -2, 4, 1)])
    assert cnf.clause_variables(0) == [0, 1, 3]

def test_unsatisfied_clauses():
    cnf = Formula(2, [(1,), (2,), (-1, -2)])
    cnf.load_assignment([True, False])
    cnf.recompute()
    assert list(cnf.unsatisfied_clauses()) == [1]

def test_load_assignment_length_checked():
    cnf = Formula(3, [(1, 2, 3)])
    with pytest.raises(ValueError):
        cnf.load_assignment([True, False])

def test_empty_formula_is_satisfied():
    cnf = Formula(2, [])
    assert cnf.recompute() == 0
    assert cnf.is_satisfied()

def test_random_ksat_shapes():
    cnf = Formula.random_ksat(50, 200, k=3, seed=0)
    assert cnf.num_vars == 50
    assert cnf.num_clauses == 200
    assert all(len(c) == 3 for c in cnf.clause_list())
    assert all(len(set(abs(l) for l in c)) == 3 for c in cnf.clause_list())
