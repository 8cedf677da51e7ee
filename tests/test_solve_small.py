import numpy as np
import pytest
from sat_heuristics import (
    Formula, HillClimbSolver, WalkSATSolver, GeneticSolver,
    SAT, BEST_EFFORT, ABORTED, SolveResult, make_solver,
)

TWO_BY_TWO = "p cnf 2 2\n1 2 0\n-1 -2 0\n"
CONTRADICTION = "p cnf 1 2\n1 0\n-1 0\n"

def check_assignment(cnf, assignment):
    st = cnf.clone()
    st.load_assignment(assignment)
    st.recompute()
    return st.is_satisfied()

@pytest.mark.parametrize("solver", [
    HillClimbSolver(seed=1),
    WalkSATSolver(seed=1),
    GeneticSolver(seed=1),
])
def test_all_solvers_find_small_solution(solver):
    cnf = Formula.from_string(TWO_BY_TWO)
    res = solver.solve(cnf)
    assert res.status == SAT
    assert res.is_sat
    assert res.satisfied == 2
    assert check_assignment(cnf, res.assignment)

@pytest.mark.parametrize("x0", [[True], [False]])
def test_hill_climb_stops_at_local_optimum(x0):
    cnf = Formula.from_string(CONTRADICTION)
    res = HillClimbSolver(seed=0).solve(cnf, x0=x0)
    assert res.status == BEST_EFFORT
    assert res.satisfied == 1
    assert res.steps == 0
    assert not res.timed_out

def test_hill_climb_prefers_lowest_index():
    cnf = Formula.from_string(TWO_BY_TWO)
    res = HillClimbSolver().solve(cnf, x0=[True, True])
    assert res.is_sat
    assert res.steps == 1
    assert list(res.assignment) == [False, True]

def test_hill_climb_monotone_trace():
    cnf = Formula.random_ksat(30, 140, seed=11)
    res = HillClimbSolver(seed=4).solve(cnf)
    assert len(res.trace) == res.steps + 1
    assert all(b > a for a, b in zip(res.trace, res.trace[1:]))
    if res.is_sat:
        assert res.evaluations == res.steps * cnf.num_vars
    else:
        assert res.satisfied == res.trace[-1]
        assert res.evaluations == (res.steps + 1) * cnf.num_vars

def test_solvers_leave_input_untouched():
    cnf = Formula.random_ksat(15, 60, seed=2)
    before = cnf.assignment.copy()
    for solver in (HillClimbSolver(seed=0), WalkSATSolver(seed=0, max_flips=200),
                   GeneticSolver(seed=0, generations=5)):
        solver.solve(cnf)
        assert np.array_equal(cnf.assignment, before)
        assert not cnf.clause_satisfied.any()

def test_same_seed_same_run():
    cnf = Formula.random_ksat(25, 110, seed=8)
    a = WalkSATSolver(seed=42, max_flips=500).solve(cnf)
    b = WalkSATSolver(seed=42, max_flips=500).solve(cnf)
    assert a.status == b.status
    assert a.steps == b.steps
    assert np.array_equal(a.assignment, b.assignment)

def test_shared_generator_is_used():
    rng = np.random.default_rng(3)
    solver = HillClimbSolver(seed=rng)
    assert solver.rng is rng

def test_walksat_greedy_tie_break():
    cnf = Formula.from_string(TWO_BY_TWO)
    res = WalkSATSolver(noise=0.0, seed=0).solve(cnf, x0=[True, True])
    assert res.is_sat
    assert res.steps == 1
    assert list(res.assignment) == [False, True]

def test_walksat_budget_exhausted():
    cnf = Formula.from_string(CONTRADICTION)
    res = WalkSATSolver(max_flips=50, seed=0).solve(cnf)
    assert res.status == BEST_EFFORT
    assert res.satisfied == 1
    assert res.steps == 50

def test_walksat_planted_3sat():
    # all-true satisfies every clause once each has a positive literal
    clauses = Formula.random_ksat(20, 60, seed=0).clause_list()
    clauses = [c if any(l > 0 for l in c) else [-c[0]] + c[1:] for c in clauses]
    cnf = Formula(20, clauses)
    res = WalkSATSolver(seed=0).solve(cnf)
    assert res.is_sat
    assert check_assignment(cnf, res.assignment)

def test_walksat_rejects_bad_noise():
    with pytest.raises(ValueError):
        WalkSATSolver(noise=1.5)
    with pytest.raises(ValueError):
        WalkSATSolver(max_flips=-1)

def test_genetic_generation_bound():
    cnf = Formula.from_string(CONTRADICTION)
    res = GeneticSolver(seed=0).solve(cnf)
    assert res.status == BEST_EFFORT
    assert res.satisfied == 1
    assert res.steps == 200
    assert res.evaluations == 200 * 40
    assert len(res.trace) == 201

def test_genetic_with_mutation_on_unsat():
    clauses = [(1,), (-1,)] + [(i, i + 1) for i in range(2, 10)]
    cnf = Formula(10, clauses)
    res = GeneticSolver(seed=5, generations=30).solve(cnf)
    assert res.status == BEST_EFFORT
    assert res.satisfied == cnf.num_clauses - 1
    assert res.evaluations <= 30 * 40

def test_genetic_rejects_bad_config():
    with pytest.raises(ValueError):
        GeneticSolver(population_size=1)
    with pytest.raises(ValueError):
        GeneticSolver(population_size=20, num_children=10)

def test_zero_time_budget_times_out():
    cnf = Formula.from_string(CONTRADICTION)
    res = HillClimbSolver(max_seconds=0).solve(cnf)
    assert res.status == BEST_EFFORT
    assert res.timed_out
    res = GeneticSolver(max_seconds=0, seed=0).solve(cnf)
    assert res.timed_out
    assert res.evaluations == 0

def test_make_solver():
    solver = make_solver("walksat", noise=0.2, seed=0)
    assert isinstance(solver, WalkSATSolver)
    assert solver.noise == 0.2
    with pytest.raises(ValueError):
        make_solver("dpll")

def test_aborted_result():
    res = SolveResult.aborted()
    assert res.status == ABORTED
    assert not res.is_sat

def test_walksat_zero_time_budget():
    cnf = Formula.from_string(CONTRADICTION)
    res = WalkSATSolver(max_seconds=0, seed=0).solve(cnf)
    assert res.status == BEST_EFFORT
    assert res.timed_out
    assert res.steps == 0

def test_hill_climb_count_matches_assignment():
    cnf = Formula.random_ksat(12, 70, seed=6)
    for seed in range(5):
        res = HillClimbSolver(seed=seed).solve(cnf)
        st = cnf.clone()
        st.load_assignment(res.assignment)
        assert st.recompute() == res.satisfied
        assert st.is_satisfied() == res.is_sat


class SplitParentsGenetic(GeneticSolver):
    """Parents each satisfy one unit clause; mutation wipes every bit."""

    def _random_member(self, formula):
        member = formula.clone()
        member.set_assignment(int(self.rng.integers(2)), True)
        return member

    def _mutate(self, target):
        target.load_assignment([False] * target.num_vars)


def test_genetic_keeps_satisfying_child_before_mutation():
    cnf = Formula(2, [(1,), (2,)])
    solver = SplitParentsGenetic(num_children=200, generations=1, mutation_count=2000, seed=0)
    res = solver.solve(cnf)
    assert res.is_sat
    assert res.steps == 1
    assert list(res.assignment) == [True, True]
