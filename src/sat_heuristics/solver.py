# -*- coding: utf-8 -*-
"""
Stochastic CNF solvers
----------------------
Three local-search heuristics over a `Formula`:

    HillClimbSolver  steepest ascent, stops at the first local optimum
    WalkSATSolver    noisy / greedy flips of a variable from a false clause
    GeneticSolver    uniform crossover, truncation selection, mutation

Every solver clones its own working copies, so the formula handed to `solve`
is never modified, and draws all randomness from the single numpy Generator
created in its constructor.

Library-only module for import.
Dependencies: numpy only.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
import logging
import time
import numpy as np

from .formula import Formula

logger = logging.getLogger(__name__)

SAT = "SAT"
BEST_EFFORT = "BEST_EFFORT"
ABORTED = "ABORTED"


# -----------------------------
# Result + budget helpers
# -----------------------------

@dataclass
class SolveResult:
    """
    Outcome of one `solve` call.

    status is SAT (all clauses satisfied), BEST_EFFORT (search ended
    without success; `satisfied` holds the best count found) or ABORTED
    (only produced by callers that cancel a run). BEST_EFFORT is never a
    proof of unsatisfiability.
    """
    status: str
    satisfied: int
    steps: int = 0
    evaluations: int = 0
    assignment: Optional[np.ndarray] = None
    trace: list = field(default_factory=list)
    timed_out: bool = False

    @property
    def is_sat(self) -> bool:
        return self.status == SAT

    @staticmethod
    def aborted() -> "SolveResult":
        return SolveResult(status=ABORTED, satisfied=0)


def _deadline(max_seconds: Optional[float]) -> Optional[float]:
    if max_seconds is None:
        return None
    return time.perf_counter() + max_seconds


def _expired(deadline: Optional[float]) -> bool:
    return deadline is not None and time.perf_counter() >= deadline


def _optional_seconds(max_seconds) -> Optional[float]:
    if max_seconds is None:
        return None
    max_seconds = float(max_seconds)
    if max_seconds < 0:
        raise ValueError(f"max_seconds must be >= 0, got {max_seconds}")
    return max_seconds


# -----------------------------
# Hill climbing
# -----------------------------

class HillClimbSolver:
    """
    Steepest-ascent hill climbing from a uniformly random assignment.

    Step rule:
      for every i: flip i, recompute, flip back
      commit the i with the highest count if it beats the current count
      (strictly greater, so the lowest index wins ties)
      no improving i -> local optimum, stop
    """

    def __init__(self, max_seconds: Optional[float] = None, seed=None):
        self.max_seconds = _optional_seconds(max_seconds)
        self.rng = np.random.default_rng(seed)

    def best_step(self, st: Formula, current: int) -> Tuple[int, int]:
        """
        Return (index, count) of the best improving flip, or (-1, current).
        Leaves the assignment unchanged but the clause cache stale.
        """
        index = -1
        best = current
        for i in range(st.num_vars):
            st.flip(i)
            count = st.recompute()
            st.flip(i)
            if count > best:
                index = i
                best = count
        return index, best

    def solve(self, formula: Formula, x0: Optional[Sequence[bool]] = None) -> SolveResult:
        st = formula.clone()
        if x0 is None:
            st.randomize(self.rng)
        else:
            st.load_assignment(x0)
        deadline = _deadline(self.max_seconds)

        current = st.recompute()
        trace = [current]
        steps = 0
        evaluations = 0
        timed_out = False
        logger.info("hill climb: %d/%d clauses satisfied at start", current, st.num_clauses)

        while current < st.num_clauses:
            if _expired(deadline):
                timed_out = True
                break
            index, best = self.best_step(st, current)
            evaluations += st.num_vars
            if index < 0:
                break
            st.flip(index)
            current = st.recompute()
            steps += 1
            trace.append(current)
            logger.debug("hill climb step %d: flip %d -> %d satisfied", steps, index, current)

        if current == st.num_clauses:
            logger.info("hill climb: satisfied after %d steps", steps)
            return SolveResult(SAT, st.num_clauses, steps, evaluations,
                               st.assignment.copy(), trace)

        logger.info("hill climb: %s at %d/%d after %d steps",
                    "timed out" if timed_out else "local optimum",
                    current, st.num_clauses, steps)
        return SolveResult(BEST_EFFORT, current, steps, evaluations,
                           st.assignment.copy(), trace, timed_out)


# -----------------------------
# WalkSAT
# -----------------------------

class WalkSATSolver:
    """
    WalkSAT over a uniformly random unsatisfied clause.

    With probability `noise` flip a random variable of that clause
    (`_random_step`), otherwise the variable of that clause whose flip
    leaves the most clauses satisfied (`_best_step`, lowest index on ties).
    Runs until satisfied or `max_flips` flips have been made.
    """

    def __init__(
        self,
        noise: float = 0.5,
        max_flips: int = 10_000,
        max_seconds: Optional[float] = None,
        seed=None,
    ):
        self.noise = float(noise)
        if not 0.0 <= self.noise <= 1.0:
            raise ValueError(f"noise must be in [0, 1], got {noise}")
        self.max_flips = int(max_flips)
        if self.max_flips < 0:
            raise ValueError(f"max_flips must be >= 0, got {max_flips}")
        self.max_seconds = _optional_seconds(max_seconds)
        self.rng = np.random.default_rng(seed)

    def _random_step(self, st: Formula, clause: int) -> int:
        return int(self.rng.choice(st.clause_variables(clause)))

    def _best_step(self, st: Formula, clause: int) -> int:
        best_var = -1
        best = -1
        for v in st.clause_variables(clause):
            st.flip(v)
            count = st.recompute()
            st.flip(v)
            if count > best:
                best_var = v
                best = count
        return best_var

    def solve(self, formula: Formula, x0: Optional[Sequence[bool]] = None) -> SolveResult:
        st = formula.clone()
        if x0 is None:
            st.randomize(self.rng)
        else:
            st.load_assignment(x0)
        deadline = _deadline(self.max_seconds)

        # Empty clauses can never be fixed by a flip
        flippable = st.literals[:, 0] != 0

        current = st.recompute()
        best = current
        best_x = st.assignment.copy()
        trace = [(0, current, best)]
        evaluations = 0
        timed_out = False
        flips = 0

        for t in range(self.max_flips):
            if st.is_satisfied():
                break
            if _expired(deadline):
                timed_out = True
                break

            unsat = st.unsatisfied_clauses()
            unsat = unsat[flippable[unsat]]
            if unsat.size == 0:
                logger.info("walksat: only empty clauses left unsatisfied, stopping")
                break
            j = int(self.rng.choice(unsat))

            if self.rng.random() < self.noise:
                v = self._random_step(st, j)
            else:
                v = self._best_step(st, j)
                evaluations += len(st.clause_variables(j))

            st.flip(v)
            current = st.recompute()
            flips += 1
            if current > best:
                best = current
                best_x = st.assignment.copy()

            if (t % 1000) == 0:
                trace.append((t, current, best))
                logger.debug("walksat flip %d: %d satisfied, best %d", t, current, best)

        if st.is_satisfied():
            logger.info("walksat: satisfied after %d flips", flips)
            return SolveResult(SAT, st.num_clauses, flips, evaluations,
                               st.assignment.copy(), trace)

        logger.info("walksat: best %d/%d after %d flips%s",
                    best, st.num_clauses, flips, " (timed out)" if timed_out else "")
        return SolveResult(BEST_EFFORT, best, flips, evaluations, best_x, trace, timed_out)


# -----------------------------
# Genetic search
# -----------------------------

class GeneticSolver:
    """
    Generational genetic search.

    Per generation:
      stop if any member, or the fittest new child, satisfies the formula
      breed `num_children` children by uniform crossover of two distinct parents
      keep the `population_size` fittest children (stable on breeding order)
      mutate `mutation_count` members drawn with replacement, flipping
      int(num_vars * mutation_rate) independently drawn positions each
    """

    def __init__(
        self,
        population_size: int = 20,
        num_children: int = 40,
        generations: int = 200,
        mutation_rate: float = 0.1,
        mutation_count: int = 2,
        max_seconds: Optional[float] = None,
        seed=None,
    ):
        self.population_size = int(population_size)
        self.num_children = int(num_children)
        self.generations = int(generations)
        self.mutation_rate = float(mutation_rate)
        self.mutation_count = int(mutation_count)
        if self.population_size < 2:
            raise ValueError("population_size must be at least 2 to pick distinct parents")
        if self.num_children < self.population_size:
            raise ValueError("num_children must be >= population_size")
        if self.generations < 0 or self.mutation_count < 0:
            raise ValueError("generations and mutation_count must be >= 0")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ValueError(f"mutation_rate must be in [0, 1], got {mutation_rate}")
        self.max_seconds = _optional_seconds(max_seconds)
        self.rng = np.random.default_rng(seed)

    def _random_member(self, formula: Formula) -> Formula:
        member = formula.clone()
        member.randomize(self.rng)
        return member

    def _pick_parents(self) -> Tuple[int, int]:
        dad = int(self.rng.integers(self.population_size))
        mom = int(self.rng.integers(self.population_size))
        while mom == dad:
            mom = int(self.rng.integers(self.population_size))
        return dad, mom

    def _make_child(self, dad: Formula, mom: Formula) -> Formula:
        kid = mom.clone()
        take_mom = self.rng.random(kid.num_vars) < 0.5
        kid.load_assignment(np.where(take_mom, mom.assignment, dad.assignment))
        return kid

    def _mutate(self, target: Formula):
        n_flips = int(target.num_vars * self.mutation_rate)
        if n_flips == 0:
            return
        for i in self.rng.integers(0, target.num_vars, size=n_flips):
            target.flip(int(i))

    def solve(self, formula: Formula) -> SolveResult:
        deadline = _deadline(self.max_seconds)

        population: List[Formula] = []
        fitness = np.zeros(self.population_size, dtype=np.int64)
        for i in range(self.population_size):
            member = self._random_member(formula)
            fitness[i] = member.recompute()
            population.append(member)

        best = -1
        best_x = None
        trace = []
        evaluations = 0
        timed_out = False
        generation = 0

        while True:
            for member, fit in zip(population, fitness):
                if fit > best:
                    best = int(fit)
                    best_x = member.assignment.copy()
                if member.is_satisfied():
                    logger.info("genetic: satisfied in generation %d", generation)
                    return SolveResult(SAT, formula.num_clauses, generation, evaluations,
                                       member.assignment.copy(), trace)
            trace.append(best)

            if generation >= self.generations:
                break
            if _expired(deadline):
                timed_out = True
                break

            children: List[Formula] = []
            child_fit = np.zeros(self.num_children, dtype=np.int64)
            for i in range(self.num_children):
                dad, mom = self._pick_parents()
                kid = self._make_child(population[dad], population[mom])
                child_fit[i] = kid.recompute()
                children.append(kid)
            evaluations += self.num_children

            keep = np.argsort(-child_fit, kind="stable")[:self.population_size]
            population = [children[int(i)] for i in keep]
            fitness = child_fit[keep]

            # Record the fittest child before mutation can disturb it
            top = population[0]
            if fitness[0] > best:
                best = int(fitness[0])
                best_x = top.assignment.copy()
            if top.is_satisfied():
                generation += 1
                logger.info("genetic: satisfied by a child of generation %d", generation)
                return SolveResult(SAT, formula.num_clauses, generation, evaluations,
                                   top.assignment.copy(), trace)

            for _ in range(self.mutation_count):
                k = int(self.rng.integers(self.population_size))
                self._mutate(population[k])
                fitness[k] = population[k].recompute()

            generation += 1
            logger.debug("genetic generation %d: best member %d, best seen %d",
                         generation, int(fitness.max()), best)

        logger.info("genetic: best %d/%d after %d generations%s",
                    best, formula.num_clauses, generation, " (timed out)" if timed_out else "")
        return SolveResult(BEST_EFFORT, best, generation, evaluations, best_x, trace, timed_out)


# -----------------------------
# Registry
# -----------------------------

SOLVERS: Dict[str, type] = {
    "genetic": GeneticSolver,
    "hill": HillClimbSolver,
    "walksat": WalkSATSolver,
}


def make_solver(name: str, **kwargs):
    try:
        cls = SOLVERS[name]
    except KeyError:
        raise ValueError(f"unknown solver {name!r}, choose from {sorted(SOLVERS)}") from None
    return cls(**kwargs)
