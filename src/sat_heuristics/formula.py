# -*- coding: utf-8 -*-
"""
CNF formula state
-----------------
Assignment vector, clause truth cache and a fixed-width literal matrix:

    literals[j] = [l_1, l_2, ..., l_k, 0, 0, ...]   (width n_vars + 1)

A positive literal v asks for variable v-1 to be true, -v for it to be false,
0 terminates the row. Every solver evaluates candidates with `recompute`, a
full vectorized pass over the matrix.

Dependencies: numpy only.
"""

from __future__ import annotations
import logging
from typing import Iterable, List, Optional, Sequence
import numpy as np

from .errors import FormulaNotFoundError, MalformedInputError

logger = logging.getLogger(__name__)


# -----------------------------
# Formula state
# -----------------------------

class Formula:
    """
    CNF formula plus one truth assignment.

    Mutations (`set_assignment`, `flip`, `load_assignment`, `randomize`) never
    touch the clause cache; call `recompute` before reading
    `clause_satisfied`, `satisfied_count` or `is_satisfied`.
    """

    def __init__(self, n_vars: int, clauses: Sequence[Sequence[int]], num_clauses: Optional[int] = None):
        n_vars = int(n_vars)
        if n_vars < 0:
            raise MalformedInputError(f"negative variable count {n_vars}", token=str(n_vars))
        m = len(clauses) if num_clauses is None else int(num_clauses)
        if m < len(clauses):
            raise MalformedInputError(
                f"{len(clauses)} clauses given but only {m} declared", token=str(m)
            )

        lits = np.zeros((m, n_vars + 1), dtype=np.int32)
        for j, clause in enumerate(clauses):
            row = [int(x) for x in clause]
            if row and row[-1] == 0:
                row = row[:-1]
            if len(row) > n_vars:
                raise MalformedInputError(
                    f"clause {j + 1} has {len(row)} literals, at most {n_vars} allowed"
                )
            for lit in row:
                if lit == 0 or abs(lit) > n_vars:
                    raise MalformedInputError(
                        f"literal {lit} in clause {j + 1} outside [-{n_vars}, {n_vars}]",
                        token=str(lit),
                    )
            lits[j, :len(row)] = row

        self._init_matrix(n_vars, lits)
        self._assignment = np.zeros(n_vars, dtype=bool)
        self._clause_satisfied = np.zeros(m, dtype=bool)

    def _init_matrix(self, n_vars: int, lits: np.ndarray):
        self._n = n_vars
        self._m = lits.shape[0]
        lits.flags.writeable = False
        self._literals = lits

        # Everything up to the first 0 of a row is live
        live = np.cumprod(lits != 0, axis=1).astype(bool)
        var_idx = np.where(live, np.abs(lits) - 1, 0).astype(np.intp)
        positive = lits > 0
        for arr in (live, var_idx, positive):
            arr.flags.writeable = False
        self._live = live
        self._var_idx = var_idx
        self._positive = positive

    # -----------------------------
    # Construction
    # -----------------------------

    @staticmethod
    def from_dimacs(path: str) -> "Formula":
        try:
            with open(path, "r", encoding="utf-8") as f:
                return parse_dimacs(f, source=str(path))
        except (FileNotFoundError, IsADirectoryError, PermissionError) as exc:
            raise FormulaNotFoundError(str(path), exc.strerror or "") from exc
        except UnicodeDecodeError as exc:
            raise MalformedInputError(f"{path}: not a text file ({exc.reason})") from exc

    @staticmethod
    def from_string(text: str) -> "Formula":
        return parse_dimacs(text.splitlines(), source="<string>")

    @staticmethod
    def random_ksat(n_vars: int, m_clauses: int, k: int = 3, seed=None) -> "Formula":
        """Uniform random k-SAT: k distinct variables per clause, random signs."""
        if k > n_vars:
            raise ValueError(f"k={k} exceeds n_vars={n_vars}")
        rng = np.random.default_rng(seed)
        clauses = []
        for _ in range(m_clauses):
            vs = rng.choice(np.arange(1, n_vars + 1), size=k, replace=False)
            signs = rng.choice([-1, 1], size=k, replace=True)
            clauses.append([int(s * v) for s, v in zip(signs, vs)])
        return Formula(n_vars, clauses)

    def clone(self) -> "Formula":
        """Copy with its own assignment and cache; the frozen literal matrix is shared."""
        other = Formula.__new__(Formula)
        other._n = self._n
        other._m = self._m
        other._literals = self._literals
        other._live = self._live
        other._var_idx = self._var_idx
        other._positive = self._positive
        other._assignment = self._assignment.copy()
        other._clause_satisfied = self._clause_satisfied.copy()
        return other

    # -----------------------------
    # Accessors
    # -----------------------------

    @property
    def num_vars(self) -> int:
        return self._n

    @property
    def num_clauses(self) -> int:
        return self._m

    @property
    def assignment(self) -> np.ndarray:
        view = self._assignment.view()
        view.flags.writeable = False
        return view

    @property
    def literals(self) -> np.ndarray:
        return self._literals

    @property
    def clause_satisfied(self) -> np.ndarray:
        view = self._clause_satisfied.view()
        view.flags.writeable = False
        return view

    @property
    def satisfied_count(self) -> int:
        return int(self._clause_satisfied.sum())

    def clause_variables(self, j: int) -> List[int]:
        """Sorted distinct 0-based variables referenced by clause j."""
        row = self._var_idx[j][self._live[j]]
        return sorted(set(int(v) for v in row))

    def unsatisfied_clauses(self) -> np.ndarray:
        return np.flatnonzero(~self._clause_satisfied)

    # -----------------------------
    # Mutation
    # -----------------------------

    def set_assignment(self, i: int, value: bool):
        self._assignment[i] = bool(value)

    def flip(self, i: int):
        self._assignment[i] = not self._assignment[i]

    def load_assignment(self, values: Iterable[bool]):
        arr = np.asarray(values).astype(bool)
        if arr.shape != (self._n,):
            raise ValueError(f"assignment needs {self._n} values, got shape {arr.shape}")
        self._assignment[:] = arr

    def randomize(self, rng: np.random.Generator):
        self._assignment[:] = rng.integers(0, 2, size=self._n).astype(bool)

    # -----------------------------
    # Evaluation
    # -----------------------------

    def recompute(self) -> int:
        """
        Re-evaluate every clause under the current assignment.
        Returns the number of satisfied clauses.
        """
        if self._n == 0:
            self._clause_satisfied[:] = False
            return 0
        values = self._assignment[self._var_idx]
        lit_true = np.where(self._positive, values, ~values) & self._live
        self._clause_satisfied[:] = lit_true.any(axis=1)
        return int(self._clause_satisfied.sum())

    def is_satisfied(self) -> bool:
        return bool(self._clause_satisfied.all())

    # -----------------------------
    # Serialization
    # -----------------------------

    def clause_list(self) -> List[List[int]]:
        return [[int(x) for x in row[live]] for row, live in zip(self._literals, self._live)]

    def to_dimacs(self) -> str:
        lines = [f"p cnf {self._n} {self._m}"]
        for clause in self.clause_list():
            lines.append(" ".join(str(x) for x in clause + [0]))
        return "\n".join(lines) + "\n"

    def __repr__(self) -> str:
        return f"Formula(num_vars={self._n}, num_clauses={self._m})"


# -----------------------------
# DIMACS parsing
# -----------------------------

def _parse_count(tok: str, what: str, line_no: int) -> int:
    try:
        value = int(tok)
    except ValueError:
        raise MalformedInputError(f"cannot parse {what} {tok!r}", token=tok, line_no=line_no) from None
    if value < 0:
        raise MalformedInputError(f"negative {what} {tok!r}", token=tok, line_no=line_no)
    return value


def parse_dimacs(lines: Iterable[str], source: str = "<input>") -> Formula:
    """
    Parse DIMACS CNF text, one clause per line.

    Lines before the `p cnf` descriptor are ignored, `c` lines are comments
    and a `%` line (SATLIB trailer) ends the clause section.
    """
    n_vars = None
    n_clauses = None
    clauses: List[List[int]] = []

    for line_no, line in enumerate(lines, start=1):
        tokens = line.split()
        if not tokens or tokens[0].startswith("c"):
            continue
        if tokens[0] == "p":
            if n_vars is not None:
                raise MalformedInputError("duplicate descriptor line", token="p", line_no=line_no)
            # p cnf n_vars n_clauses
            if len(tokens) < 4:
                raise MalformedInputError(
                    f"descriptor needs 'p cnf <vars> <clauses>', got {line.strip()!r}",
                    token=line.strip(), line_no=line_no,
                )
            if tokens[1] != "cnf":
                raise MalformedInputError(
                    f"unsupported format {tokens[1]!r}", token=tokens[1], line_no=line_no
                )
            n_vars = _parse_count(tokens[2], "variable count", line_no)
            n_clauses = _parse_count(tokens[3], "clause count", line_no)
            continue
        if n_vars is None:
            continue
        if tokens[0] == "%":
            break

        if len(tokens) > n_vars + 1:
            raise MalformedInputError(
                f"clause has {len(tokens)} integers, at most {n_vars + 1} allowed",
                token=tokens[n_vars + 1], line_no=line_no,
            )
        clause = []
        terminated = False
        for tok in tokens:
            try:
                lit = int(tok)
            except ValueError:
                raise MalformedInputError(f"cannot parse literal {tok!r}", token=tok, line_no=line_no) from None
            if lit == 0:
                terminated = True
                break
            if abs(lit) > n_vars:
                raise MalformedInputError(
                    f"literal {lit} outside [-{n_vars}, {n_vars}]", token=tok, line_no=line_no
                )
            clause.append(lit)
        if not terminated:
            raise MalformedInputError("clause line missing terminating 0", token=tokens[-1], line_no=line_no)
        if len(clauses) >= n_clauses:
            raise MalformedInputError(
                f"more than the {n_clauses} declared clauses", token=tokens[0], line_no=line_no
            )
        clauses.append(clause)

    if n_vars is None:
        raise MalformedInputError(f"{source}: DIMACS descriptor line not found")
    if len(clauses) < n_clauses:
        logger.warning("%s: %d clauses declared, %d read; the rest are empty",
                       source, n_clauses, len(clauses))

    formula = Formula(n_vars, clauses, num_clauses=n_clauses)
    logger.info("loaded %s: %d variables, %d clauses", source, n_vars, n_clauses)
    return formula
