from .errors import FormulaError, MalformedInputError, FormulaNotFoundError
from .formula import Formula, parse_dimacs
from .solver import (
    SolveResult, SAT, BEST_EFFORT, ABORTED,
    HillClimbSolver, WalkSATSolver, GeneticSolver,
    SOLVERS, make_solver,
)

__all__ = [
    "Formula", "parse_dimacs",
    "FormulaError", "MalformedInputError", "FormulaNotFoundError",
    "SolveResult", "SAT", "BEST_EFFORT", "ABORTED",
    "HillClimbSolver", "WalkSATSolver", "GeneticSolver",
    "SOLVERS", "make_solver",
]
