#!/usr/bin/env python3
from sat_heuristics import Formula, FormulaError, SolveResult, ABORTED, SOLVERS, make_solver
import argparse
import logging
import sys
import time


def build_solver(args):
    kwargs = {"max_seconds": args.max_seconds, "seed": args.seed}
    if args.algorithm == "walksat":
        kwargs.update(noise=args.noise, max_flips=args.max_flips)
    elif args.algorithm == "genetic":
        kwargs.update(generations=args.generations)
    return make_solver(args.algorithm, **kwargs)


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("dimacs", type=str)
    ap.add_argument("--algorithm", choices=sorted(SOLVERS), default="walksat")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--max_seconds", type=float, default=None)
    ap.add_argument("--noise", type=float, default=0.5)
    ap.add_argument("--max_flips", type=int, default=10000)
    ap.add_argument("--generations", type=int, default=200)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cnf = Formula.from_dimacs(args.dimacs)
    except FormulaError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)

    solver = build_solver(args)
    t0 = time.perf_counter()
    try:
        res = solver.solve(cnf)
    except KeyboardInterrupt:
        res = SolveResult.aborted()
    elapsed_ms = int((time.perf_counter() - t0) * 1000)

    if res.is_sat:
        print("SATISFIABLE")
    elif res.status == ABORTED:
        print("Solve attempt aborted.")
        sys.exit(0)
    else:
        print("UNKNOWN" + (" (time limit)" if res.timed_out else ""))
    print("milliseconds elapsed:", elapsed_ms)
    print("clauses satisfied:", res.satisfied, "of", cnf.num_clauses, "steps=", res.steps)
