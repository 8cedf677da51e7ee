#!/usr/bin/env python3
from sat_heuristics import Formula, HillClimbSolver, WalkSATSolver, GeneticSolver
import numpy as np
import argparse
import logging

def demo(n_vars=50, ratio=4.2, trials=10, max_flips=10000, generations=200, seed=1234):
    rng = np.random.default_rng(seed)

    hill = HillClimbSolver(seed=int(rng.integers(0, 2**32-1)))
    walks = WalkSATSolver(max_flips=max_flips, seed=int(rng.integers(0, 2**32-1)))
    gen = GeneticSolver(generations=generations, seed=int(rng.integers(0, 2**32-1)))

    results = {"hill": [], "walksat": [], "genetic": []}

    for k in range(trials):
        cnf = Formula.random_ksat(n_vars, int(ratio*n_vars), seed=int(rng.integers(0, 2**32-1)))
        r_h = hill.solve(cnf)
        r_w = walks.solve(cnf)
        r_g = gen.solve(cnf)

        results["hill"].append(r_h)
        results["walksat"].append(r_w)
        results["genetic"].append(r_g)

        print(f"[trial {k+1}/{trials}] "
              f"H:{r_h.status}@{r_h.satisfied} "
              f"W:{r_w.status}@{r_w.satisfied} "
              f"G:{r_g.status}@{r_g.satisfied}")

    def summarize(key):
        sat = np.array([r.is_sat for r in results[key]])
        best = np.array([r.satisfied for r in results[key]])
        return float(sat.mean()), float(best.mean())

    m = int(ratio*n_vars)
    print("\n--- summary ---")
    for key, label in (("hill", "HillClimb"), ("walksat", "WalkSAT"), ("genetic", "Genetic")):
        rate, mean_sat = summarize(key)
        print(f"{label:9s} solve_rate={rate:.2f}, mean_satisfied={mean_sat:.1f}/{m}")

if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--n", type=int, default=50)
    ap.add_argument("--ratio", type=float, default=4.2)
    ap.add_argument("--trials", type=int, default=10)
    ap.add_argument("--max_flips", type=int, default=10000)
    ap.add_argument("--generations", type=int, default=200)
    ap.add_argument("--seed", type=int, default=1234)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    demo(args.n, args.ratio, args.trials, args.max_flips, args.generations, args.seed)
