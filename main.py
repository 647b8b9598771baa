# Example: minimize a weighted sum of squares with the PSO engine.
# python main.py --dim 3 --swarm-size 100 --t-max 100000 --target 1e-4 --plot

import argparse
import time

import numpy as np

from PSO_ENGINE import CONFIG
from PSO_ENGINE.Graphics.graphing import plot_gbest_convergence
from PSO_ENGINE.Logs.logger import log_header, log_info, log_success
from PSO_ENGINE.PSO.Config import Config
from PSO_ENGINE.PSO.PSO import run
from PSO_ENGINE.PSO.Termination import below


def sum_squares(p, flat_dim, dimensions):
    """sum(i * p[i]**2) for i = 0..n-1; the first coordinate carries no weight."""
    return float(np.sum(np.arange(dimensions[0]) * p[:dimensions[0]] ** 2))


def main():
    parser = argparse.ArgumentParser(description="Run PSO on a weighted sum of squares")
    parser.add_argument("--dim", type=int, default=3, help="Problem dimension")
    parser.add_argument("--low", type=float, default=-10.0, help="Lower bound for every dimension")
    parser.add_argument("--high", type=float, default=10.0, help="Upper bound for every dimension")
    parser.add_argument("--swarm-size", type=int, default=100, help="Number of particles")
    parser.add_argument("--t-max", type=int, default=100000, help="Objective-evaluation budget")
    parser.add_argument("--target", type=float, default=1e-4, help="Stop once the best value is below this")
    parser.add_argument("--neighborhood", type=str, default=CONFIG.NEIGHBORHOOD, choices=["gbest", "lbest"])
    parser.add_argument("--workers", type=int, default=1, help="Evaluation workers")
    parser.add_argument("--executor", type=str, default=CONFIG.EXECUTOR, choices=["thread", "process"],
                        help="Worker kind; 'process' for CPU-bound pure-Python objectives")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed")
    parser.add_argument("--progress", action="store_true", help="Log progress every round")
    parser.add_argument("--plot", action="store_true", help="Save a convergence plot")
    args = parser.parse_args()

    config = Config.uniform(
        [args.dim], args.low, args.high,
        swarm_size=args.swarm_size,
        t_max=args.t_max,
        neighborhood=args.neighborhood,
        workers=args.workers,
        executor=args.executor,
        seed=args.seed,
        progress=args.progress,
    )

    log_header("=== PSO: weighted sum of squares ===", "main")
    before = time.perf_counter()
    pso = run(config, sum_squares, below(args.target))
    log_info(f"Elapsed time: {time.perf_counter() - before:.2f}s", "main")

    model = pso.model
    log_success(f"Found minimum: {model.get_f_best():.6e}", "main")
    log_success(f"Found minimizer: {model.get_x_best()}", "main")

    if args.plot:
        plot_gbest_convergence(model.history, evaluations_per_round=config.swarm_size)


if __name__ == "__main__":
    main()
