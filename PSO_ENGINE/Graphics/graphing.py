# File: PSO_ENGINE/Graphics/graphing.py
# Convergence plots for finished (or paused) runs.

import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from PSO_ENGINE import CONFIG
from PSO_ENGINE.Logs.logger import log_info, log_warning

# --- Module Name for Logging ---
module_name = Path(__file__).stem  # Gets 'graphing'


def generate_timestamped_filename(base_name: str, extension: str = "png") -> str:
    """Returns "YYYYMMDD_HHMMSS_<base_name>.<extension>"."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{timestamp}_{base_name}.{extension}"


def plot_gbest_convergence(history: Sequence[float],
                           evaluations_per_round: Optional[int] = None,
                           save_dir: Optional[str] = CONFIG.FIGURES_DIR,
                           filename: Optional[str] = None,
                           use_log_scale: bool = True,
                           show: bool = False) -> Optional[str]:
    """
    Plots the global best value after each round (Model.history).

    Args:
        history: Global best value per round.
        evaluations_per_round: When given, the x axis shows objective evaluations
            instead of rounds.
        save_dir: Directory to save into; None skips saving.
        filename: File name inside save_dir; a timestamped name is used when None.
        use_log_scale: Log y axis. Falls back to linear if any value is <= 0.
        show: Display the figure interactively.

    Returns:
        The saved file path, or None if nothing was saved.
    """
    values = np.asarray(history, dtype=float)
    finite = np.isfinite(values)
    if not finite.any():
        log_warning("No finite global best values to plot.", module_name)
        return None

    steps = np.arange(1, len(values) + 1)
    xlabel = "Round"
    if evaluations_per_round is not None:
        steps = steps * evaluations_per_round
        xlabel = "Objective Evaluations"

    if use_log_scale and np.any(values[finite] <= 0):
        log_warning("Non-positive values present, using a linear y axis.", module_name)
        use_log_scale = False

    log_info(f"Generating convergence plot ({len(values)} rounds)", module_name)
    fig = plt.figure(figsize=(10, 6))
    plt.plot(steps[finite], values[finite], label="Global Best Value", color="tab:blue", linewidth=1.5)
    plt.xlabel(xlabel)
    plt.ylabel("Global Best Value" + (" (log scale)" if use_log_scale else ""))
    plt.title("PSO Global Best Convergence")
    if use_log_scale:
        plt.yscale("log")
    plt.legend(loc="best")
    plt.grid(True, which="both" if use_log_scale else "major", linestyle="--")
    plt.tight_layout()

    saved_path = None
    if save_dir is not None:
        os.makedirs(save_dir, exist_ok=True)
        saved_path = os.path.join(save_dir, filename or generate_timestamped_filename("gbest_convergence"))
        plt.savefig(saved_path)
        log_info(f"Saved plot: {saved_path}", module_name)
    if show:
        plt.show()
    plt.close(fig)
    return saved_path
