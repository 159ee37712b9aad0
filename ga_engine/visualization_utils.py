"""
Visualization utilities for GA runs.

Plots fitness and diversity over generations from ExecutionStatistics.
"""

from pathlib import Path
from typing import Optional, Tuple, Union

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from .statistics import ExecutionStatistics  # noqa: E402


def plot_fitness_history(
    execution_statistics: ExecutionStatistics,
    output_path: Union[str, Path],
    title: Optional[str] = None,
    figsize: Tuple[int, int] = (10, 6)
) -> Path:
    """
    Plot best and average fitness per generation.

    If entropy was calculated, it is drawn on a secondary axis.

    Args:
        execution_statistics: Statistics of a finished run
        output_path: Path for the PNG
        title: Optional plot title
        figsize: Figure size in inches

    Returns:
        Path to saved figure
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    generations = [stats.generation for stats in execution_statistics.generations]
    best = [stats.best_fitness for stats in execution_statistics.generations]
    average = [stats.average_fitness for stats in execution_statistics.generations]
    entropy = [stats.entropy if stats.entropy is not None else float('nan') for stats in execution_statistics.generations]

    fig, ax = plt.subplots(figsize=figsize)

    ax.plot(generations, best, label='Best fitness', color='tab:green', linewidth=2)
    ax.plot(generations, average, label='Average fitness', color='tab:blue', linestyle='--')
    ax.set_xlabel('Generation')
    ax.set_ylabel('Fitness')
    ax.grid(True, alpha=0.3)

    handles, labels = ax.get_legend_handles_labels()

    if any(stats.entropy is not None for stats in execution_statistics.generations):
        ax_entropy = ax.twinx()
        ax_entropy.plot(generations, entropy, label='Entropy', color='tab:orange', alpha=0.7)
        ax_entropy.set_ylabel('Entropy (bits)')
        extra_handles, extra_labels = ax_entropy.get_legend_handles_labels()
        handles += extra_handles
        labels += extra_labels

    ax.legend(handles, labels, loc='lower right')
    ax.set_title(title or 'Fitness by generation')

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)

    return output_path
