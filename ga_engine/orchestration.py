"""
Orchestration module for the GA engine.

Implements the standard and divergent run workflows used by the CLI.
"""

from pathlib import Path
from typing import Dict, Tuple

from .algorithm import StandardGeneticAlgorithm
from .config import GeneticAlgorithmStrategy, strategy_from_dict
from .divergent import DivergentGeneticAlgorithm
from .io_utils import (
    build_run_metadata,
    create_output_folder,
    save_execution_statistics,
    save_population_csv,
    save_run_metadata
)
from .logger_setup import setup_logger
from .problems import PROBLEMS


def _prepare_run(run_config: Dict, banner: str) -> Tuple[GeneticAlgorithmStrategy, object, Path, bool]:
    print("=" * 70)
    print(banner)
    print("=" * 70)

    output_root = Path(run_config['output']['root'])
    overwrite = run_config['output'].get('overwrite', False)
    create_output_folder(output_root, overwrite=overwrite)
    print(f"Output directory: {output_root}")

    logging_config = run_config.get('logging', {})
    log_file = setup_logger(
        log_dir=logging_config.get('dir', str(output_root / 'logs')),
        level=logging_config.get('level', 'INFO'),
        enable_colors=logging_config.get('colors', True),
    )
    print(f"Log file: {log_file}")

    problem_config = dict(run_config['problem'])
    problem = PROBLEMS[problem_config.pop('name')].from_config(problem_config)

    strategy = strategy_from_dict(
        run_config['strategy'],
        breeder=problem,
        gene_dao=problem,
        fitness_evaluator=problem
    )
    print(f"Random seed: {strategy.random_seed}")
    print(f"Population size: {strategy.population_size}")
    print(f"Generations: {strategy.number_of_generations}")
    print(f"Selector: {strategy.selector_name}, crossover: {strategy.crossover_operator}, "
          f"mutation: {strategy.mutation_operator}\n")

    return strategy, problem, output_root, overwrite


def _write_outputs(run_config: Dict, problem, population, execution_statistics, output_root: Path, overwrite: bool) -> None:
    best = population.best()

    statistics_path = save_execution_statistics(
        execution_statistics, output_root / 'statistics.csv', overwrite=overwrite
    )

    population.sort()
    population_path = save_population_csv(
        population.individuals, output_root / 'population.csv', decode=problem.decode, overwrite=overwrite
    )

    metadata_path = save_run_metadata(
        build_run_metadata(execution_statistics, best), output_root / 'run_metadata.yaml', overwrite=overwrite
    )

    plot_path = None
    if run_config['output'].get('plot', False):
        from .visualization_utils import plot_fitness_history
        plot_path = plot_fitness_history(execution_statistics, output_root / 'fitness_history.png')

    print()
    print("=" * 70)
    print("SUMMARY")
    print("=" * 70)
    if best is not None:
        print(f"Best fitness: {', '.join(f'{f.value:.4f}' for f in best.fitnesses)}")
        print(f"Best genome: {problem.decode(best)}")
    print(f"Generations recorded: {len(execution_statistics.generations)}")
    print(f"Statistics: {statistics_path}")
    print(f"Population: {population_path}")
    print(f"Metadata: {metadata_path}")
    if plot_path is not None:
        print(f"Plot: {plot_path}")


def run_standard(run_config: Dict) -> None:
    """
    Evolve a single population and write statistics, the final population
    and run metadata to the output folder.

    Args:
        run_config: Run configuration dict from YAML
    """
    strategy, problem, output_root, overwrite = _prepare_run(run_config, "STANDARD GENETIC ALGORITHM")

    algorithm = StandardGeneticAlgorithm(strategy)
    execution_statistics = algorithm.evolve()

    _write_outputs(run_config, problem, algorithm.population, execution_statistics, output_root, overwrite)


def run_divergent(run_config: Dict) -> None:
    """
    Evolve several sub-populations with extinction cycles and speciation,
    then write the outputs of the best sub-population.

    Args:
        run_config: Run configuration dict from YAML
    """
    strategy, problem, output_root, overwrite = _prepare_run(run_config, "DIVERGENT GENETIC ALGORITHM")

    algorithm = DivergentGeneticAlgorithm(strategy)
    best_population = algorithm.evolve()

    print(f"Populations evolved: {len(algorithm.execution_statistics)}")

    # Statistics of the run that produced the winning population
    execution_statistics = algorithm.execution_statistics[-1]
    for candidate, stats in zip(reversed(algorithm.populations), reversed(algorithm.execution_statistics)):
        if candidate is best_population:
            execution_statistics = stats
            break

    _write_outputs(run_config, problem, best_population, execution_statistics, output_root, overwrite)
