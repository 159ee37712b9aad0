"""
I/O utilities for the GA engine.

Handles CSV export of execution statistics and populations, YAML run
metadata and output folder management.
"""

import csv
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import yaml

from .data_models import Genome
from .statistics import ExecutionStatistics, GenerationStatistics

STATISTICS_FIELDS = [
    'generation', 'average_fitness', 'best_fitness', 'entropy',
    'number_of_crossovers', 'number_of_mutations', 'number_of_evaluations', 'number_of_invasive',
    'total_millis', 'invasive_millis', 'selection_millis', 'crossover_millis',
    'mutation_millis', 'evaluation_millis', 'entropy_millis',
]


def _prepare_output(output_path: Union[str, Path], overwrite: bool) -> Path:
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


def save_execution_statistics(
    execution_statistics: ExecutionStatistics,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save per-generation statistics to CSV, one row per generation.

    Args:
        execution_statistics: Statistics of a finished run
        output_path: Path for output CSV
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved CSV

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)

    with open(output_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=STATISTICS_FIELDS)
        writer.writeheader()

        for stats in execution_statistics.generations:
            writer.writerow(stats.to_row())

    return output_path


def load_execution_statistics(csv_path: Union[str, Path]) -> List[GenerationStatistics]:
    """
    Load statistics written by save_execution_statistics.

    Raises:
        FileNotFoundError: If CSV file doesn't exist
        ValueError: If the header does not match
    """
    csv_path = Path(csv_path)

    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    def number(value: str, cast):
        return cast(value) if value not in ('', None) else None

    loaded = []
    with open(csv_path, 'r') as f:
        reader = csv.DictReader(f)

        if reader.fieldnames != STATISTICS_FIELDS:
            raise ValueError(f"Invalid statistics CSV format in {csv_path}")

        for row in reader:
            stats = GenerationStatistics(
                generation=int(row['generation']),
                average_fitness=number(row['average_fitness'], float),
                best_fitness=number(row['best_fitness'], float),
                entropy=number(row['entropy'], float),
                number_of_crossovers=int(row['number_of_crossovers']),
                number_of_mutations=int(row['number_of_mutations']),
                number_of_evaluations=int(row['number_of_evaluations']),
                number_of_invasive=int(row['number_of_invasive']),
            )
            for name in STATISTICS_FIELDS[8:]:
                setattr(stats.performance, name, int(row[name]))
            loaded.append(stats)

    return loaded


def save_population_csv(
    genomes: List[Genome],
    output_path: Union[str, Path],
    decode: Optional[Callable[[Genome], str]] = None,
    overwrite: bool = False
) -> Path:
    """
    Save genomes best-first with their fitness values.

    Args:
        genomes: Genomes to save (order is preserved, reversed)
        output_path: Path for output CSV
        decode: Optional function rendering a genome as text
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved CSV
    """
    output_path = _prepare_output(output_path, overwrite)

    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['rank', 'fitness', 'genome'])

        for rank, genome in enumerate(reversed(genomes), start=1):
            fitness = ";".join(str(f.value) for f in genome.fitnesses)
            text = decode(genome) if decode is not None else repr({k: g.value for k, g in genome.genes.items()})
            writer.writerow([rank, fitness, text])

    return output_path


def save_run_metadata(
    metadata: Dict,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save run metadata to a YAML file.

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)

    with open(output_path, 'w') as f:
        yaml.safe_dump(metadata, f, default_flow_style=False, sort_keys=False)

    return output_path


def build_run_metadata(execution_statistics: ExecutionStatistics, best: Optional[Genome] = None) -> Dict:
    """Summarize a run for save_run_metadata."""
    metadata = {
        'start_time': execution_statistics.start_time.isoformat(),
        'end_time': execution_statistics.end_time.isoformat() if execution_statistics.end_time else None,
        'generations': len(execution_statistics.generations),
        'average_generation_millis': execution_statistics.average_generation_millis(),
        'strategy': execution_statistics.strategy_summary,
    }

    if best is not None:
        metadata['best_fitness'] = [f.value for f in best.fitnesses]

    return metadata


def create_output_folder(root: Union[str, Path], overwrite: bool = False) -> Path:
    """
    Create the run output folder.

    Raises:
        FileExistsError: If the folder exists, is not empty and overwrite=False
    """
    root = Path(root)

    if root.exists() and any(root.iterdir()) and not overwrite:
        raise FileExistsError(f"Output folder already exists and is not empty: {root}")

    root.mkdir(parents=True, exist_ok=True)
    return root
