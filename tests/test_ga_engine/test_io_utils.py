"""
Tests for statistics export, run metadata and the config-driven run.
"""

import csv
import shutil
import tempfile
import unittest
from pathlib import Path

import yaml
from loguru import logger

from ga_engine.cli import run_from_config
from ga_engine.io_utils import (
    STATISTICS_FIELDS,
    build_run_metadata,
    create_output_folder,
    load_execution_statistics,
    save_execution_statistics,
    save_population_csv,
    save_run_metadata
)
from ga_engine.statistics import ExecutionStatistics, GenerationStatistics
from ga_engine.visualization_utils import plot_fitness_history

from .helpers import make_genome


def make_execution_statistics():
    execution_statistics = ExecutionStatistics(strategy_summary={'population_size': 4, 'selector': 'random'})
    for generation, best in enumerate([0.2, 0.5, 0.7]):
        stats = GenerationStatistics(generation, average_fitness=best / 2, best_fitness=best, entropy=1.0 - best)
        stats.number_of_evaluations = 4
        stats.performance.total_millis = 10 * (generation + 1)
        execution_statistics.add_generation_statistics(stats)
    execution_statistics.finish()
    return execution_statistics


class TestStatisticsExport(unittest.TestCase):

    def setUp(self):
        """Create temporary directory for tests."""
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir)

    def test_save_and_load_statistics(self):
        """Test statistics survive a CSV save and load."""
        path = save_execution_statistics(make_execution_statistics(), self.temp_dir / 'stats.csv')

        with open(path, newline='') as f:
            self.assertEqual(next(csv.reader(f)), STATISTICS_FIELDS)

        loaded = load_execution_statistics(path)

        self.assertEqual([s.generation for s in loaded], [0, 1, 2])
        self.assertEqual([s.best_fitness for s in loaded], [0.2, 0.5, 0.7])
        self.assertEqual(loaded[2].performance.total_millis, 30)
        self.assertEqual(loaded[0].number_of_evaluations, 4)

    def test_refuses_to_overwrite(self):
        """Test existing files are kept unless overwrite is set."""
        path = self.temp_dir / 'stats.csv'
        save_execution_statistics(make_execution_statistics(), path)

        with self.assertRaises(FileExistsError):
            save_execution_statistics(make_execution_statistics(), path)

        save_execution_statistics(make_execution_statistics(), path, overwrite=True)

    def test_load_rejects_foreign_csv(self):
        """Test a CSV with another header is rejected."""
        path = self.temp_dir / 'other.csv'
        path.write_text("a,b\n1,2\n")

        with self.assertRaises(ValueError):
            load_execution_statistics(path)

    def test_average_generation_time_excludes_initial_population(self):
        """Test generation 0 is left out of the average generation time."""
        self.assertEqual(make_execution_statistics().average_generation_millis(), 25.0)

    def test_population_csv_is_best_first(self):
        """Test the population CSV lists the best genome first."""
        genomes = [make_genome('ab', fitness=0.1), make_genome('cd', fitness=0.9)]

        path = save_population_csv(
            genomes, self.temp_dir / 'population.csv',
            decode=lambda g: ''.join(gene.value for gene in g.genes.values())
        )

        with open(path, newline='') as f:
            rows = list(csv.reader(f))

        self.assertEqual(rows[0], ['rank', 'fitness', 'genome'])
        self.assertEqual(rows[1], ['1', '0.9', 'cd'])
        self.assertEqual(rows[2], ['2', '0.1', 'ab'])

    def test_run_metadata(self):
        """Test run metadata is written as YAML."""
        execution_statistics = make_execution_statistics()
        metadata = build_run_metadata(execution_statistics, make_genome('a', fitness=0.7))

        path = save_run_metadata(metadata, self.temp_dir / 'run_metadata.yaml')

        with open(path) as f:
            loaded = yaml.safe_load(f)

        self.assertEqual(loaded['generations'], 3)
        self.assertEqual(loaded['best_fitness'], [0.7])
        self.assertEqual(loaded['strategy']['selector'], 'random')
        self.assertIsNotNone(loaded['end_time'])

    def test_create_output_folder(self):
        """Test a non-empty output folder needs overwrite."""
        root = self.temp_dir / 'run'
        create_output_folder(root)
        (root / 'file.txt').write_text('x')

        with self.assertRaises(FileExistsError):
            create_output_folder(root)

        create_output_folder(root, overwrite=True)

    def test_plot_fitness_history(self):
        """Test the fitness plot is written to disk."""
        path = plot_fitness_history(make_execution_statistics(), self.temp_dir / 'plots' / 'fitness.png')

        self.assertTrue(path.exists())
        self.assertGreater(path.stat().st_size, 0)


class TestRunFromConfig(unittest.TestCase):
    """Run the CLI workflow end to end on the target-sequence problem."""

    def setUp(self):
        """Create temporary directory for tests."""
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        """Remove log sinks and clean up temporary directory."""
        logger.remove()
        shutil.rmtree(self.temp_dir)

    def write_config(self, algorithm, **strategy):
        values = dict(population_size=20, number_of_generations=3, random_seed=1, worker_threads=2)
        values.update(strategy)
        config = {
            'algorithm': algorithm,
            'strategy': values,
            'problem': {'name': 'target_sequence', 'target': 'hello'},
            'output': {'root': str(self.temp_dir / 'out'), 'plot': True},
            'logging': {'level': 'WARNING', 'colors': False},
        }
        path = self.temp_dir / 'run.yaml'
        with open(path, 'w') as f:
            yaml.safe_dump(config, f)
        return path

    def test_standard_run_writes_outputs(self):
        """Test a standard run writes statistics, population, metadata, plot and log."""
        run_from_config(str(self.write_config('standard', calculate_entropy=True)))

        out = self.temp_dir / 'out'
        for name in ('statistics.csv', 'population.csv', 'run_metadata.yaml', 'fitness_history.png'):
            self.assertTrue((out / name).exists(), name)
        self.assertTrue(any((out / 'logs').iterdir()))

        self.assertEqual(len(load_execution_statistics(out / 'statistics.csv')), 4)

    def test_divergent_run_writes_outputs(self):
        """Test a divergent run writes the winning population."""
        run_from_config(str(self.write_config('divergent', extinction_cycles=1)))

        out = self.temp_dir / 'out'
        with open(out / 'population.csv', newline='') as f:
            rows = list(csv.reader(f))

        self.assertEqual(len(rows), 21)


if __name__ == '__main__':
    unittest.main()
