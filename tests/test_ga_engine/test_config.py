"""
Tests for strategy configuration and run-file validation.
"""

import shutil
import tempfile
import unittest
from pathlib import Path

from ga_engine.cli import load_run_config, validate_run_config
from ga_engine.config import GeneticAlgorithmStrategy, load_strategy, strategy_from_dict
from ga_engine.crossover import single_point_crossover
from ga_engine.errors import ConfigValidationError
from ga_engine.selection import RouletteSelector, TournamentSelector
from ga_engine.speciation import proximity_speciation


class TestGeneticAlgorithmStrategy(unittest.TestCase):
    """Test value validation and strategy resolution."""

    def test_defaults_resolve_strategies(self):
        """Test default names resolve to a selector and operator callables."""
        strategy = GeneticAlgorithmStrategy()

        self.assertIsInstance(strategy.selector, TournamentSelector)
        self.assertTrue(callable(strategy.crossover))
        self.assertTrue(callable(strategy.mutation))
        self.assertTrue(callable(strategy.speciation))

    def test_same_seed_same_generator(self):
        """Test equal seeds give equal generators."""
        first = GeneticAlgorithmStrategy(random_seed=5)
        second = GeneticAlgorithmStrategy(random_seed=5)

        self.assertEqual(first.rng.integers(0, 1000, size=5).tolist(), second.rng.integers(0, 1000, size=5).tolist())

    def test_probabilities_out_of_range(self):
        """Test probability-like values outside [0, 1] are rejected."""
        for name in ('mutation_rate', 'tournament_selector_accuracy',
                     'truncation_percentage', 'mutation_stop_probability'):
            for value in (-0.01, 1.01):
                with self.assertRaises(ConfigValidationError, msg=name):
                    GeneticAlgorithmStrategy(**{name: value})

    def test_generation_count(self):
        """Test -1 is accepted and other non-positive counts are rejected."""
        GeneticAlgorithmStrategy(number_of_generations=-1)

        for value in (0, -2):
            with self.assertRaises(ConfigValidationError):
                GeneticAlgorithmStrategy(number_of_generations=value)

    def test_elitism_and_invasive_must_fit(self):
        """Test elitism plus invasive species cannot exceed the population."""
        with self.assertRaises(ConfigValidationError):
            GeneticAlgorithmStrategy(population_size=10, elitism=6, invasive_species_count=5)
        with self.assertRaises(ConfigValidationError):
            GeneticAlgorithmStrategy(elitism=-1)

    def test_counts_must_be_positive(self):
        """Test size-like options must be at least one."""
        for name in ('population_size', 'tournament_size', 'speciation_factor', 'worker_threads'):
            with self.assertRaises(ConfigValidationError, msg=name):
                GeneticAlgorithmStrategy(**{name: 0})

    def test_unknown_strategy_names(self):
        """Test unknown selector, operator and distribution names are rejected."""
        with self.assertRaises(ConfigValidationError):
            GeneticAlgorithmStrategy(selector_name='lottery')
        with self.assertRaises(ConfigValidationError):
            GeneticAlgorithmStrategy(crossover_operator='two_point')
        with self.assertRaises(ConfigValidationError):
            GeneticAlgorithmStrategy(mutation_count_distribution='poisson')

    def test_to_dict_uses_yaml_keys(self):
        """Test to_dict uses YAML keys and omits collaborators."""
        values = GeneticAlgorithmStrategy(random_seed=3).to_dict()

        self.assertEqual(values['selector'], 'tournament')
        self.assertNotIn('selector_name', values)
        self.assertNotIn('fitness_evaluator', values)
        self.assertEqual(values['random_seed'], 3)


class TestStrategyFromDict(unittest.TestCase):

    def setUp(self):
        """Create temporary directory for tests."""
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir)

    def test_flat_mapping(self):
        """Test a flat mapping builds a strategy with collaborators attached."""
        collaborator = object()
        strategy = strategy_from_dict(
            {'selector': 'roulette', 'crossover_operator': 'single_point',
             'speciation_operator': 'proximity', 'population_size': 12},
            breeder=collaborator
        )

        self.assertIsInstance(strategy.selector, RouletteSelector)
        self.assertIs(strategy.crossover, single_point_crossover)
        self.assertIs(strategy.speciation, proximity_speciation)
        self.assertEqual(strategy.population_size, 12)
        self.assertIs(strategy.breeder, collaborator)

    def test_unknown_key(self):
        """Test a misspelled option is rejected."""
        with self.assertRaises(ConfigValidationError):
            strategy_from_dict({'populaton_size': 10})

    def test_runtime_fields_not_accepted_from_yaml(self):
        """Test collaborators cannot be set from a mapping."""
        with self.assertRaises(ConfigValidationError):
            strategy_from_dict({'fitness_evaluator': 'module.Evaluator'})

    def test_load_strategy(self):
        """Test loading a strategy from a YAML file."""
        path = self.temp_dir / 'strategy.yaml'
        path.write_text("population_size: 20\nelitism: 2\nselector: truncation\n")

        strategy = load_strategy(str(path))

        self.assertEqual(strategy.population_size, 20)
        self.assertEqual(strategy.elitism, 2)
        self.assertEqual(strategy.selector_name, 'truncation')

    def test_load_missing_file(self):
        """Test loading a missing file raises FileNotFoundError."""
        with self.assertRaises(FileNotFoundError):
            load_strategy(str(self.temp_dir / 'missing.yaml'))

    def test_load_invalid_yaml(self):
        """Test malformed YAML is a configuration error."""
        path = self.temp_dir / 'broken.yaml'
        path.write_text("population_size: [10\n")

        with self.assertRaises(ConfigValidationError):
            load_strategy(str(path))


class TestRunConfig(unittest.TestCase):
    """Test run-file structure checks used by the CLI."""

    def setUp(self):
        """Set up a minimal valid run configuration."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.config = {
            'algorithm': 'standard',
            'strategy': {'population_size': 10},
            'problem': {'name': 'target_sequence', 'target': 'abc'},
            'output': {'root': str(self.temp_dir / 'out')},
        }

    def tearDown(self):
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir)

    def test_valid_config(self):
        """Test a minimal run configuration passes validation."""
        validate_run_config(self.config)

    def test_invalid_algorithm(self):
        """Test an unknown algorithm is rejected."""
        self.config['algorithm'] = 'annealing'

        with self.assertRaises(ConfigValidationError):
            validate_run_config(self.config)

    def test_missing_section(self):
        """Test a missing required section is rejected."""
        del self.config['problem']

        with self.assertRaises(ConfigValidationError):
            validate_run_config(self.config)

    def test_unknown_problem(self):
        """Test an unknown problem name is rejected."""
        self.config['problem']['name'] = 'cipher'

        with self.assertRaises(ConfigValidationError):
            validate_run_config(self.config)

    def test_missing_output_root(self):
        """Test output.root is required."""
        self.config['output'] = {'plot': True}

        with self.assertRaises(ConfigValidationError):
            validate_run_config(self.config)

    def test_load_empty_file(self):
        """Test an empty run file is a configuration error."""
        path = self.temp_dir / 'empty.yaml'
        path.write_text("")

        with self.assertRaises(ConfigValidationError):
            load_run_config(str(path))


if __name__ == '__main__':
    unittest.main()
