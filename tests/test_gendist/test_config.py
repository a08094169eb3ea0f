"""
Tests for run configuration loading, validation and the CLI entry point.
"""

import io
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

import yaml

from gendist.cli import main, run_from_config
from gendist.config import build_run, load_run_config, validate_run_config
from gendist.exceptions import ConfigurationError, GraphIntegrityError


EXAMPLE_CONFIG = Path(__file__).resolve().parents[2] / "examples" / "grid_run.yaml"


def small_config():
    return {
        'random_seed': 3,
        'generations': 4,
        'report_every': 2,
        'engine': {'population_size': 4, 'mutation_rate': 0.5, 'crossover_rate': 0.5},
        'objective': {'terms': [{'name': 'population_balance'}, {'name': 'cut_edges', 'weight': 2}]},
        'districts': [
            {'id': 'A', 'group': 1, 'population': 10, 'neighbors': ['B']},
            {'id': 'B', 'group': 1, 'population': 10, 'neighbors': ['A', 'C']},
            {'id': 'C', 'group': 1, 'population': 10, 'neighbors': ['B', 'D']},
            {'id': 'D', 'group': 2, 'population': 10, 'neighbors': ['C']},
        ],
    }


class TestLoadRunConfig(unittest.TestCase):
    """Test YAML loading."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_missing_file(self):
        """Test that a missing file raises FileNotFoundError."""
        with self.assertRaises(FileNotFoundError):
            load_run_config(self.temp_dir / "missing.yaml")

    def test_empty_file(self):
        """Test that an empty file is rejected."""
        path = self.temp_dir / "empty.yaml"
        path.write_text("")

        with self.assertRaises(ConfigurationError):
            load_run_config(path)

    def test_invalid_yaml(self):
        """Test that malformed YAML is rejected."""
        path = self.temp_dir / "broken.yaml"
        path.write_text("engine: [unclosed\n")

        with self.assertRaises(ConfigurationError):
            load_run_config(path)

    def test_non_mapping(self):
        """Test that a top-level list is rejected."""
        path = self.temp_dir / "list.yaml"
        path.write_text("- 1\n- 2\n")

        with self.assertRaises(ConfigurationError):
            load_run_config(path)

    def test_round_trip_through_yaml(self):
        """Test loading a configuration written with PyYAML."""
        path = self.temp_dir / "run.yaml"
        path.write_text(yaml.safe_dump(small_config()))

        config = load_run_config(path)

        self.assertEqual(config['engine']['population_size'], 4)
        self.assertEqual(len(config['districts']), 4)

    def test_bundled_example_is_valid(self):
        """Test that the bundled grid example loads and builds."""
        config = load_run_config(EXAMPLE_CONFIG)
        validate_run_config(config)
        setup = build_run(config)

        self.assertEqual(len(setup.graph), 16)
        self.assertTrue(setup.graph.is_symmetric())
        self.assertEqual(setup.prototype.groups(), {1, 2})


class TestValidateRunConfig(unittest.TestCase):
    """Test structural validation."""

    def test_valid_config(self):
        """Test that a complete configuration validates."""
        validate_run_config(small_config())

    def test_missing_sections(self):
        """Test that engine and districts sections are required."""
        for section in ('engine', 'districts'):
            config = small_config()
            del config[section]
            with self.assertRaises(ConfigurationError):
                validate_run_config(config)

    def test_missing_population_size(self):
        """Test that engine.population_size is required."""
        config = small_config()
        del config['engine']['population_size']

        with self.assertRaises(ConfigurationError):
            validate_run_config(config)

    def test_bad_rate_type(self):
        """Test that non-numeric rates are rejected."""
        config = small_config()
        config['engine']['mutation_rate'] = "high"

        with self.assertRaises(ConfigurationError):
            validate_run_config(config)

    def test_bad_generations(self):
        """Test that negative generation counts are rejected."""
        config = small_config()
        config['generations'] = -1

        with self.assertRaises(ConfigurationError):
            validate_run_config(config)

    def test_bad_districts(self):
        """Test empty, incomplete and negative district entries."""
        config = small_config()
        config['districts'] = []
        with self.assertRaises(ConfigurationError):
            validate_run_config(config)

        config = small_config()
        del config['districts'][0]['group']
        with self.assertRaises(ConfigurationError):
            validate_run_config(config)

        config = small_config()
        config['districts'][0]['population'] = -5
        with self.assertRaises(ConfigurationError):
            validate_run_config(config)

    def test_unhashable_labels_rejected(self):
        """Test that list or mapping ids, groups and neighbors are configuration errors."""
        for key, value in (('id', [1]), ('group', {'a': 1}), ('neighbors', [['B']])):
            config = small_config()
            config['districts'][0][key] = value
            with self.assertRaises(ConfigurationError):
                validate_run_config(config)

    def test_bad_objective(self):
        """Test that an empty objective term list is rejected."""
        config = small_config()
        config['objective'] = {'terms': []}

        with self.assertRaises(ConfigurationError):
            validate_run_config(config)


class TestBuildRun(unittest.TestCase):
    """Test turning configuration into engine inputs."""

    def test_build(self):
        """Test building graph, prototype, engine config and objective."""
        setup = build_run(small_config())

        self.assertEqual(setup.graph.unit_ids, ('A', 'B', 'C', 'D'))
        self.assertEqual(setup.prototype.assignments, (1, 1, 1, 2))
        self.assertEqual(setup.ga_config.population_size, 4)
        self.assertEqual(setup.ga_config.num_mutate, 2)
        self.assertEqual(setup.seed, 3)
        self.assertEqual(setup.generations, 4)
        # balance |30-20| + |10-20| = 20, plus 2 * one cut edge
        self.assertEqual(setup.objective(setup.prototype), 22)

    def test_rates_clamped(self):
        """Test that out-of-range rates are clamped when building."""
        config = small_config()
        config['engine']['mutation_rate'] = 3.0

        setup = build_run(config)

        self.assertEqual(setup.ga_config.mutation_rate, 1.0)

    def test_dangling_neighbor(self):
        """Test that unknown neighbor ids raise GraphIntegrityError."""
        config = small_config()
        config['districts'][0]['neighbors'] = ['Z']

        with self.assertRaises(GraphIntegrityError):
            build_run(config)

    def test_duplicate_district(self):
        """Test that repeated district ids are rejected."""
        config = small_config()
        config['districts'].append({'id': 'A', 'group': 2})

        with self.assertRaises(ConfigurationError):
            build_run(config)

    def test_unknown_objective(self):
        """Test that unknown objective names are rejected."""
        config = small_config()
        config['objective'] = {'terms': [{'name': 'nonsense'}]}

        with self.assertRaises(ConfigurationError):
            build_run(config)

    def test_default_objective(self):
        """Test that population balance is used when no objective is given."""
        config = small_config()
        del config['objective']

        setup = build_run(config)

        self.assertEqual(setup.objective(setup.prototype), 20)


class TestCli(unittest.TestCase):
    """Test the command-line entry point."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.config_path = self.temp_dir / "run.yaml"
        self.config_path.write_text(yaml.safe_dump(small_config()))

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_run_from_config(self):
        """Test a full run from a configuration file."""
        with redirect_stdout(io.StringIO()) as out:
            report = run_from_config(str(self.config_path))

        self.assertEqual(report.generation, 4)
        self.assertLessEqual(report.best_cost, 22)
        self.assertIn("SUMMARY", out.getvalue())

    def test_overrides(self):
        """Test overriding generations and seed."""
        with redirect_stdout(io.StringIO()):
            report = run_from_config(str(self.config_path), generations=2, seed=9)

        self.assertEqual(report.generation, 2)

    def test_main_success(self):
        """Test the entry point exit code on success."""
        with redirect_stdout(io.StringIO()):
            code = main([str(self.config_path), '--generations', '1'])

        self.assertEqual(code, 0)

    def test_main_reports_errors(self):
        """Test the entry point error message and exit code."""
        with redirect_stdout(io.StringIO()) as out:
            code = main([str(self.temp_dir / "missing.yaml")])

        self.assertEqual(code, 1)
        self.assertIn("Error:", out.getvalue())

    def test_main_reports_list_district_id(self):
        """Test that a district id parsed as a list exits with an error message."""
        self.config_path.write_text("engine: {population_size: 2}\ndistricts:\n  - {id: [1], group: 1}\n")

        with redirect_stdout(io.StringIO()) as out:
            code = main([str(self.config_path)])

        self.assertEqual(code, 1)
        self.assertIn("Error:", out.getvalue())


if __name__ == '__main__':
    unittest.main()
