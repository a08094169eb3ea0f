"""
Run configuration for the redistricting GA.

Loads a YAML run configuration, validates its structure and turns it into
the objects the engine needs: adjacency graph, prototype genome, GAConfig
and objective.

Example run configuration:

    random_seed: 42
    generations: 200
    report_every: 20
    engine:
      population_size: 20
      mutation_rate: 0.1
      crossover_rate: 0.5
    objective:
      terms:
        - {name: population_balance, weight: 1}
        - {name: cut_edges, weight: 10}
    districts:
      - {id: 1, group: 1, republicans: 120, democrats: 80, other: 5, neighbors: [2]}
      - {id: 2, group: 2, republicans: 60, democrats: 140, other: 3, neighbors: [1]}
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union
import yaml

from .data_models import AdjacencyGraph, GAConfig, Genome, prototype_from_mapping
from .exceptions import ConfigurationError
from .graph_utils import build_graph
from .objectives import Objective, build_objective


PAYLOAD_FIELDS = ('republicans', 'democrats', 'other', 'population')

DEFAULT_OBJECTIVE = [{'name': 'population_balance', 'weight': 1}]


@dataclass
class RunSetup:
    """Everything needed to start a run, built from a run configuration."""
    graph: AdjacencyGraph
    prototype: Genome
    ga_config: GAConfig
    objective: Objective
    seed: Optional[int]
    generations: int
    report_every: int
    target_cost: Optional[int] = None


def load_run_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load run configuration from YAML file.

    Args:
        config_path: Path to run configuration YAML file

    Returns:
        Dictionary containing run configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigurationError: If the file is not valid YAML or is empty
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigurationError("Configuration file is empty")

    if not isinstance(config, dict):
        raise ConfigurationError("Configuration must be a mapping at the top level")

    return config


def _require_int(value: Any, name: str, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        qualifier = "positive" if minimum > 0 else "non-negative"
        raise ConfigurationError(f"'{name}' must be a {qualifier} integer, got: {value!r}")


def validate_run_config(config: Dict[str, Any]) -> None:
    """
    Validate run configuration structure.

    Args:
        config: Run configuration dictionary

    Raises:
        ConfigurationError: If configuration is invalid
    """
    for field_name in ('engine', 'districts'):
        if field_name not in config:
            raise ConfigurationError(f"Missing required field: '{field_name}'")

    if not isinstance(config['engine'], dict):
        raise ConfigurationError("'engine' must be a dictionary")

    if 'population_size' not in config['engine']:
        raise ConfigurationError("Missing required field: 'engine.population_size'")

    for rate in ('mutation_rate', 'crossover_rate'):
        if rate in config['engine'] and not isinstance(config['engine'][rate], (int, float)):
            raise ConfigurationError(f"'engine.{rate}' must be a number")

    _require_int(config.get('generations', 1), 'generations', 0)
    _require_int(config.get('report_every', 1), 'report_every', 1)

    seed = config.get('random_seed')
    if seed is not None:
        _require_int(seed, 'random_seed', 0)

    target = config.get('target_cost')
    if target is not None and (isinstance(target, bool) or not isinstance(target, int)):
        raise ConfigurationError(f"'target_cost' must be an integer, got: {target!r}")

    _validate_districts(config['districts'])
    _validate_objective(config.get('objective', {'terms': DEFAULT_OBJECTIVE}))


def _require_label(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ConfigurationError(f"'{name}' must be an integer or a string, got: {value!r}")


def _validate_districts(districts: Any) -> None:
    if not isinstance(districts, list) or not districts:
        raise ConfigurationError("'districts' must be a non-empty list")

    for i, district in enumerate(districts):
        if not isinstance(district, dict):
            raise ConfigurationError(f"District entry {i} must be a dictionary")
        for required in ('id', 'group'):
            if required not in district:
                raise ConfigurationError(f"District entry {i} is missing '{required}'")
            _require_label(district[required], f"districts[{i}].{required}")
        neighbors = district.get('neighbors', [])
        if not isinstance(neighbors, list):
            raise ConfigurationError(f"District {district['id']!r}: 'neighbors' must be a list")
        for neighbor in neighbors:
            _require_label(neighbor, f"districts[{i}].neighbors")
        for payload_field in PAYLOAD_FIELDS:
            if payload_field in district:
                _require_int(district[payload_field], f"districts[{i}].{payload_field}", 0)


def _validate_objective(objective: Any) -> None:
    if not isinstance(objective, dict) or 'terms' not in objective:
        raise ConfigurationError("'objective' must be a dictionary with a 'terms' list")

    terms = objective['terms']
    if not isinstance(terms, list) or not terms:
        raise ConfigurationError("'objective.terms' must be a non-empty list")

    for term in terms:
        if not isinstance(term, dict) or 'name' not in term:
            raise ConfigurationError(f"Objective term must be a dictionary with a 'name': {term!r}")


def build_run(config: Dict[str, Any]) -> RunSetup:
    """
    Build graph, prototype, engine config and objective from a run config.

    Args:
        config: Validated run configuration dictionary

    Returns:
        RunSetup

    Raises:
        ConfigurationError: If values are inconsistent
        GraphIntegrityError: If districts reference unknown neighbors
    """
    payloads = {}
    neighbors = {}
    groups = {}
    for district in config['districts']:
        unit_id = district['id']
        if unit_id in payloads:
            raise ConfigurationError(f"Duplicate district id: {unit_id!r}")
        payloads[unit_id] = {k: district[k] for k in PAYLOAD_FIELDS if k in district}
        neighbors[unit_id] = district.get('neighbors', [])
        groups[unit_id] = district['group']

    graph = build_graph(payloads, neighbors)
    prototype = prototype_from_mapping(graph, groups)

    engine_config = config['engine']
    ga_config = GAConfig(
        population_size=engine_config['population_size'],
        mutation_rate=engine_config.get('mutation_rate', 0.1),
        crossover_rate=engine_config.get('crossover_rate', 0.5),
        max_mutation_retries=engine_config.get('max_mutation_retries', 10),
        workers=engine_config.get('workers', 1),
    )

    terms = config.get('objective', {}).get('terms', DEFAULT_OBJECTIVE)
    objective = build_objective(terms, graph, prototype)

    return RunSetup(
        graph=graph,
        prototype=prototype,
        ga_config=ga_config,
        objective=objective,
        seed=config.get('random_seed'),
        generations=config.get('generations', 1),
        report_every=config.get('report_every', 1),
        target_cost=config.get('target_cost'),
    )
