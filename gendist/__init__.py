"""
Genetic search for legislative district assignments

This package evolves assignments of voting districts (units) to legislative
districts (groups) over a fixed adjacency graph, minimising a caller-supplied
integer cost.

Key Features:
- Graph-constrained mutation (a unit joins a neighboring district)
- Single-point crossover over position-aligned genomes
- Truncation elitism: the best cost never gets worse
- Reproducible runs from one seed, optional threaded scoring

Modules:
- data_models: Core data structures (Unit, AdjacencyGraph, Genome, GAConfig)
- exceptions: Error taxonomy
- graph_utils: Graph construction and per-group diagnostics
- mutation: Neighbor-join and gaussian mutation operators
- crossover: Single-point crossover
- objectives: Built-in cost functions and the objective registry
- engine: Generational engine
- config: YAML run configuration
- orchestration: Multi-generation run with progress reporting
- cli: Command-line interface
"""

__version__ = "0.1.0"

from .data_models import AdjacencyGraph, GAConfig, Genome, GenerationReport, Unit
from .engine import Engine, EngineState
from .exceptions import (
    ConfigurationError,
    GendistError,
    GraphIntegrityError,
    MutationExhaustedError,
    NoNeighborsError,
    ObjectiveEvaluationError,
)

__all__ = [
    "AdjacencyGraph",
    "ConfigurationError",
    "Engine",
    "EngineState",
    "GAConfig",
    "GendistError",
    "Genome",
    "GenerationReport",
    "GraphIntegrityError",
    "MutationExhaustedError",
    "NoNeighborsError",
    "ObjectiveEvaluationError",
    "Unit",
]
