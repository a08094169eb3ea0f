"""
Data models for the redistricting GA.

Core data structures representing voting districts (units), the adjacency
graph between them, genomes (group assignments), engine configuration and
per-generation reports.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable, Iterator

import networkx as nx

from .exceptions import ConfigurationError, GraphIntegrityError


@dataclass(frozen=True)
class Unit:
    """
    A single voting district.

    Attributes:
        id: Unique identifier of the unit
        neighbors: Identifiers of adjacent units (fixed at load time)
        payload: Domain data used only by objectives (vote counts, population)
    """
    id: Hashable
    neighbors: frozenset = field(default_factory=frozenset)
    payload: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        """Freeze the neighbor collection."""
        if not isinstance(self.neighbors, frozenset):
            object.__setattr__(self, "neighbors", frozenset(self.neighbors))

    @property
    def population(self) -> int:
        """Population of the unit, falling back to the total vote count."""
        if "population" in self.payload:
            return int(self.payload["population"])
        return int(
            self.payload.get("republicans", 0)
            + self.payload.get("democrats", 0)
            + self.payload.get("other", 0)
        )


class AdjacencyGraph:
    """
    Static neighbor relation between units.

    Units keep the order they were supplied in; that order is the canonical
    ordering every Genome is aligned to. Neighbor lookups by index return
    indices in canonical order so random choices over them are reproducible.

    Raises:
        GraphIntegrityError: On duplicate unit ids or neighbor ids that do
            not name a unit
    """

    def __init__(self, units: Iterable[Unit]):
        self._units = tuple(units)
        self._index: dict[Hashable, int] = {}

        for i, unit in enumerate(self._units):
            if unit.id in self._index:
                raise GraphIntegrityError(f"Duplicate unit id: {unit.id!r}")
            self._index[unit.id] = i

        neighbor_indices = []
        for unit in self._units:
            dangling = [n for n in unit.neighbors if n not in self._index]
            if dangling:
                raise GraphIntegrityError(
                    f"Unit {unit.id!r} references unknown neighbors: "
                    f"{sorted(map(repr, dangling))}"
                )
            neighbor_indices.append(tuple(sorted(self._index[n] for n in unit.neighbors)))
        self._neighbor_indices = tuple(neighbor_indices)

        self._undirected = nx.Graph()
        self._undirected.add_nodes_from(range(len(self._units)))
        self._undirected.add_edges_from(
            (i, j) for i, nbrs in enumerate(self._neighbor_indices) for j in nbrs if i != j
        )

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[Unit]:
        return iter(self._units)

    def __contains__(self, unit_id: Hashable) -> bool:
        return unit_id in self._index

    @property
    def unit_ids(self) -> tuple:
        """Unit ids in canonical order."""
        return tuple(unit.id for unit in self._units)

    def unit(self, unit_id: Hashable) -> Unit:
        return self._units[self._index[unit_id]]

    def unit_at(self, index: int) -> Unit:
        return self._units[index]

    def index_of(self, unit_id: Hashable) -> int:
        return self._index[unit_id]

    def neighbors(self, unit_id: Hashable) -> frozenset:
        return self.unit(unit_id).neighbors

    def neighbor_indices(self, index: int) -> tuple[int, ...]:
        return self._neighbor_indices[index]

    def edges(self) -> list[tuple[int, int]]:
        """
        Undirected edges as (i, j) index pairs with i < j.

        An asymmetric neighbor entry still contributes its edge once.
        """
        return sorted((min(i, j), max(i, j)) for i, j in self._undirected.edges())

    @property
    def undirected(self) -> nx.Graph:
        """Undirected networkx view over unit indices, shared and not to be modified."""
        return self._undirected

    def is_symmetric(self) -> bool:
        return all(
            i in self._neighbor_indices[j]
            for i, nbrs in enumerate(self._neighbor_indices)
            for j in nbrs
        )


@dataclass(frozen=True)
class Genome:
    """
    One candidate assignment of groups to units.

    Assignments are position-aligned with the canonical unit ordering of
    the AdjacencyGraph. Genomes are values: every operator returns a new
    Genome and never modifies its inputs.

    Attributes:
        assignments: Group id per unit, in canonical unit order
        origin: How this genome was produced ("prototype", "mutation",
            "crossover"); not part of equality
    """
    assignments: tuple
    origin: str = field(default="prototype", compare=False)

    def __post_init__(self):
        """Ensure assignments are an immutable tuple."""
        if not isinstance(self.assignments, tuple):
            object.__setattr__(self, "assignments", tuple(self.assignments))

    def __len__(self) -> int:
        return len(self.assignments)

    def __getitem__(self, index):
        return self.assignments[index]

    def __iter__(self) -> Iterator:
        return iter(self.assignments)

    def __str__(self) -> str:
        if len(self.assignments) <= 12:
            return f"Genome({list(self.assignments)})"
        head = ", ".join(map(str, self.assignments[:12]))
        return f"Genome([{head}, ...] len={len(self.assignments)})"

    def with_assignment(self, index: int, group: Hashable, origin: str = "mutation") -> "Genome":
        """
        Return a copy with one unit reassigned.

        Args:
            index: Canonical index of the unit to reassign
            group: New group id
            origin: Origin tag of the new genome

        Returns:
            New Genome
        """
        assignments = list(self.assignments)
        assignments[index] = group
        return Genome(tuple(assignments), origin=origin)

    def differences(self, other: "Genome") -> list[int]:
        """Indices at which this genome and another assign different groups."""
        if len(other) != len(self):
            raise ValueError(f"Genome length mismatch: {len(self)} vs {len(other)}")
        return [i for i, (a, b) in enumerate(zip(self.assignments, other.assignments)) if a != b]

    def groups(self) -> set:
        """Distinct group ids used by this genome."""
        return set(self.assignments)

    def members(self, group: Hashable) -> list[int]:
        """Canonical indices of units assigned to a group."""
        return [i for i, g in enumerate(self.assignments) if g == group]


def _clamp_rate(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


@dataclass(frozen=True)
class GAConfig:
    """
    Engine configuration.

    Rates outside [0, 1] are clamped rather than rejected.

    Attributes:
        population_size: Number of genomes kept every generation
        mutation_rate: Fraction of the population mutated per generation
        crossover_rate: Fraction of the population crossed per generation
        max_mutation_retries: Attempts per mutation before giving up
        workers: Threads used to evaluate the objective (1 = sequential)
    """
    population_size: int
    mutation_rate: float = 0.1
    crossover_rate: float = 0.5
    max_mutation_retries: int = 10
    workers: int = 1

    def __post_init__(self):
        """Validate sizes and clamp rates."""
        for name in ("population_size", "max_mutation_retries", "workers"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"'{name}' must be a positive integer, got: {value!r}")

        object.__setattr__(self, "mutation_rate", _clamp_rate(self.mutation_rate))
        object.__setattr__(self, "crossover_rate", _clamp_rate(self.crossover_rate))

    @property
    def num_mutate(self) -> int:
        """Genomes selected for mutation each generation."""
        count = math.ceil(round(self.population_size * self.mutation_rate, 9))
        return min(count, self.population_size)

    @property
    def num_crossover(self) -> int:
        """Genomes selected for crossover each generation (always even)."""
        count = math.ceil(round(self.population_size * self.crossover_rate, 9))
        count = min(count, self.population_size)
        return count - count % 2


@dataclass(frozen=True)
class GenerationReport:
    """
    Snapshot of the engine after a generation.

    Attributes:
        generation: Number of completed generations
        best_cost: Lowest cost in the population
        mean_cost: Mean cost of the population
        best_genome: Genome with the lowest cost
        population: Genomes of the population, best first
        scores: Cost of each genome in population order
    """
    generation: int
    best_cost: int
    mean_cost: float
    best_genome: Genome
    population: tuple
    scores: tuple

    @property
    def worst_cost(self) -> int:
        return max(self.scores)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert report to a dictionary of plain values.

        Returns:
            Dictionary suitable for printing or export by callers
        """
        return {
            "generation": self.generation,
            "best_cost": self.best_cost,
            "mean_cost": self.mean_cost,
            "worst_cost": self.worst_cost,
            "population_size": len(self.population),
            "best_genome": list(self.best_genome.assignments),
        }


def prototype_from_mapping(graph: AdjacencyGraph, groups: dict, origin: str = "prototype") -> Genome:
    """
    Build a genome from a unit_id -> group mapping.

    Args:
        graph: Graph providing the canonical unit ordering
        groups: Group id for every unit in the graph
        origin: Origin tag for the genome

    Returns:
        Genome aligned to the graph

    Raises:
        ConfigurationError: If any unit is missing an assignment or an
            assignment names an unknown unit
    """
    missing = [uid for uid in graph.unit_ids if uid not in groups]
    if missing:
        raise ConfigurationError(f"No group assigned for units: {missing[:10]}")

    unknown = [uid for uid in groups if uid not in graph]
    if unknown:
        raise ConfigurationError(f"Group assigned to unknown units: {unknown[:10]}")

    return Genome(tuple(groups[uid] for uid in graph.unit_ids), origin=origin)
