"""
Mutation operators for the redistricting GA.

Implements the graph-constrained neighbor-join mutation used by the engine,
a gaussian perturbation for real-valued genomes, and mutation statistics.
"""

from typing import Callable, Dict
import numpy as np

from .data_models import AdjacencyGraph, Genome
from .exceptions import NoNeighborsError


Mutator = Callable[[Genome, np.random.Generator], Genome]


def neighbor_join(
    genome: Genome,
    graph: AdjacencyGraph,
    rng: np.random.Generator
) -> Genome:
    """
    Move one unit into the group of one of its neighbors.

    Picks a unit uniformly at random, then one of its neighbors uniformly at
    random, and assigns the unit the neighbor's current group. This grows
    districts along their boundaries and biases toward contiguity without
    enforcing it.

    Args:
        genome: Genome to mutate (left untouched)
        graph: Adjacency graph aligned with the genome
        rng: Random number generator

    Returns:
        New genome differing from the input in at most one position

    Raises:
        NoNeighborsError: If the chosen unit has no neighbors
    """
    index = int(rng.integers(0, len(genome)))
    neighbors = graph.neighbor_indices(index)

    if not neighbors:
        raise NoNeighborsError(graph.unit_at(index).id)

    neighbor = neighbors[int(rng.integers(0, len(neighbors)))]
    return genome.with_assignment(index, genome[neighbor])


def make_neighbor_join_mutator(graph: AdjacencyGraph) -> Mutator:
    """
    Bind a graph to the neighbor-join mutation.

    Args:
        graph: Adjacency graph shared read-only for the whole run

    Returns:
        Callable (genome, rng) -> genome for the engine
    """
    def mutator(genome: Genome, rng: np.random.Generator) -> Genome:
        return neighbor_join(genome, graph, rng)

    return mutator


def gaussian_mutation(
    genome: Genome,
    rng: np.random.Generator,
    sigma: float = 1.0
) -> Genome:
    """
    Perturb every gene of a real-valued genome.

    Each gene is replaced by a draw from a normal distribution centred on the
    current value.

    Args:
        genome: Genome of floats
        rng: Random number generator
        sigma: Standard deviation of the perturbation

    Returns:
        New genome of floats
    """
    if sigma < 0:
        raise ValueError(f"sigma must be non-negative, got: {sigma}")

    values = np.asarray(genome.assignments, dtype=float)
    perturbed = rng.normal(loc=values, scale=sigma)
    return Genome(tuple(float(v) for v in perturbed), origin="mutation")


def make_gaussian_mutator(sigma: float = 1.0) -> Mutator:
    def mutator(genome: Genome, rng: np.random.Generator) -> Genome:
        return gaussian_mutation(genome, rng, sigma)

    return mutator


def mutation_statistics(original: Genome, mutated: Genome) -> Dict:
    """
    Calculate statistics about a mutation.

    Args:
        original: Genome before mutation
        mutated: Genome after mutation

    Returns:
        Dictionary with mutation statistics
    """
    changed = original.differences(mutated)

    stats = {
        'total_units': len(mutated),
        'positions_changed': len(changed),
        'changed_indices': changed,
    }
    stats['change_rate'] = stats['positions_changed'] / max(stats['total_units'], 1)

    return stats
