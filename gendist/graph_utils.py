"""
Graph utilities for the redistricting GA.

Builds an AdjacencyGraph from loader mappings and derives per-group
information (populations, vote totals, connected components, boundary
units) from a genome.
"""

from typing import Any, Dict, Hashable, Iterable, List, Tuple

import networkx as nx

from .data_models import AdjacencyGraph, Genome, Unit
from .exceptions import GraphIntegrityError


def build_graph(
    payloads: Dict[Hashable, Dict[str, Any]],
    neighbors: Dict[Hashable, Iterable[Hashable]]
) -> AdjacencyGraph:
    """
    Build an adjacency graph from loader output.

    Args:
        payloads: Mapping of unit_id to its payload; order defines the
            canonical unit ordering
        neighbors: Mapping of unit_id to neighbor unit ids; units absent
            from this mapping have no neighbors

    Returns:
        AdjacencyGraph

    Raises:
        GraphIntegrityError: If a neighbor list belongs to an unknown unit
            or references one

    Example:
        >>> graph = build_graph({1: {}, 2: {}}, {1: [2], 2: [1]})
        >>> graph.neighbor_indices(0)
        (1,)
    """
    orphans = [uid for uid in neighbors if uid not in payloads]
    if orphans:
        raise GraphIntegrityError(f"Neighbor lists given for unknown units: {orphans[:10]}")

    units = [
        Unit(id=uid, neighbors=frozenset(neighbors.get(uid, ())), payload=dict(payload))
        for uid, payload in payloads.items()
    ]
    return AdjacencyGraph(units)


def partition_by_group(genome: Genome) -> Dict[Hashable, List[int]]:
    """
    Partition unit indices by assigned group.

    Args:
        genome: Genome to partition

    Returns:
        Dict mapping group id to canonical unit indices, groups in order of
        first appearance
    """
    result = {}
    for i, group in enumerate(genome.assignments):
        result.setdefault(group, []).append(i)
    return result


def group_totals(genome: Genome, graph: AdjacencyGraph, key: str) -> Dict[Hashable, int]:
    """Sum a payload field over the units of each group."""
    totals = {}
    for group, indices in partition_by_group(genome).items():
        totals[group] = sum(int(graph.unit_at(i).payload.get(key, 0)) for i in indices)
    return totals


def group_populations(genome: Genome, graph: AdjacencyGraph) -> Dict[Hashable, int]:
    totals = {}
    for group, indices in partition_by_group(genome).items():
        totals[group] = sum(graph.unit_at(i).population for i in indices)
    return totals


def group_components(genome: Genome, graph: AdjacencyGraph) -> Dict[Hashable, List[List[int]]]:
    """
    Find the connected pieces of every group.

    Two units of the same group are connected when either lists the other as
    a neighbor.

    Args:
        genome: Genome whose groups are examined
        graph: Adjacency graph

    Returns:
        Dict mapping group id to a list of components (sorted lists of unit
        indices), ordered by their lowest index
    """
    components = {}
    for group, indices in partition_by_group(genome).items():
        pieces = nx.connected_components(graph.undirected.subgraph(indices))
        components[group] = sorted(sorted(piece) for piece in pieces)
    return components


def cut_edges(genome: Genome, graph: AdjacencyGraph) -> List[Tuple[int, int]]:
    """Edges whose endpoints are assigned to different groups."""
    return [(i, j) for i, j in graph.edges() if genome[i] != genome[j]]


def boundary_units(genome: Genome, graph: AdjacencyGraph) -> List[int]:
    """Indices of units with at least one neighbor in a different group."""
    boundary = set()
    for i, j in cut_edges(genome, graph):
        boundary.add(i)
        boundary.add(j)
    return sorted(boundary)
