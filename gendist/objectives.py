"""
Objective functions for the redistricting GA.

An objective is any callable taking a Genome and returning an integer cost,
lower being better. Objectives must be pure so the engine can evaluate them
from several threads at once. The built-ins below are selected by name
through OBJECTIVES for configuration-driven runs.
"""

from typing import Callable, Dict, List, Sequence, Tuple

from .data_models import AdjacencyGraph, Genome
from .exceptions import ConfigurationError
from .graph_utils import (
    cut_edges,
    group_components,
    group_populations,
    group_totals,
    partition_by_group,
)


Objective = Callable[[Genome], int]


def assignment_changes(reference: Genome) -> Objective:
    """Cost = number of units assigned differently from the reference genome."""
    def objective(genome: Genome) -> int:
        return len(reference.differences(genome))

    return objective


def population_balance(graph: AdjacencyGraph, reference: Genome) -> Objective:
    """
    Cost = total absolute deviation of group populations from the ideal.

    The ideal population is the total population divided by the number of
    groups in the reference genome, rounded to the nearest integer. Groups
    emptied by mutation count as a full ideal-sized deviation.

    Args:
        graph: Adjacency graph providing unit populations
        reference: Genome defining the set of groups

    Returns:
        Objective callable
    """
    groups = sorted(reference.groups(), key=repr)
    total = sum(unit.population for unit in graph)
    ideal = round(total / len(groups))

    def objective(genome: Genome) -> int:
        populations = group_populations(genome, graph)
        deviation = sum(abs(populations.get(group, 0) - ideal) for group in groups)
        # Groups outside the reference set are all surplus
        deviation += sum(pop for group, pop in populations.items() if group not in groups)
        return deviation

    return objective


def wasted_votes(winner: int, loser: int) -> Tuple[int, int]:
    """
    Wasted votes for a two-way race.

    The winner wastes every vote beyond a bare majority, the loser wastes
    all of theirs. A tie wins no seat, so every vote on both sides is wasted.

    Returns:
        Tuple of (winner_wasted, loser_wasted)
    """
    if winner == loser:
        return winner, loser
    needed = (winner + loser) // 2 + 1
    return winner - needed, loser


def efficiency_gap(graph: AdjacencyGraph) -> Objective:
    """Cost = |wasted Republican votes - wasted Democratic votes| over all groups."""
    def objective(genome: Genome) -> int:
        republicans = group_totals(genome, graph, "republicans")
        democrats = group_totals(genome, graph, "democrats")

        wasted_r = wasted_d = 0
        for group in republicans:
            r, d = republicans[group], democrats[group]
            if r >= d:
                w_r, w_d = wasted_votes(r, d)
            else:
                w_d, w_r = wasted_votes(d, r)
            wasted_r += w_r
            wasted_d += w_d
        return abs(wasted_r - wasted_d)

    return objective


def cut_edge_count(graph: AdjacencyGraph) -> Objective:
    """Cost = number of adjacency edges crossing group boundaries."""
    def objective(genome: Genome) -> int:
        return len(cut_edges(genome, graph))

    return objective


def contiguity_penalty(graph: AdjacencyGraph) -> Objective:
    """Cost = extra connected pieces summed over all groups."""
    def objective(genome: Genome) -> int:
        return sum(len(pieces) - 1 for pieces in group_components(genome, graph).values())

    return objective


def group_count_penalty(reference: Genome) -> Objective:
    """Cost = number of reference groups that lost all of their units."""
    groups = reference.groups()

    def objective(genome: Genome) -> int:
        return len(groups - set(partition_by_group(genome)))

    return objective


def weighted_sum(terms: Sequence[Tuple[int, Objective]]) -> Objective:
    """
    Combine objectives into one integer cost.

    Args:
        terms: (weight, objective) pairs

    Returns:
        Objective returning sum(weight * term(genome))
    """
    terms = list(terms)
    if not terms:
        raise ConfigurationError("weighted_sum needs at least one term")

    def objective(genome: Genome) -> int:
        return sum(int(weight) * int(term(genome)) for weight, term in terms)

    return objective


# name -> factory(graph, reference) -> Objective
OBJECTIVES: Dict[str, Callable[[AdjacencyGraph, Genome], Objective]] = {
    'assignment_changes': lambda graph, reference: assignment_changes(reference),
    'population_balance': population_balance,
    'efficiency_gap': lambda graph, reference: efficiency_gap(graph),
    'cut_edges': lambda graph, reference: cut_edge_count(graph),
    'contiguity': lambda graph, reference: contiguity_penalty(graph),
    'empty_groups': lambda graph, reference: group_count_penalty(reference),
}


def build_objective(
    terms: List[Dict[str, object]],
    graph: AdjacencyGraph,
    reference: Genome
) -> Objective:
    """
    Build an objective from configuration terms.

    Args:
        terms: List of {'name': str, 'weight': int} entries
        graph: Adjacency graph of the run
        reference: Prototype genome of the run

    Returns:
        Objective callable

    Raises:
        ConfigurationError: On unknown names or non-integer weights
    """
    built = []
    for term in terms:
        name = term.get('name')
        if name not in OBJECTIVES:
            raise ConfigurationError(
                f"Unknown objective: {name!r}. Available: {sorted(OBJECTIVES)}"
            )
        weight = term.get('weight', 1)
        if isinstance(weight, bool) or not isinstance(weight, int):
            raise ConfigurationError(f"Objective weight must be an integer, got: {weight!r}")
        built.append((weight, OBJECTIVES[name](graph, reference)))

    if len(built) == 1 and built[0][0] == 1:
        return built[0][1]
    return weighted_sum(built)
