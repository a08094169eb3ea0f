"""
Orchestration module for the redistricting GA.

Drives a multi-generation run from a RunSetup and reports progress.
"""

from typing import Dict, Hashable

from .config import RunSetup
from .data_models import AdjacencyGraph, Genome, GenerationReport
from .engine import Engine
from .graph_utils import boundary_units, group_components, group_populations


def run_evolution(setup: RunSetup) -> GenerationReport:
    """
    Evolve district assignments for the configured number of generations.

    Args:
        setup: Graph, prototype, engine config and objective for the run

    Returns:
        Report for the final generation

    Algorithm:
        1. Create the engine from the graph and prototype
        2. Score the prototype population (generation 0)
        3. Run generations, printing a progress line every report_every
        4. Print a summary of the best assignment found
    """
    print("=" * 70)
    print("DISTRICT EVOLUTION")
    print("=" * 70)

    engine = Engine.for_graph(
        setup.graph, setup.prototype, setup.ga_config, setup.objective, seed=setup.seed
    )

    print(f"Random seed: {engine.seed}")
    print(f"Voting districts: {len(setup.graph)}")
    print(f"Legislative districts: {len(setup.prototype.groups())}")
    print(f"Population size: {setup.ga_config.population_size}")
    print(f"Per generation: {setup.ga_config.num_mutate} mutations, "
          f"{setup.ga_config.num_crossover} crossover parents")
    if not setup.graph.is_symmetric():
        print("Warning: adjacency is not symmetric")

    initial_cost = engine.best_cost
    print(f"Initial cost: {initial_cost}")
    print()
    print(f"Running {setup.generations} generations...")

    def progress(report: GenerationReport) -> None:
        if report.generation % setup.report_every == 0 or report.generation == setup.generations:
            print(f"  Generation {report.generation}: best={report.best_cost} "
                  f"mean={report.mean_cost:.1f}")

    try:
        final = engine.run(setup.generations, observer=progress, target_cost=setup.target_cost)
    except KeyboardInterrupt:
        # Population only ever holds fully completed generations
        print("\nInterrupted, reporting last completed generation")
        final = engine.report()

    print()
    print("=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"Generations completed: {final.generation}")
    print(f"Cost: {initial_cost} -> {final.best_cost}")
    print_assignment_summary(final.best_genome, setup.graph, setup.prototype)

    return final


def assignment_summary(genome: Genome, graph: AdjacencyGraph) -> Dict[Hashable, Dict]:
    """
    Per-group statistics for an assignment.

    Returns:
        Dict mapping group id to units, population, pieces and boundary units
    """
    populations = group_populations(genome, graph)
    components = group_components(genome, graph)
    boundary = set(boundary_units(genome, graph))

    summary = {}
    for group, pieces in components.items():
        members = [i for piece in pieces for i in piece]
        summary[group] = {
            'units': len(members),
            'population': populations[group],
            'pieces': len(pieces),
            'boundary_units': sum(1 for i in members if i in boundary),
        }
    return summary


def print_assignment_summary(genome: Genome, graph: AdjacencyGraph, prototype: Genome) -> None:
    """Print per-group statistics and the number of reassigned units."""
    print(f"Reassigned voting districts: {len(prototype.differences(genome))}")
    print()
    print(f"{'group':>10} {'units':>7} {'population':>12} {'pieces':>7} {'boundary':>9}")
    for group, stats in sorted(assignment_summary(genome, graph).items(), key=lambda kv: repr(kv[0])):
        print(f"{str(group):>10} {stats['units']:>7} {stats['population']:>12} "
              f"{stats['pieces']:>7} {stats['boundary_units']:>9}")
