"""
Generational engine for the redistricting GA.

One call to Engine.step() runs a full generation:

    Idle -> Selecting -> Mutating -> Crossing -> Scoring -> Replacing -> Idle

Candidates for mutation and crossover are drawn from the current population,
parents and offspring are scored together, and the population is truncated
back to its fixed size keeping the lowest costs (stable on ties). The best
cost therefore never increases from one generation to the next.
"""

import numbers
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, List, Optional, Sequence

import numpy as np

from .crossover import Crosser, single_point_crossover
from .data_models import AdjacencyGraph, GAConfig, Genome, GenerationReport
from .exceptions import (
    ConfigurationError,
    MutationExhaustedError,
    NoNeighborsError,
    ObjectiveEvaluationError,
)
from .mutation import Mutator, make_neighbor_join_mutator
from .objectives import Objective


Observer = Callable[[GenerationReport], None]


class EngineState(Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    MUTATING = "mutating"
    CROSSING = "crossing"
    SCORING = "scoring"
    REPLACING = "replacing"


class Engine:
    """
    Evolves a fixed-size population of genomes.

    Each stochastic concern (selection, mutation, crossover) draws from its
    own numpy Generator spawned from a single SeedSequence, so a run is fully
    reproducible from its seed.

    Attributes:
        config: Engine configuration
        objective: Cost function, lower is better
        mutator: (genome, rng) -> genome
        crosser: (genome_a, genome_b, rng) -> (child_a, child_b)
        seed: Entropy of the root SeedSequence (pass it back to reproduce a run)
        generation: Number of completed generations
        history: Best cost after each completed generation
    """

    def __init__(
        self,
        prototype: Genome,
        config: GAConfig,
        objective: Objective,
        mutator: Mutator,
        crosser: Crosser = single_point_crossover,
        seed: Optional[int] = None
    ):
        if len(prototype) == 0:
            raise ConfigurationError("Prototype genome must assign at least one unit")

        self.config = config
        self.objective = objective
        self.mutator = mutator
        self.crosser = crosser

        seed_sequence = np.random.SeedSequence(seed)
        self.seed = seed_sequence.entropy
        selection_seq, mutation_seq, crossover_seq = seed_sequence.spawn(3)
        self._selection_rng = np.random.default_rng(selection_seq)
        self._mutation_rng = np.random.default_rng(mutation_seq)
        self._crossover_rng = np.random.default_rng(crossover_seq)

        self._population = tuple(
            Genome(prototype.assignments, origin="prototype")
            for _ in range(config.population_size)
        )
        self._scores: Optional[tuple] = None

        self.generation = 0
        self.history: List[int] = []
        self.state = EngineState.IDLE
        self._observers: List[Observer] = []
        self._stop_event = threading.Event()

    @classmethod
    def for_graph(
        cls,
        graph: AdjacencyGraph,
        prototype: Genome,
        config: GAConfig,
        objective: Objective,
        seed: Optional[int] = None
    ) -> "Engine":
        """
        Create an engine using neighbor-join mutation over a graph.

        Raises:
            ConfigurationError: If the prototype is not aligned with the graph
        """
        if len(prototype) != len(graph):
            raise ConfigurationError(
                f"Prototype assigns {len(prototype)} units but graph has {len(graph)}"
            )
        return cls(
            prototype,
            config,
            objective,
            make_neighbor_join_mutator(graph),
            single_point_crossover,
            seed=seed,
        )

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def population(self) -> tuple:
        return self._population

    @property
    def scores(self) -> tuple:
        """Cost of each population member, evaluating the population if needed."""
        return self._ensure_scores()

    @property
    def best_cost(self) -> int:
        return min(self._ensure_scores())

    @property
    def best_genome(self) -> Genome:
        scores = self._ensure_scores()
        return self._population[scores.index(min(scores))]

    def report(self) -> GenerationReport:
        """Snapshot of the current population."""
        scores = self._ensure_scores()
        best_index = scores.index(min(scores))
        return GenerationReport(
            generation=self.generation,
            best_cost=scores[best_index],
            mean_cost=sum(scores) / len(scores),
            best_genome=self._population[best_index],
            population=self._population,
            scores=scores,
        )

    def subscribe(self, observer: Observer) -> None:
        """Register a callable invoked with a GenerationReport after every generation."""
        self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        self._observers.remove(observer)

    def request_stop(self) -> None:
        """Ask run() to stop once the current generation has completed."""
        self._stop_event.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    # ------------------------------------------------------------------
    # Evolution
    # ------------------------------------------------------------------

    def step(self) -> GenerationReport:
        """
        Advance the population by exactly one generation.

        The new population is committed only after every candidate has been
        scored. Any failure leaves the population, scores and generation
        counter as they were.

        Returns:
            Report for the new generation

        Raises:
            MutationExhaustedError: If a mutation kept hitting units without
                neighbors
            ObjectiveEvaluationError: If the objective failed for a candidate
        """
        try:
            population = self._population
            parent_scores = self._ensure_scores()
            size = self.config.population_size

            self.state = EngineState.SELECTING
            mutate_indices = self._sample(self.config.num_mutate)

            self.state = EngineState.MUTATING
            mutants = [self._mutate(population[i]) for i in mutate_indices]

            self.state = EngineState.SELECTING
            cross_indices = self._sample(self.config.num_crossover)

            self.state = EngineState.CROSSING
            offspring = []
            for a, b in zip(cross_indices[0::2], cross_indices[1::2]):
                offspring.extend(
                    self.crosser(population[a], population[b], self._crossover_rng)
                )

            self.state = EngineState.SCORING
            candidates = list(population) + mutants + offspring
            scores = list(parent_scores) + self._score(mutants + offspring)

            self.state = EngineState.REPLACING
            # sorted() is stable, ties keep insertion order
            survivors = sorted(range(len(candidates)), key=scores.__getitem__)[:size]
            committed = (
                tuple(candidates[i] for i in survivors),
                tuple(scores[i] for i in survivors),
                self.generation + 1,
            )
            previous = (self._population, self._scores, self.generation)
            try:
                self._population, self._scores, self.generation = committed
            except BaseException:
                self._population, self._scores, self.generation = previous
                raise
        finally:
            self.state = EngineState.IDLE

        report = self.report()
        self.history.append(report.best_cost)
        for observer in list(self._observers):
            observer(report)
        return report

    def run(
        self,
        generations: int,
        observer: Optional[Observer] = None,
        target_cost: Optional[int] = None
    ) -> GenerationReport:
        """
        Run several generations.

        Stops early after a generation if request_stop() was called or the
        best cost reached target_cost.

        Args:
            generations: Maximum number of generations to run
            observer: Optional callable receiving each GenerationReport
            target_cost: Stop once best cost is at or below this value

        Returns:
            Report for the last completed generation
        """
        if generations < 0:
            raise ConfigurationError(f"generations must be non-negative, got: {generations}")

        self._stop_event.clear()
        if observer is not None:
            self.subscribe(observer)

        try:
            report = self.report()
            for _ in range(generations):
                report = self.step()
                if self._stop_event.is_set():
                    break
                if target_cost is not None and report.best_cost <= target_cost:
                    break
        finally:
            if observer is not None:
                self.unsubscribe(observer)

        return report

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _sample(self, count: int) -> List[int]:
        """Draw distinct population indices uniformly without replacement."""
        if count == 0:
            return []
        drawn = self._selection_rng.choice(self.config.population_size, size=count, replace=False)
        return [int(i) for i in drawn]

    def _mutate(self, genome: Genome) -> Genome:
        """Apply the mutator, resampling on units without neighbors."""
        last_error = None
        for _ in range(self.config.max_mutation_retries):
            try:
                return self.mutator(genome, self._mutation_rng)
            except NoNeighborsError as e:
                last_error = e
        raise MutationExhaustedError(self.config.max_mutation_retries, last_error) from last_error

    def _ensure_scores(self) -> tuple:
        if self._scores is None:
            self.state = EngineState.SCORING
            try:
                self._scores = tuple(self._score(self._population))
            finally:
                self.state = EngineState.IDLE
        return self._scores

    def _score(self, genomes: Sequence[Genome]) -> List[int]:
        """Evaluate the objective for every genome, preserving order."""
        if self.config.workers > 1 and len(genomes) > 1:
            with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                futures = [executor.submit(self._evaluate, genome) for genome in genomes]
                return [future.result() for future in futures]
        return [self._evaluate(genome) for genome in genomes]

    def _evaluate(self, genome: Genome) -> int:
        try:
            cost = self.objective(genome)
            if isinstance(cost, bool) or not isinstance(cost, numbers.Integral):
                raise TypeError(f"objective must return an integer, got {type(cost).__name__}")
        except Exception as e:
            raise ObjectiveEvaluationError(genome, e) from e
        return int(cost)
