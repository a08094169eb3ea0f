"""
Tests for built-in objectives and the objective registry.
"""

import unittest

from gendist.data_models import Genome
from gendist.exceptions import ConfigurationError
from gendist.graph_utils import build_graph
from gendist.objectives import (
    OBJECTIVES,
    assignment_changes,
    build_objective,
    contiguity_penalty,
    cut_edge_count,
    efficiency_gap,
    group_count_penalty,
    population_balance,
    wasted_votes,
    weighted_sum,
)


class TestObjectives(unittest.TestCase):
    """Test redistricting cost functions on a four-unit path A-B-C-D."""

    def setUp(self):
        self.graph = build_graph(
            {
                "A": {'republicans': 6, 'democrats': 4},
                "B": {'republicans': 7, 'democrats': 3},
                "C": {'republicans': 2, 'democrats': 8},
                "D": {'republicans': 4, 'democrats': 6},
            },
            {"A": ["B"], "B": ["A", "C"], "C": ["B", "D"], "D": ["C"]},
        )
        self.reference = Genome((1, 1, 2, 2))

    def test_assignment_changes(self):
        """Test counting changed assignments."""
        objective = assignment_changes(Genome((1, 1, 1, 1)))

        self.assertEqual(objective(Genome((1, 1, 1, 1))), 0)
        self.assertEqual(objective(Genome((1, 2, 1, 2))), 2)

    def test_population_balance(self):
        """Test population deviation from the ideal."""
        objective = population_balance(self.graph, self.reference)

        # Every unit has population 10, ideal is 20 per group
        self.assertEqual(objective(Genome((1, 1, 2, 2))), 0)
        self.assertEqual(objective(Genome((1, 1, 1, 2))), 20)
        self.assertEqual(objective(Genome((1, 1, 1, 1))), 40)

    def test_population_balance_counts_foreign_groups(self):
        """Test that groups outside the reference count as surplus."""
        objective = population_balance(self.graph, self.reference)

        # Group 3 is not in the reference, its 10 people are surplus
        self.assertEqual(objective(Genome((1, 1, 2, 3))), 10 + 10)

    def test_population_balance_rounds_ideal(self):
        """Test that deviations are measured from the ideal rounded to an integer."""
        graph = build_graph(
            {"A": {'population': 6}, "B": {'population': 1},
             "C": {'population': 1}, "D": {'population': 1}},
            {"A": ["B"], "B": ["A", "C"], "C": ["B", "D"], "D": ["C"]},
        )
        reference = Genome((1, 2, 3, 4))
        objective = population_balance(graph, reference)

        # 9 / 4 = 2.25 rounds to 2: |6-2| + 3 * |1-2|
        self.assertEqual(objective(reference), 7)
        self.assertIsInstance(objective(reference), int)

    def test_wasted_votes(self):
        """Test wasted vote counts for wins and ties."""
        self.assertEqual(wasted_votes(60, 40), (9, 40))
        self.assertEqual(wasted_votes(11, 9), (0, 9))
        self.assertEqual(wasted_votes(50, 50), (50, 50))

    def test_efficiency_gap(self):
        """Test the efficiency gap."""
        objective = efficiency_gap(self.graph)

        # Group 1: R 13 / D 7 -> R wastes 13 - 11 = 2, D wastes 7
        # Group 2: R 6 / D 14 -> D wastes 14 - 11 = 3, R wastes 6
        self.assertEqual(objective(self.reference), abs((2 + 6) - (7 + 3)))

    def test_cut_edges(self):
        """Test counting cut edges."""
        objective = cut_edge_count(self.graph)

        self.assertEqual(objective(Genome((1, 1, 2, 2))), 1)
        self.assertEqual(objective(Genome((1, 2, 1, 2))), 3)
        self.assertEqual(objective(Genome((1, 1, 1, 1))), 0)

    def test_contiguity(self):
        """Test the contiguity penalty."""
        objective = contiguity_penalty(self.graph)

        self.assertEqual(objective(Genome((1, 1, 2, 2))), 0)
        self.assertEqual(objective(Genome((1, 2, 1, 2))), 2)
        self.assertEqual(objective(Genome((1, 2, 2, 1))), 1)

    def test_empty_groups(self):
        """Test counting emptied groups."""
        objective = group_count_penalty(self.reference)

        self.assertEqual(objective(Genome((1, 2, 1, 2))), 0)
        self.assertEqual(objective(Genome((1, 1, 1, 1))), 1)

    def test_objectives_are_pure(self):
        """Test that objectives do not modify genomes."""
        objective = population_balance(self.graph, self.reference)
        genome = Genome((1, 1, 1, 2))

        self.assertEqual(objective(genome), objective(genome))
        self.assertEqual(genome.assignments, (1, 1, 1, 2))


class TestObjectiveRegistry(unittest.TestCase):
    """Test building objectives from configuration."""

    def setUp(self):
        self.graph = build_graph(
            {"A": {'population': 5}, "B": {'population': 5}},
            {"A": ["B"], "B": ["A"]},
        )
        self.reference = Genome((1, 2))

    def test_weighted_sum(self):
        """Test weighted combination of objectives."""
        objective = weighted_sum([
            (2, lambda g: 3),
            (5, lambda g: 1),
        ])
        self.assertEqual(objective(self.reference), 11)

    def test_weighted_sum_needs_terms(self):
        """Test that an empty weighted sum is rejected."""
        with self.assertRaises(ConfigurationError):
            weighted_sum([])

    def test_build_single_term(self):
        """Test building a single-term objective."""
        objective = build_objective([{'name': 'cut_edges'}], self.graph, self.reference)
        self.assertEqual(objective(self.reference), 1)

    def test_build_weighted_terms(self):
        """Test building a weighted objective."""
        objective = build_objective(
            [{'name': 'cut_edges', 'weight': 10}, {'name': 'population_balance', 'weight': 1}],
            self.graph,
            self.reference,
        )
        self.assertEqual(objective(Genome((1, 1))), 0 * 10 + 10)
        self.assertEqual(objective(self.reference), 1 * 10 + 0)

    def test_unknown_name_rejected(self):
        """Test that unknown objective names are rejected."""
        with self.assertRaises(ConfigurationError):
            build_objective([{'name': 'compactness_magic'}], self.graph, self.reference)

    def test_bad_weight_rejected(self):
        """Test that non-integer weights are rejected."""
        with self.assertRaises(ConfigurationError):
            build_objective([{'name': 'cut_edges', 'weight': 0.5}], self.graph, self.reference)

    def test_registry_names(self):
        """Test that every registered objective returns an integer."""
        for name in ('assignment_changes', 'population_balance', 'efficiency_gap',
                     'cut_edges', 'contiguity', 'empty_groups'):
            self.assertIn(name, OBJECTIVES)
            objective = OBJECTIVES[name](self.graph, self.reference)
            self.assertIsInstance(objective(self.reference), int)


if __name__ == '__main__':
    unittest.main()
