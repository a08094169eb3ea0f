"""
Crossover operators for the redistricting GA.

Implements single-point crossover over position-aligned genomes.
"""

from typing import Callable, Optional, Tuple
import numpy as np

from .data_models import Genome


Crosser = Callable[[Genome, Genome, np.random.Generator], Tuple[Genome, Genome]]


def single_point_crossover(
    parent_a: Genome,
    parent_b: Genome,
    rng: np.random.Generator,
    cut: Optional[int] = None
) -> Tuple[Genome, Genome]:
    """
    Combine two parents by swapping their tails at a cut index.

    The cut is drawn uniformly from [0, length - 1). child_a takes parent_a's
    prefix and parent_b's suffix; child_b is the complementary swap. Both
    children keep the full genome length.

    Args:
        parent_a: First parent (left untouched)
        parent_b: Second parent (left untouched)
        rng: Random number generator
        cut: Explicit cut index, bypassing the random draw

    Returns:
        Tuple of (child_a, child_b)

    Raises:
        ValueError: If the parents differ in length or cut is out of range

    Note:
        Genomes of length 1 have no valid cut; the parents are returned as
        crossover-tagged copies.
    """
    length = len(parent_a)
    if len(parent_b) != length:
        raise ValueError(f"Cannot cross genomes of length {length} and {len(parent_b)}")

    if cut is None:
        if length < 2:
            return (
                Genome(parent_a.assignments, origin="crossover"),
                Genome(parent_b.assignments, origin="crossover"),
            )
        cut = int(rng.integers(0, length - 1))
    elif not 0 <= cut <= length:
        raise ValueError(f"Cut index {cut} out of range for length {length}")

    child_a = Genome(parent_a[:cut] + parent_b[cut:], origin="crossover")
    child_b = Genome(parent_b[:cut] + parent_a[cut:], origin="crossover")

    return child_a, child_b
