"""
Pareto-front tracking and stagnation detection.
"""

import logging
from typing import FrozenSet, Iterable, Optional

from .exceptions import InvariantViolation
from .utils import front_checksum


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


class ParetoFrontTracker:
    """
    Keeps the current front as a set of gene ids and counts stagnant generations.

    The tracker never owns genes: it only stores ids from the population arena.
    Ids of evicted genes must be dropped with :meth:`discard`.
    """

    def __init__(self):
        self.members: FrozenSet[int] = frozenset()
        self.previous_front_size: Optional[int] = None
        self.previous_front_checksum: Optional[int] = None
        self.stagnant_generations = 0

    def reset(self):
        self.members = frozenset()
        self.previous_front_size = None
        self.previous_front_checksum = None
        self.stagnant_generations = 0

    def update(self, front_ids: Iterable[int]) -> int:
        """
        Replace the tracked front and update the stagnation counter.

        A change in front size resets the counter. Otherwise the XOR checksum of
        the member ids is compared with the previous one: equal means one more
        stagnant generation, different resets the counter.

        Args:
            front_ids: Ids of the current rank-0 genes

        Returns:
            The updated number of stagnant generations

        Raises:
            InvariantViolation: If the front is empty
        """
        members = frozenset(front_ids)
        if not members:
            raise InvariantViolation("Pareto front is empty")

        self.members = members
        checksum = front_checksum(members)

        if len(members) != self.previous_front_size:
            self.previous_front_size = len(members)
            self.previous_front_checksum = checksum
            self.stagnant_generations = 0
        elif checksum == self.previous_front_checksum:
            self.stagnant_generations += 1
        else:
            self.previous_front_checksum = checksum
            self.stagnant_generations = 0

        _logger().debug(
            "Front size %d, checksum %#018x, stagnant for %d generation(s)",
            len(members),
            checksum,
            self.stagnant_generations,
        )
        return self.stagnant_generations

    def discard(self, gene_ids: Iterable[int]):
        """Drop ids of evicted genes from the tracked front."""
        self.members = self.members.difference(gene_ids)

    def __contains__(self, gene_id) -> bool:
        return gene_id in self.members

    def __len__(self) -> int:
        return len(self.members)
