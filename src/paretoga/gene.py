"""
Genes and the population arena that owns them.
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Tuple


@dataclass
class Gene:
    """
    A single candidate solution.

    Attributes:
        decision: Decision vector, opaque to the engine
        fitness: Scalar (single objective) or 1-D array (multi-objective)
        dominated_by_count: Number of genes that strongly dominate this one
        evaluated: False whenever the decision changed since the last fitness evaluation
        crowding: Crowding distance inside the gene's layer
    """

    decision: Any
    fitness: Any = None
    dominated_by_count: int = 0
    evaluated: bool = False
    crowding: float = 0.0

    def invalidate(self):
        self.evaluated = False

    def copy(self) -> "Gene":
        return Gene(
            decision=copy.deepcopy(self.decision),
            fitness=copy.deepcopy(self.fitness),
            dominated_by_count=self.dominated_by_count,
            evaluated=self.evaluated,
            crowding=self.crowding,
        )


class Population:
    """
    Arena of genes addressed by stable integer ids.

    Ids grow monotonically and are never reused, so erasing one gene never
    invalidates the id of another and a stale id can never alias a newer gene.
    """

    def __init__(self):
        self._genes: Dict[int, Gene] = {}
        self._next_id = 0

    def insert(self, gene: Gene) -> int:
        gene_id = self._next_id
        self._next_id += 1
        self._genes[gene_id] = gene
        return gene_id

    def erase(self, gene_id: int) -> Gene:
        return self._genes.pop(gene_id)

    def clear(self):
        self._genes.clear()

    def ids(self) -> List[int]:
        return list(self._genes)

    def genes(self) -> List[Gene]:
        return list(self._genes.values())

    def items(self) -> List[Tuple[int, Gene]]:
        return list(self._genes.items())

    def unevaluated(self) -> List[Gene]:
        return [gene for gene in self._genes.values() if not gene.evaluated]

    def __getitem__(self, gene_id: int) -> Gene:
        return self._genes[gene_id]

    def __contains__(self, gene_id) -> bool:
        return gene_id in self._genes

    def __len__(self) -> int:
        return len(self._genes)

    def __iter__(self) -> Iterator[Gene]:
        return iter(list(self._genes.values()))
