from __future__ import annotations
import random
from typing import Iterator, List

from .cell_base import Species
from .healthy_cell import HealthyCell
from .cancer_cell import CancerCell


class PopulationStore:
    """
    Cells of one species.

    Records are only removed by prune(), so between prunes the store may hold
    dead cells: `len()` counts records, `count` counts live cells.
    """

    def __init__(self, species: Species) -> None:
        self.species = Species(species)
        self.cells: List[HealthyCell] = []

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[HealthyCell]:
        return iter(self.cells)

    def __getitem__(self, i: int) -> HealthyCell:
        return self.cells[i]

    @property
    def count(self) -> int:
        return sum(1 for c in self.cells if c.alive)

    def spawn(self) -> HealthyCell:
        cell = CancerCell() if self.species == Species.CANCER else HealthyCell()
        self.cells.append(cell)
        return cell

    def add(self, cell: HealthyCell) -> None:
        if cell.species != self.species:
            raise ValueError(f"cannot add a {cell.species.value} cell to a {self.species.value} population")
        self.cells.append(cell)

    def prune(self) -> int:
        """Drop dead records, sort survivors by cycle phase. Returns how many were dropped."""
        before = len(self.cells)
        self.cells = [c for c in self.cells if c.alive]
        self.cells.sort(key=lambda c: c.sort_key())
        return before - len(self.cells)

    def radiate(self, dose: float, rng: random.Random) -> None:
        for cell in self.cells:
            cell.radiate(dose, rng=rng)
        self.prune()
