from __future__ import annotations
from dataclasses import dataclass, field
import random
from typing import ClassVar

from .healthy_cell import HealthyCell, HealthyCellParams
from .cell_base import CycleResult, Species


@dataclass
class CancerCellParams(HealthyCellParams):
    """
    Cancer-specific parameter overrides.
    These represent constraint exploitation / failure.
    """
    # Warburg-like appetite
    glucose_absorption: float = 0.54

    # Contact inhibition effectively disabled
    critical_neighbors: int = 1_000_000_000

    # Higher alpha/beta ratio than normal tissue
    alpha: float = 0.3
    beta: float = 0.03


@dataclass
class CancerCell(HealthyCell):
    """
    CancerCell = HealthyCell without quiescence.
    """
    species: ClassVar[Species] = Species.CANCER
    params: CancerCellParams = field(default_factory=CancerCellParams)

    def cycle(self, glucose: float, oxygen: float, crowding: int, rng: random.Random | None = None) -> CycleResult:
        if not self.alive:
            return CycleResult()

        p = self.params

        # --- Starvation is the only non-radiation death ---
        if glucose < p.glucose_absorption or oxygen < p.oxygen_consumption:
            self._die()
            return CycleResult()

        result = CycleResult(p.glucose_absorption, p.oxygen_consumption)

        if self.repair > 0:
            self.repair -= 1
            return result

        # --- NO G0 EXIT ---
        # Cancer keeps cycling whatever the crowding or pool levels
        self.age += 1
        if self.age >= p.phase_hours[self.phase]:
            result.new_cell = self._advance_phase()
        return result
