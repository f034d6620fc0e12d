from __future__ import annotations
from dataclasses import dataclass, field
import math
import random
from typing import ClassVar, Dict, Optional

from .cell_base import CellBase, CycleResult, Phase, Species

# cycle() never draws from the rng and visit order only matters once a pool
# runs short, so with the default pools an untreated warm-up ends in the same
# state for every seed. Seeds start to diverge at the first radiate() call.
@dataclass
class HealthyCellParams:
    # Hourly uptake from the shared pools
    glucose_absorption: float = 0.36
    oxygen_consumption: float = 20.0
    quiescent_multiplier: float = 0.75

    # Pool levels under which G1 cells stop cycling / G0 cells stay put
    quiescent_glucose_level: float = 1500.0
    quiescent_oxygen_level: float = 60000.0
    critical_neighbors: int = 9

    # Linear-quadratic radiation response
    alpha: float = 0.15
    beta: float = 0.05
    quiescent_sensitivity: float = 0.25
    repair_hours: int = 9

    phase_hours: Dict[Phase, int] = field(default_factory=lambda: {
        Phase.G1: 11,
        Phase.S:  8,
        Phase.G2: 4,
        Phase.M:  1,
    })

@dataclass
class HealthyCell(CellBase):
    species: ClassVar[Species] = Species.HEALTHY
    params: HealthyCellParams = field(default_factory=HealthyCellParams)

    def cycle(self, glucose: float, oxygen: float, crowding: int, rng: random.Random | None = None) -> CycleResult:
        """
        Advance the cell by one hour.

        `glucose` / `oxygen` are the pool levels when this cell's turn comes,
        `crowding` is the engine's crowding factor. The returned result says
        how much to debit from the pools and which species, if any, was born.
        """
        if not self.alive:
            return CycleResult()

        p = self.params
        if self.phase == Phase.QUIESCENT:
            need_glucose = p.glucose_absorption * p.quiescent_multiplier
            need_oxygen = p.oxygen_consumption * p.quiescent_multiplier
            if glucose < need_glucose or oxygen < need_oxygen:
                self._die()
                return CycleResult()
            if crowding < p.critical_neighbors and glucose > p.quiescent_glucose_level \
                    and oxygen > p.quiescent_oxygen_level:
                self.phase = Phase.G1
                self.age = 0
            return CycleResult(need_glucose, need_oxygen)

        if glucose < p.glucose_absorption or oxygen < p.oxygen_consumption:
            self._die()
            return CycleResult()

        result = CycleResult(p.glucose_absorption, p.oxygen_consumption)

        # Radiation damage halts progression until repaired
        if self.repair > 0:
            self.repair -= 1
            return result

        if self.phase == Phase.G1 and (
            crowding > p.critical_neighbors
            or glucose < p.quiescent_glucose_level
            or oxygen < p.quiescent_oxygen_level
        ):
            self.phase = Phase.QUIESCENT
            self.age = 0
            return result

        self.age += 1
        if self.age >= p.phase_hours[self.phase]:
            result.new_cell = self._advance_phase()
        return result

    def radiate(self, dose: float, rng: random.Random | None = None) -> None:
        if rng is None:
            rng = random.Random()

        if not self.alive:
            return

        p = self.params
        sensitivity = p.quiescent_sensitivity if self.phase == Phase.QUIESCENT else 1.0
        survival = math.exp(-sensitivity * (p.alpha * dose + p.beta * dose * dose))
        if rng.random() >= survival:
            self._die()
        else:
            self.repair += int(round(p.repair_hours * (1.0 - survival)))

    def _advance_phase(self) -> Optional[Species]:
        self.age = 0
        if self.phase == Phase.G1: self.phase = Phase.S
        elif self.phase == Phase.S: self.phase = Phase.G2
        elif self.phase == Phase.G2: self.phase = Phase.M
        elif self.phase == Phase.M:
            self.phase = Phase.G1
            self.divisions += 1
            return self.species
        return None
