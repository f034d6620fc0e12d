from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Phase(str, Enum):
    G1 = "G1"
    S = "S"
    G2 = "G2"
    M = "M"
    QUIESCENT = "G0"
    APOPTOTIC = "APOPTOTIC"


class Species(str, Enum):
    HEALTHY = "h"
    CANCER = "c"


# Prune order inside a population: cycling cells first, then G0, dead last
PHASE_ORDER = {
    Phase.G1: 0,
    Phase.S: 1,
    Phase.G2: 2,
    Phase.M: 3,
    Phase.QUIESCENT: 4,
    Phase.APOPTOTIC: 5,
}


@dataclass
class CycleResult:
    """What one hour of a cell's cycle took from the pools, and what it produced."""
    glucose: float = 0.0
    oxygen: float = 0.0
    new_cell: Optional[Species] = None


@dataclass
class CellBase:
    phase: Phase = Phase.G1
    age: int = 0
    repair: int = 0
    alive: bool = True
    divisions: int = 0

    def sort_key(self) -> int:
        return PHASE_ORDER[self.phase]

    def _die(self) -> None:
        self.alive = False
        self.phase = Phase.APOPTOTIC
        self.age = 0
