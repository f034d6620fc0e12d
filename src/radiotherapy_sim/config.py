from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RewardMode(str, Enum):
    """
    Reward shaping selector.

    DOSE penalizes every gray given, NO_TERMINAL uses the same step reward but
    never pays the terminal bonus/penalty, and the digit modes weight lost
    healthy cells against killed cancer cells by the digit value.
    """
    DOSE = "d"
    NO_TERMINAL = "n"
    KILLED_0 = "0"
    KILLED_1 = "1"
    KILLED_2 = "2"
    KILLED_3 = "3"
    KILLED_4 = "4"
    KILLED_5 = "5"
    KILLED_6 = "6"
    KILLED_7 = "7"
    KILLED_8 = "8"
    KILLED_9 = "9"

    @property
    def dose_penalized(self) -> bool:
        return self in (RewardMode.DOSE, RewardMode.NO_TERMINAL)

    @property
    def healthy_weight(self) -> int:
        return int(self.value) if self.value.isdigit() else 5


class EndType(str, Enum):
    NONE = "0"
    WIN = "W"
    LOSS = "L"
    TIMEOUT = "T"


class StateType(str, Enum):
    LOG = "o"
    LINEAR = "i"


@dataclass
class ModelConfig:
    # pools
    initial_glucose: float = 250000.0
    initial_oxygen: float = 2500000.0
    glucose_fill: float = 13000.0
    oxygen_fill: float = 450000.0

    # seeding / warm-up
    initial_healthy: int = 1000
    initial_cancer: int = 1
    warmup_hours: int = 350

    # crowding factor = live cells // carrying_capacity
    carrying_capacity: int = 278

    # termination
    loss_threshold: int = 10
    max_hours: int = 1550

    hours_per_fraction: int = 24
    seed: Optional[int] = None


@dataclass
class AgentConfig:
    cancer_stages: int = 50
    healthy_stages: int = 5
    actions: int = 5
    state_type: StateType = StateType.LINEAR

    # population reached by the top discretization stage
    healthy_ceiling: float = 3500.0
    cancer_ceiling: float = 40000.0

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self.state_type = StateType(self.state_type)
        if self.cancer_stages <= 2 or self.healthy_stages <= 2:
            raise ValueError(
                f"need more than 2 stages per species, got cancer={self.cancer_stages} "
                f"healthy={self.healthy_stages}"
            )
        if self.actions < 1:
            raise ValueError(f"need at least one action, got {self.actions}")

    @property
    def n_states(self) -> int:
        return self.cancer_stages * self.healthy_stages


@dataclass
class TrainingSchedule:
    """
    Epoch loop knobs for TabularAgent.run().

    alpha and epsilon decay linearly from init_* to end_* across epochs.
    """
    n_epochs: int = 1
    train_steps: int = 5000
    test_episodes: int = 10
    init_alpha: float = 0.8
    end_alpha: float = 0.05
    init_epsilon: float = 0.8
    end_epsilon: float = 0.01
    discount: float = 0.99
