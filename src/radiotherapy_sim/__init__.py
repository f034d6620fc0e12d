from .config import AgentConfig, EndType, ModelConfig, RewardMode, StateType, TrainingSchedule
from .healthy_cell import HealthyCell
from .cancer_cell import CancerCell
from .population import PopulationStore
from .model import ScalarModel
from .agent import QTableError, QTableShapeMismatch, TabularAgent

__all__ = [
    "AgentConfig", "EndType", "ModelConfig", "RewardMode", "StateType", "TrainingSchedule",
    "HealthyCell", "CancerCell", "PopulationStore", "ScalarModel",
    "QTableError", "QTableShapeMismatch", "TabularAgent",
]
