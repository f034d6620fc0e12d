"""
Scalar radiotherapy model.

Every cell and both nutrient pools of the 2D model collapsed into a single
pixel: healthy and cancer cells compete hour by hour for glucose and oxygen,
and once per day the controller picks a radiation dose.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

import numpy as np

from .cell_base import Species
from .config import EndType, ModelConfig, RewardMode
from .population import PopulationStore

logger = logging.getLogger(__name__)


class ScalarModel:
    def __init__(
        self,
        reward: RewardMode | str = RewardMode.DOSE,
        config: Optional[ModelConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.reward = RewardMode(reward)
        self.cfg = config if config is not None else ModelConfig()
        self.rng = rng if rng is not None else random.Random(self.cfg.seed)

        # populated by reset(); the agent always resets before acting
        self.healthy_cells = PopulationStore(Species.HEALTHY)
        self.cancer_cells = PopulationStore(Species.CANCER)
        self.time = 0
        self.glucose = 0.0
        self.oxygen = 0.0
        self.end_type = EndType.NONE
        self.init_hcell_count = 0

    # --- counts ---

    @property
    def healthy_count(self) -> int:
        return self.healthy_cells.count

    @property
    def cancer_count(self) -> int:
        return self.cancer_cells.count

    def _store(self, species: Species) -> PopulationStore:
        return self.cancer_cells if species == Species.CANCER else self.healthy_cells

    # --- episode lifecycle ---

    def reset(self) -> None:
        """
        Fresh populations, full pools, then run untreated until the time where
        treatment can start (by then cancer cells outnumber healthy ones).
        """
        cfg = self.cfg
        self.healthy_cells = PopulationStore(Species.HEALTHY)
        self.cancer_cells = PopulationStore(Species.CANCER)
        self.time = 0
        self.glucose = float(cfg.initial_glucose)
        self.oxygen = float(cfg.initial_oxygen)
        self.end_type = EndType.NONE
        for _ in range(cfg.initial_healthy):
            self.healthy_cells.spawn()
        for _ in range(cfg.initial_cancer):
            self.cancer_cells.spawn()
        self.go(cfg.warmup_hours)
        self.init_hcell_count = self.healthy_count
        logger.debug(
            "reset done: t=%d healthy=%d cancer=%d",
            self.time, self.healthy_count, self.cancer_count,
        )

    def fill_sources(self) -> None:
        self.glucose += self.cfg.glucose_fill
        self.oxygen += self.cfg.oxygen_fill

    def cycle_cells(self) -> None:
        """
        Advance every cell by one hour.

        The two populations are walked in a random interleaving where the
        next cell comes from a species with probability proportional to how
        many of its cells are still waiting, so each cell is visited exactly
        once. Newborns are appended behind the walk and wait for next hour.
        """
        h_left = len(self.healthy_cells)
        c_left = len(self.cancer_cells)
        crowding = (h_left + c_left) // self.cfg.carrying_capacity
        h_idx = 0
        c_idx = 0
        rng = self.rng
        while h_left > 0 or c_left > 0:
            if rng.randrange(h_left + c_left) < c_left:
                c_left -= 1
                cell = self.cancer_cells[c_idx]
                c_idx += 1
            else:
                h_left -= 1
                cell = self.healthy_cells[h_idx]
                h_idx += 1
            result = cell.cycle(self.glucose, self.oxygen, crowding, rng=rng)
            self.glucose -= result.glucose
            self.oxygen -= result.oxygen
            if result.new_cell is not None:
                self._store(result.new_cell).spawn()
        self.healthy_cells.prune()
        self.cancer_cells.prune()

    def go(self, hours: int = 1) -> None:
        for _ in range(hours):
            self.time += 1
            self.fill_sources()
            self.cycle_cells()

    def irradiate(self, dose: float) -> None:
        self.healthy_cells.radiate(dose, self.rng)
        self.cancer_cells.radiate(dose, self.rng)

    def act(self, action: int) -> float:
        """
        Apply the dose selected by the agent and let one fraction interval pass.

        The dose is action + 1 grays, as the action space starts at 0.
        """
        dose = action + 1
        pre_hcell = self.healthy_count
        pre_ccell = self.cancer_count
        self.irradiate(dose)
        m_hcell = self.healthy_count
        self.go(self.cfg.hours_per_fraction)
        post_hcell = self.healthy_count
        post_ccell = self.cancer_count
        return self.adjust_reward(dose, pre_ccell - post_ccell, pre_hcell - min(post_hcell, m_hcell))

    # --- reward / termination ---

    def adjust_reward(self, dose: int, ccell_killed: int, hcells_lost: int) -> float:
        if self.in_terminal_state() and self.reward != RewardMode.NO_TERMINAL:
            if self.end_type in (EndType.LOSS, EndType.TIMEOUT):
                return -1.0
            if self.reward == RewardMode.DOSE:
                return -dose / 200.0 + 0.5 + self.healthy_count / 4000.0
            return 0.5 + self.healthy_count / 4000.0
        if self.reward.dose_penalized:
            return -dose / 200.0 + (ccell_killed - 5.0 * hcells_lost) / 100000.0
        return (ccell_killed - self.reward.healthy_weight * hcells_lost) / 100000.0

    def in_terminal_state(self) -> bool:
        if self.cancer_count <= 0:
            self.end_type = EndType.WIN
        elif self.healthy_count < self.cfg.loss_threshold:
            self.end_type = EndType.LOSS
        elif self.time > self.cfg.max_hours:
            self.end_type = EndType.TIMEOUT
        else:
            return False
        logger.debug("terminal state %s at t=%d", self.end_type.value, self.time)
        return True

    def survival_ratio(self) -> float:
        """Healthy cells left relative to the post-warm-up count (nan/inf when that was 0)."""
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.float64(self.healthy_count) / np.float64(self.init_hcell_count))
