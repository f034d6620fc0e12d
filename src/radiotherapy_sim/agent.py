"""
Tabular Q-learning controller for the scalar model.

The state is the pair (cancer stage, healthy stage) obtained by binning the
two population counts, flattened as cancer_stage * healthy_stages +
healthy_stage. Actions are dose indices; the model gives action + 1 grays.
"""

from __future__ import annotations

import logging
import math
import random
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from .config import AgentConfig, EndType, StateType, TrainingSchedule
from .model import ScalarModel
from .stats import EvalReport, RunningStat, tcp

logger = logging.getLogger(__name__)

# decisions remembered per episode by treatment_var()
TREATMENT_BUFFER = 100


class QTableError(Exception):
    """A Q-table file could not be read or parsed."""


class QTableShapeMismatch(QTableError, ValueError):
    """A Q-table file was written for different stage/action counts."""


class TabularAgent:
    def __init__(
        self,
        env: ScalarModel,
        config: Optional[AgentConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.env = env
        self.cfg = config if config is not None else AgentConfig()
        self.rng = rng if rng is not None else random.Random(self.cfg.seed)

        cfg = self.cfg
        self.cancer_stages = cfg.cancer_stages
        self.healthy_stages = cfg.healthy_stages
        self.actions = cfg.actions
        self.state_type = cfg.state_type
        self.q_values = np.zeros((cfg.n_states, cfg.actions), dtype=float)

        # The top stage is reached at the configured ceiling; stage 0 holds
        # empty (or nearly empty) populations.
        if self.state_type == StateType.LOG:
            self.state_helper_hcells = math.exp(math.log(cfg.healthy_ceiling) / (cfg.healthy_stages - 2.0))
            self.state_helper_ccells = math.exp(math.log(cfg.cancer_ceiling) / (cfg.cancer_stages - 2.0))
        else:
            self.state_helper_hcells = cfg.healthy_ceiling / (cfg.healthy_stages - 2.0)
            self.state_helper_ccells = cfg.cancer_ceiling / (cfg.cancer_stages - 2.0)

    # --- policy ---

    def state(self) -> int:
        hcells = self.env.healthy_count
        ccells = self.env.cancer_count
        if self.state_type == StateType.LOG:
            ccell_state = math.ceil(math.log(ccells + 1) / math.log(self.state_helper_ccells))
            hcell_state = math.ceil(math.log(max(hcells - 8, 1)) / math.log(self.state_helper_hcells))
        else:
            ccell_state = math.ceil(ccells / self.state_helper_ccells)
            hcell_state = math.ceil(max(hcells - 9, 0) / self.state_helper_hcells)
        ccell_state = min(self.cancer_stages - 1, ccell_state)
        hcell_state = min(self.healthy_stages - 1, hcell_state)
        return ccell_state * self.healthy_stages + hcell_state

    def choose_action(self, state: int, epsilon: float) -> int:
        if self.rng.random() < epsilon:
            return self.rng.randrange(self.actions)
        # argmax keeps the first of tied maxima
        return int(np.argmax(self.q_values[state]))

    def _max_q(self, state: int) -> float:
        return float(self.q_values[state].max())

    def change_val(self, state: int, action: int, val: float) -> None:
        self.q_values[state, action] = val

    # --- learning ---

    def train(self, steps: int, alpha: float, epsilon: float, disc_factor: float) -> None:
        """
        One-step Q-learning for `steps` decisions, restarting the model
        whenever an episode ends before the budget is spent.
        """
        env = self.env
        env.reset()
        while steps > 0:
            while not env.in_terminal_state() and steps > 0:
                obs = self.state()
                action = self.choose_action(obs, epsilon)
                r = env.act(action)
                new_obs = self.state()
                target = r + disc_factor * self._max_q(new_obs)
                self.q_values[obs, action] = (1.0 - alpha) * self.q_values[obs, action] + alpha * target
                steps -= 1
            if steps > 0:
                env.reset()

    def test(
        self,
        episodes: int,
        verbose: bool = False,
        disc_factor: float = 0.99,
        evaluate: bool = False,
    ) -> EvalReport:
        """
        Greedy rollouts. The squared TD error is only measured, never applied.

        With `evaluate`, also gathers per-episode fractions, total dose,
        duration (hours) and healthy survival ratio.
        """
        env = self.env
        sum_scores = 0.0
        sum_error = 0.0
        sum_w = 0
        fracs_stat = RunningStat()
        dose_stat = RunningStat()
        duration_stat = RunningStat()
        survival_stat = RunningStat()
        for _ in range(episodes):
            env.reset()
            sum_r = 0.0
            err = 0.0
            count = 0
            fracs = 0
            doses = 0
            duration = 0
            init_hcell = env.healthy_count
            while not env.in_terminal_state():
                obs = self.state()
                action = self.choose_action(obs, 0.0)
                r = env.act(action)
                if verbose:
                    print(f"{action + 1} grays, reward = {r:g}")
                fracs += 1
                doses += action + 1
                duration += env.cfg.hours_per_fraction
                sum_r += r
                new_obs = self.state()
                err += (r + disc_factor * self._max_q(new_obs) - self.q_values[obs, action]) ** 2
                count += 1
            if verbose:
                print(env.end_type.value)
            if env.end_type == EndType.WIN:
                sum_w += 1
            if evaluate:
                fracs_stat.add(fracs)
                dose_stat.add(doses)
                duration_stat.add(duration)
                with np.errstate(divide="ignore", invalid="ignore"):
                    survival_stat.add(float(np.float64(env.healthy_count) / init_hcell))
            sum_scores += sum_r
            with np.errstate(divide="ignore", invalid="ignore"):
                sum_error += float(np.float64(err) / count)

        with np.errstate(divide="ignore", invalid="ignore"):
            report = EvalReport(
                episodes=episodes,
                average_score=float(np.float64(sum_scores) / episodes),
                mse=float(np.float64(sum_error) / episodes),
            )
        if evaluate:
            report.tcp = tcp(sum_w, episodes)
            report.fractions = fracs_stat
            report.dose = dose_stat
            report.duration = duration_stat
            report.survival = survival_stat
        for line in report.lines():
            print(line)
        return report

    def run(self, schedule: TrainingSchedule) -> List[EvalReport]:
        """Alternate training and greedy testing while alpha and epsilon decay linearly."""
        s = schedule
        reports = [self.test(s.test_episodes, False, s.discount, False)]
        alpha = s.init_alpha
        epsilon = s.init_epsilon
        if s.n_epochs > 1:
            epsilon_change = (s.init_epsilon - s.end_epsilon) / (s.n_epochs - 1)
            alpha_change = (s.init_alpha - s.end_alpha) / (s.n_epochs - 1)
        else:
            epsilon_change = alpha_change = 0.0
        for i in range(s.n_epochs):
            print(f"Epoch {i + 1}")
            logger.info("epoch %d/%d alpha=%.4f epsilon=%.4f", i + 1, s.n_epochs, alpha, epsilon)
            self.train(s.train_steps, alpha, epsilon, s.discount)
            reports.append(self.test(s.test_episodes, False, s.discount, False))
            alpha -= alpha_change
            epsilon -= epsilon_change
        return reports

    def treatment_var(self, count: int) -> List[Tuple[int, float, float]]:
        """
        Dose chosen at each decision index over `count` greedy episodes.

        Rows are (episodes still treated, mean dose, std dev). Both moments
        divide by `count`, episodes that already ended contributing zeros.
        """
        env = self.env
        treatments = np.zeros((count, TREATMENT_BUFFER), dtype=int)
        for i in range(count):
            env.reset()
            j = 0
            while not env.in_terminal_state():
                action = self.choose_action(self.state(), 0.0)
                env.act(action)
                if j < TREATMENT_BUFFER:
                    treatments[i, j] = action + 1
                elif j == TREATMENT_BUFFER:
                    logger.warning("episode %d ran past %d fractions, the rest is not recorded", i, TREATMENT_BUFFER)
                j += 1

        rows: List[Tuple[int, float, float]] = []
        print("count, mean, std_error")
        for j in range(TREATMENT_BUFFER):
            column = treatments[:, j]
            count_mean = int(np.count_nonzero(column))
            if count_mean == 0:
                break
            mean = column.sum() / count
            std_error = math.sqrt(float(((column - mean) ** 2).sum()) / count)
            rows.append((count_mean, float(mean), std_error))
            print(f"{count_mean}, {mean:g}, {std_error:g}")
        return rows

    # --- persistence ---

    def save_q(self, path: str | Path) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(f"{self.cancer_stages} {self.healthy_stages} {self.actions}\n")
            for row in self.q_values:
                f.write("".join(f"{float(v)!r}, " for v in row))
                f.write("\n")
        logger.info("saved Q-table %s to %s", self.q_values.shape, path)

    def load_q(self, path: str | Path) -> None:
        """
        Replace the table with the one stored at `path`.

        The whole file is parsed before anything is written, so a failed load
        leaves the current table as it was.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
        except OSError as e:
            raise QTableError(f"Could not open Q-table file {path}") from e

        if not lines:
            raise QTableError(f"{path}: empty Q-table file")
        try:
            dims = tuple(int(x) for x in lines[0].split())
        except ValueError as e:
            raise QTableError(f"{path}: bad header {lines[0]!r}") from e
        if len(dims) != 3:
            raise QTableError(f"{path}: header needs 3 integers, got {lines[0]!r}")
        expected = (self.cancer_stages, self.healthy_stages, self.actions)
        if dims != expected:
            raise QTableShapeMismatch(f"{path}: Parameters do not match, file has {dims}, agent has {expected}")

        n_states = self.cancer_stages * self.healthy_stages
        rows = lines[1:]
        if len(rows) < n_states:
            raise QTableError(f"{path}: expected {n_states} rows, found {len(rows)}")
        table = np.empty_like(self.q_values)
        for i in range(n_states):
            values = [v for v in (x.strip() for x in rows[i].split(",")) if v]
            if len(values) != self.actions:
                raise QTableError(f"{path}: row {i} has {len(values)} values, expected {self.actions}")
            try:
                table[i] = [float(v) for v in values]
            except ValueError as e:
                raise QTableError(f"{path}: row {i} is not numeric") from e

        self.q_values[:] = table
        logger.info("loaded Q-table %s from %s", self.q_values.shape, path)
