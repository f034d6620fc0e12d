from __future__ import annotations
from typing import List, Dict, Any, Optional

import numpy as np

from .config import EndType, ModelConfig, RewardMode
from .model import ScalarModel
from .policies import DosingPolicy, FixedDose, HighLowDose
from .stats import EvalReport, RunningStat, tcp

def no_treatment(model: ScalarModel, until: int = 2000, every: int = 50) -> List[Dict[str, Any]]:
    """Untreated growth after warm-up, sampled every `every` hours."""
    print("No treatment")
    model.reset()
    history: List[Dict[str, Any]] = []
    while model.time < until:
        row = {"t": model.time, "healthy": model.healthy_count, "cancer": model.cancer_count}
        print(f"Time: {row['t']} Healthy cells: {row['healthy']} Cancer cells: {row['cancer']}")
        history.append(row)
        model.go(every)
    return history

def run_policy(model: ScalarModel, policy: DosingPolicy, episodes: int = 25) -> float:
    """Average undiscounted return of `policy` over `episodes` episodes."""
    sum_scores = 0.0
    for _ in range(episodes):
        model.reset()
        fraction = 0
        while not model.in_terminal_state():
            sum_scores += model.act(policy.action(fraction))
            fraction += 1
    with np.errstate(divide="ignore", invalid="ignore"):
        avg = float(np.float64(sum_scores) / episodes)
    print(f"Average reward {avg:g}")
    return avg

def evaluate_policy(model: ScalarModel, policy: DosingPolicy, episodes: int = 100) -> EvalReport:
    """Clinical statistics of a fixed policy, same fields as TabularAgent.test(evaluate=True)."""
    fracs_stat = RunningStat()
    dose_stat = RunningStat()
    duration_stat = RunningStat()
    survival_stat = RunningStat()
    sum_w = 0
    sum_scores = 0.0
    for _ in range(episodes):
        model.reset()
        fracs = doses = duration = 0
        while not model.in_terminal_state():
            action = policy.action(fracs)
            sum_scores += model.act(action)
            fracs += 1
            doses += action + 1
            duration += model.cfg.hours_per_fraction
        fracs_stat.add(fracs)
        dose_stat.add(doses)
        duration_stat.add(duration)
        survival_stat.add(model.survival_ratio())
        if model.end_type == EndType.WIN:
            sum_w += 1

    with np.errstate(divide="ignore", invalid="ignore"):
        average_score = float(np.float64(sum_scores) / episodes)
    report = EvalReport(
        episodes=episodes,
        average_score=average_score,
        mse=float("nan"),
        tcp=tcp(sum_w, episodes),
        fractions=fracs_stat,
        dose=dose_stat,
        duration=duration_stat,
        survival=survival_stat,
    )
    for line in report.lines(label="std error")[1:]:
        print(line)
    return report

def baseline_suite(
    reward: RewardMode | str = RewardMode.DOSE,
    config: Optional[ModelConfig] = None,
    episodes: int = 25,
) -> Dict[str, float]:
    """Average reward of the canned schedules: 1 Gy, 2 Gy, 5 Gy, and 4 Gy x4 then 2 Gy."""
    model = ScalarModel(reward, config=config)
    results: Dict[str, float] = {}
    for name, policy in (
        ("low", FixedDose(0)),
        ("baseline", FixedDose(1)),
        ("high", FixedDose(4)),
        ("high_low", HighLowDose(high=3, low=1, switch_after=3)),
    ):
        print(f"{name.replace('_', ' ').capitalize()} treatment")
        results[name] = run_policy(model, policy, episodes)
    return results
