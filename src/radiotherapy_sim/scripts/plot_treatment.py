"""
plot_treatment.py

Mean dose (with std dev band) per fraction chosen by a greedy agent,
optionally loaded from a saved Q-table.

    python -m radiotherapy_sim.scripts.plot_treatment [q_table.txt]
"""
from __future__ import annotations

import sys
from pathlib import Path

import matplotlib
matplotlib.use("Agg")  # headless safe
import matplotlib.pyplot as plt
import numpy as np

from radiotherapy_sim import AgentConfig, ModelConfig, ScalarModel, TabularAgent


def main(
    table: str | None = None,
    episodes: int = 100,
    out_path: Path | None = None,
    agent: TabularAgent | None = None,
) -> Path:
    if out_path is None:
        out_path = Path.cwd() / "treatment_profile.png"

    if agent is None:
        agent = TabularAgent(ScalarModel(config=ModelConfig(seed=5)), AgentConfig())
    if table is not None:
        agent.load_q(table)
    rows = agent.treatment_var(episodes)

    fraction = np.arange(1, len(rows) + 1)
    mean = np.array([r[1] for r in rows])
    std = np.array([r[2] for r in rows])
    active = np.array([r[0] for r in rows])

    fig, (ax_dose, ax_active) = plt.subplots(2, 1, figsize=(8, 7), sharex=True)
    ax_dose.plot(fraction, mean, linewidth=2)
    ax_dose.fill_between(fraction, mean - std, mean + std, alpha=0.3)
    ax_dose.set_ylabel("Dose (Gy)")
    ax_dose.set_title("Greedy treatment profile")
    ax_dose.grid(True)

    ax_active.step(fraction, active, where="mid")
    ax_active.set_xlabel("Fraction")
    ax_active.set_ylabel("Episodes still treated")
    ax_active.grid(True)

    fig.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)

    print("Saved:", out_path)
    return out_path


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else None)
