"""
plot_populations.py

Untreated healthy vs cancer growth after warm-up, saved as a PNG.
Works in headless environments (Codespaces / CI).
"""
from __future__ import annotations

from pathlib import Path

import matplotlib
matplotlib.use("Agg")  # headless safe
import matplotlib.pyplot as plt

from radiotherapy_sim import ModelConfig, ScalarModel
from radiotherapy_sim.scenarios import no_treatment


def main(out_path: Path | None = None, config: ModelConfig | None = None, until: int = 2000) -> Path:
    if out_path is None:
        out_path = Path.cwd() / "populations_no_treatment.png"

    model = ScalarModel(config=config if config is not None else ModelConfig(seed=5))
    history = no_treatment(model, until=until, every=50)

    t = [row["t"] for row in history]
    plt.figure(figsize=(8, 5))
    plt.plot(t, [row["healthy"] for row in history], label="Healthy cells", linewidth=2)
    plt.plot(t, [row["cancer"] for row in history], label="Cancer cells", linewidth=2)
    plt.xlabel("Time (hours)")
    plt.ylabel("Cells")
    plt.yscale("log")
    plt.title("Untreated growth")
    plt.grid(True)
    plt.legend()
    plt.tight_layout()
    plt.savefig(out_path, dpi=150)
    plt.close()

    print("Saved:", out_path)
    return out_path


if __name__ == "__main__":
    main()
