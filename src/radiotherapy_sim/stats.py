from __future__ import annotations
from dataclasses import dataclass
import math

import numpy as np


@dataclass
class RunningStat:
    """
    Running sum / sum of squares, reduced to a population mean and std dev.

    An empty stat reports nan rather than raising.
    """
    n: int = 0
    total: float = 0.0
    squared: float = 0.0

    def add(self, x: float) -> None:
        self.n += 1
        self.total += x
        self.squared += x * x

    @property
    def mean(self) -> float:
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.float64(self.total) / self.n)

    @property
    def std(self) -> float:
        with np.errstate(divide="ignore", invalid="ignore"):
            var = np.float64(self.squared) / self.n - self.mean ** 2
        if math.isnan(var):
            return var
        # E[x^2] - E[x]^2 can dip just below zero for a constant sample
        return math.sqrt(max(0.0, float(var)))


@dataclass
class EvalReport:
    episodes: int
    average_score: float
    mse: float
    tcp: float = float("nan")
    fractions: RunningStat | None = None
    dose: RunningStat | None = None
    duration: RunningStat | None = None
    survival: RunningStat | None = None

    def lines(self, label: str = "std dev") -> list[str]:
        out = [f"Average score: {self.average_score:g} MSE: {self.mse:g}"]
        if self.fractions is None:
            return out
        out.append(f"TCP: {self.tcp:g}")
        for title, stat in (
            ("Average num of fractions", self.fractions),
            ("Average radiation dose", self.dose),
            ("Average duration", self.duration),
            ("Average survival", self.survival),
        ):
            out.append(f"{title}: {stat.mean:g} {label}: {stat.std:g}")
        return out


def tcp(wins: int, episodes: int) -> float:
    """Tumor control probability, in percent."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(100.0 * np.float64(wins) / episodes)
