from __future__ import annotations

from typing import Protocol

from .agent import TabularAgent


class DosingPolicy(Protocol):
    """
    Minimal policy interface: pick the action for the next fraction.

    `fraction` counts fractions already given in the current episode.
    """

    def action(self, fraction: int) -> int:
        ...


class FixedDose:
    """
    Same action every fraction (action + 1 grays).
    """
    def __init__(self, action: int = 1):
        self.dose_action = max(0, action)

    def action(self, fraction: int) -> int:
        return self.dose_action


class HighLowDose:
    """
    A few high fractions up front, then a lower maintenance dose.
    """
    def __init__(self, high: int = 3, low: int = 1, switch_after: int = 3):
        self.high = high
        self.low = low
        self.switch_after = switch_after

    def action(self, fraction: int) -> int:
        return self.high if fraction <= self.switch_after else self.low


class GreedyPolicy:
    """
    Exploit a trained agent's Q-table (epsilon = 0).
    """
    def __init__(self, agent: TabularAgent):
        self.agent = agent

    def action(self, fraction: int) -> int:
        return self.agent.choose_action(self.agent.state(), 0.0)
