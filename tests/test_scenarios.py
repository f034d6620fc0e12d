import pytest

from radiotherapy_sim import AgentConfig, EndType, ScalarModel, TabularAgent
from radiotherapy_sim.policies import FixedDose, GreedyPolicy, HighLowDose
from radiotherapy_sim.scenarios import evaluate_policy, no_treatment, run_policy


def test_fixed_schedules():
    assert [FixedDose(1).action(i) for i in range(3)] == [1, 1, 1]
    hl = HighLowDose(high=3, low=1, switch_after=3)
    assert [hl.action(i) for i in range(6)] == [3, 3, 3, 3, 1, 1]


def test_greedy_policy_follows_q_table(fake_env):
    agent = TabularAgent(fake_env(), AgentConfig())
    agent.change_val(agent.state(), 3, 1.0)
    assert GreedyPolicy(agent).action(0) == 3


def test_run_policy_averages_returns(fake_env, capsys):
    env = fake_env(lengths=(4,), reward=0.5)
    avg = run_policy(env, HighLowDose(high=4, low=0, switch_after=1), episodes=3)
    assert avg == pytest.approx(2.0)
    assert env.actions == [4, 4, 0, 0] * 3
    assert "Average reward 2" in capsys.readouterr().out


def test_evaluate_policy_statistics(fake_env):
    env = fake_env(lengths=(3,), final=EndType.WIN)
    report = evaluate_policy(env, FixedDose(2), episodes=5)
    assert report.tcp == 100.0
    assert report.fractions.mean == 3
    assert report.dose.mean == 9
    assert report.duration.mean == 72
    assert report.survival.std == 0.0


def test_no_treatment_trajectory(small_config):
    model = ScalarModel(config=small_config)
    history = no_treatment(model, until=small_config.warmup_hours + 30, every=10)
    assert [row["t"] for row in history] == [48, 58, 68]
    assert all(row["healthy"] > 0 for row in history)
