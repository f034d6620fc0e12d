import math
import random
from collections import Counter

import numpy as np
import pytest

from radiotherapy_sim import (
    AgentConfig, EndType, QTableError, QTableShapeMismatch, ScalarModel, StateType,
    TabularAgent, TrainingSchedule,
)


COUNTS = [0, 1, 8, 9, 10, 11, 50, 500, 3508, 3509, 3510, 10_000, 39_999, 40_000, 40_001, 10**7]


@pytest.mark.parametrize("state_type", [StateType.LOG, StateType.LINEAR])
@pytest.mark.parametrize("stages", [(3, 3), (50, 5), (10, 7)])
def test_state_index_stays_in_range(fake_env, state_type, stages):
    env = fake_env()
    cfg = AgentConfig(cancer_stages=stages[0], healthy_stages=stages[1], state_type=state_type)
    agent = TabularAgent(env, cfg)
    for h in COUNTS:
        for c in COUNTS:
            env.healthy_count = h
            env.cancer_count = c
            assert 0 <= agent.state() < cfg.n_states


def test_linear_binning(fake_env):
    env = fake_env(healthy=500, cancer=100)
    agent = TabularAgent(env, AgentConfig(cancer_stages=50, healthy_stages=5, state_type="i"))
    assert agent.state() == 1 * 5 + 1

    env.healthy_count, env.cancer_count = 9, 0
    assert agent.state() == 0

    env.healthy_count, env.cancer_count = 10**6, 10**6
    assert agent.state() == 49 * 5 + 4


def test_log_binning(fake_env):
    env = fake_env(healthy=8, cancer=0)
    agent = TabularAgent(env, AgentConfig(cancer_stages=10, healthy_stages=6, state_type="o"))
    assert agent.state() == 0

    # one cancer cell: log(2) / log(40000 ** (1/8)) is well below 1
    env.cancer_count = 1
    assert agent.state() == 1 * 6

    env.healthy_count = 18
    expected_h = math.ceil(math.log(10) / (math.log(3500.0) / 4.0))
    assert agent.state() == 6 + expected_h


def test_too_few_stages_rejected():
    with pytest.raises(ValueError):
        AgentConfig(cancer_stages=2, healthy_stages=5)
    with pytest.raises(ValueError):
        AgentConfig(cancer_stages=10, healthy_stages=1)


def test_greedy_picks_first_maximum(fake_env):
    agent = TabularAgent(fake_env(), AgentConfig(seed=1))
    agent.change_val(7, 2, 0.4)
    agent.change_val(7, 4, 0.4)
    agent.change_val(7, 0, -1.0)
    for _ in range(50):
        assert agent.choose_action(7, 0.0) == 2


def test_greedy_on_zero_row_is_action_zero(fake_env):
    agent = TabularAgent(fake_env())
    assert agent.choose_action(0, 0.0) == 0


def test_full_exploration_is_uniform(fake_env):
    agent = TabularAgent(fake_env(), AgentConfig(seed=123))
    agent.change_val(3, 4, 10.0)
    counts = Counter(agent.choose_action(3, 1.0) for _ in range(5000))
    assert set(counts) == set(range(5))
    for a in range(5):
        assert 850 <= counts[a] <= 1150


def test_train_applies_one_step_q_update(fake_env):
    env = fake_env(lengths=(5,), reward=1.0)
    agent = TabularAgent(env, AgentConfig(seed=0))
    s = agent.state()
    agent.train(1, alpha=0.5, epsilon=0.0, disc_factor=0.9)
    assert agent.q_values[s, 0] == pytest.approx(0.5)

    # second step bootstraps from the updated row
    agent.train(1, alpha=0.5, epsilon=0.0, disc_factor=0.9)
    assert agent.q_values[s, 0] == pytest.approx(0.5 * 0.5 + 0.5 * (1.0 + 0.9 * 0.5))


def test_train_spends_budget_across_episodes(fake_env):
    env = fake_env(lengths=(3,))
    agent = TabularAgent(env, AgentConfig(seed=0))
    agent.train(7, alpha=0.1, epsilon=0.5, disc_factor=0.99)
    assert len(env.actions) == 7
    # initial reset + one after each of the two finished episodes
    assert env.resets == 3


def test_train_does_not_reset_when_budget_ends_with_episode(fake_env):
    env = fake_env(lengths=(3,))
    agent = TabularAgent(env, AgentConfig(seed=0))
    agent.train(6, alpha=0.1, epsilon=0.0, disc_factor=0.99)
    assert env.resets == 2


def test_greedy_evaluation_report(fake_env, capsys):
    env = fake_env(lengths=(2,), reward=0.25)
    agent = TabularAgent(env)
    report = agent.test(4, verbose=True, disc_factor=0.99, evaluate=True)

    assert report.average_score == pytest.approx(0.5)
    assert report.mse == pytest.approx(0.25 ** 2)
    assert report.tcp == 100.0
    assert report.fractions.mean == 2 and report.fractions.std == 0.0
    assert report.dose.mean == 2
    assert report.duration.mean == 48
    assert report.survival.mean == pytest.approx(1.0)

    out = capsys.readouterr().out
    assert "1 grays, reward = 0.25" in out
    assert "TCP: 100" in out


def test_evaluation_counts_only_wins(fake_env):
    env = fake_env(lengths=(1,), final=EndType.LOSS)
    report = TabularAgent(env).test(3, evaluate=True)
    assert report.tcp == 0.0


def test_plain_test_skips_clinical_stats(fake_env):
    report = TabularAgent(fake_env()).test(2)
    assert report.fractions is None


def test_treatment_var_divides_by_requested_count(fake_env, capsys):
    env = fake_env(lengths=(2, 1))
    rows = TabularAgent(env).treatment_var(2)
    assert rows == [(2, 1.0, 0.0), (1, 0.5, 0.5)]
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "count, mean, std_error"
    assert out[2] == "1, 0.5, 0.5"


def test_run_decays_and_reports_each_epoch(fake_env):
    env = fake_env(lengths=(2,))
    agent = TabularAgent(env, AgentConfig(seed=4))
    reports = agent.run(TrainingSchedule(n_epochs=3, train_steps=5, test_episodes=2))
    assert len(reports) == 4
    # 4 test rounds x 2 episodes x 2 steps, 3 training rounds x 5 steps
    assert len(env.actions) == 4 * 2 * 2 + 3 * 5


def test_q_table_round_trip(fake_env, tmp_path):
    cfg = AgentConfig(cancer_stages=6, healthy_stages=4, actions=3)
    agent = TabularAgent(fake_env(), cfg)
    agent.q_values[:] = np.random.default_rng(0).normal(size=agent.q_values.shape)
    agent.change_val(5, 1, 1e-300)
    path = tmp_path / "q.txt"
    agent.save_q(path)

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "6 4 3"
    assert len(lines) == 1 + 24
    assert lines[1].endswith(", ")

    other = TabularAgent(fake_env(), cfg)
    other.load_q(path)
    np.testing.assert_array_equal(other.q_values, agent.q_values)


def test_load_tolerates_missing_trailing_separator(fake_env, tmp_path):
    path = tmp_path / "q.txt"
    rows = "\n".join("1.5, -2,3" for _ in range(9))
    path.write_text("3 3 3\n" + rows + "\n", encoding="utf-8")
    agent = TabularAgent(fake_env(), AgentConfig(cancer_stages=3, healthy_stages=3, actions=3))
    agent.load_q(path)
    assert agent.q_values[8].tolist() == [1.5, -2.0, 3.0]


def test_load_with_other_dimensions_leaves_table_alone(fake_env, tmp_path):
    src = TabularAgent(fake_env(), AgentConfig(cancer_stages=5, healthy_stages=4))
    path = tmp_path / "q.txt"
    src.save_q(path)

    agent = TabularAgent(fake_env(), AgentConfig(cancer_stages=6, healthy_stages=4))
    agent.change_val(2, 3, 7.0)
    before = agent.q_values.copy()
    with pytest.raises(QTableShapeMismatch):
        agent.load_q(path)
    np.testing.assert_array_equal(agent.q_values, before)


def test_truncated_table_is_rejected_without_partial_load(fake_env, tmp_path):
    path = tmp_path / "q.txt"
    path.write_text("3 3 2\n1.0, 2.0, \n3.0, \n", encoding="utf-8")
    agent = TabularAgent(fake_env(), AgentConfig(cancer_stages=3, healthy_stages=3, actions=2))
    with pytest.raises(QTableError):
        agent.load_q(path)
    assert not agent.q_values.any()


def test_missing_file_raises(fake_env, tmp_path):
    agent = TabularAgent(fake_env())
    with pytest.raises(QTableError):
        agent.load_q(tmp_path / "nope.txt")


def test_learns_on_the_real_model(small_config):
    model = ScalarModel(config=small_config)
    agent = TabularAgent(model, AgentConfig(cancer_stages=10, healthy_stages=5, seed=2), rng=random.Random(2))
    agent.train(6, alpha=0.8, epsilon=0.8, disc_factor=0.99)
    assert agent.q_values.any()
    report = agent.test(1, evaluate=True)
    assert report.fractions.mean <= 5
