import pytest

from radiotherapy_sim import EndType, ModelConfig


class FakeEnv:
    """
    Stand-in for ScalarModel with scripted episode lengths and constant rewards.
    """
    def __init__(self, lengths=(3,), reward=1.0, healthy=500, cancer=100, final=EndType.WIN):
        self.cfg = ModelConfig()
        self.lengths = list(lengths)
        self.reward = reward
        self.healthy_count = healthy
        self.cancer_count = cancer
        self.final = final
        self.episode = -1
        self.steps = 0
        self.resets = 0
        self.actions = []
        self.end_type = EndType.NONE

    def reset(self):
        self.episode += 1
        self.resets += 1
        self.steps = 0
        self.end_type = EndType.NONE

    def in_terminal_state(self):
        if self.steps >= self.lengths[self.episode % len(self.lengths)]:
            self.end_type = self.final
            return True
        return False

    def act(self, action):
        self.actions.append(action)
        self.steps += 1
        return self.reward

    def survival_ratio(self):
        return 1.0


@pytest.fixture
def fake_env():
    return FakeEnv


@pytest.fixture
def small_config():
    """A short, cheap episode: 40 healthy cells, two days of warm-up, four fractions max."""
    return ModelConfig(initial_healthy=40, initial_cancer=1, warmup_hours=48, max_hours=48 + 4 * 24, seed=11)
