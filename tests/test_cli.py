import pytest

from radiotherapy_sim import AgentConfig, TabularAgent
from radiotherapy_sim.cli import build_parser, main


def test_parser_accepts_full_positional_form():
    args = build_parser().parse_args(["20", "d", "o", "50", "5", "q.txt", "l"])
    assert (args.epochs, args.reward, args.state_type) == (20, "d", "o")
    assert (args.cancer_stages, args.healthy_stages) == (50, 5)
    assert (args.table, args.load) == ("q.txt", "l")


def test_parser_defaults_to_zero_argument_mode():
    args = build_parser().parse_args([])
    assert args.epochs is None
    assert args.episodes == 1000


def test_incomplete_positionals_are_rejected():
    with pytest.raises(SystemExit):
        main(["20", "d", "i"])


def test_bad_reward_tag_is_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["1", "x", "i", "50", "5"])


def test_loading_a_mismatched_table_aborts(fake_env, tmp_path):
    path = tmp_path / "q.txt"
    TabularAgent(fake_env(), AgentConfig(cancer_stages=10, healthy_stages=5)).save_q(path)
    assert main(["0", "d", "i", "50", "5", str(path), "l"]) == 1


def test_missing_table_aborts(tmp_path):
    assert main(["0", "d", "i", "50", "5", str(tmp_path / "missing.txt"), "l"]) == 1
