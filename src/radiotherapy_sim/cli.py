"""
Command-line entry point.

Usage:
    radiotherapy-sim                                   # default agent, warm-started
    radiotherapy-sim 20 d i 50 5                       # train 20 epochs, then evaluate
    radiotherapy-sim 20 d i 50 5 q_table.txt           # ... and save the table
    radiotherapy-sim 0 d i 50 5 q_table.txt l          # load the table, evaluate only
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .agent import QTableError, TabularAgent
from .config import AgentConfig, ModelConfig, RewardMode, StateType, TrainingSchedule
from .model import ScalarModel

logger = logging.getLogger(__name__)

# zero-argument run: favour action 1 (2 Gy) on the first states
WARM_START_STATES = 250
WARM_START_ACTION = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="radiotherapy-sim",
        description="Train and evaluate a tabular dose-fractionation agent on the scalar cell model.",
    )
    parser.add_argument("epochs", type=int, nargs="?", help="training epochs (0 = evaluate only)")
    parser.add_argument("reward", nargs="?", choices=[m.value for m in RewardMode], help="reward mode")
    parser.add_argument("state_type", nargs="?", choices=[s.value for s in StateType],
                        help="o = log binning, i = linear binning")
    parser.add_argument("cancer_stages", type=int, nargs="?")
    parser.add_argument("healthy_stages", type=int, nargs="?")
    parser.add_argument("table", nargs="?", help="Q-table path")
    parser.add_argument("load", nargs="?", choices=["l"], help="load TABLE before running")
    parser.add_argument("--episodes", type=int, default=1000, help="evaluation episodes (default: 1000)")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default="WARNING")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    default_run = args.epochs is None
    if default_run:
        n_epochs = 0
        reward = RewardMode.DOSE
        agent_cfg = AgentConfig(cancer_stages=50, healthy_stages=5, state_type=StateType.LINEAR, seed=args.seed)
    else:
        if args.healthy_stages is None:
            parser.error("expected: epochs reward state_type cancer_stages healthy_stages [table [l]]")
        n_epochs = args.epochs
        reward = RewardMode(args.reward)
        try:
            agent_cfg = AgentConfig(
                cancer_stages=args.cancer_stages,
                healthy_stages=args.healthy_stages,
                state_type=StateType(args.state_type),
                seed=args.seed,
            )
        except ValueError as e:
            parser.error(str(e))

    model = ScalarModel(reward, config=ModelConfig(seed=args.seed))
    agent = TabularAgent(model, agent_cfg)

    if args.load == "l":
        try:
            agent.load_q(args.table)
        except QTableError as e:
            logger.error("%s", e)
            print(f"error: {e}", file=sys.stderr)
            return 1
    if default_run:
        for state in range(min(WARM_START_STATES, agent_cfg.n_states)):
            agent.change_val(state, WARM_START_ACTION, 1.0)

    if n_epochs > 0:
        agent.run(TrainingSchedule(n_epochs=n_epochs))
        if args.table and args.load != "l":
            agent.save_q(args.table)

    agent.test(args.episodes, False, 0.99, True)
    agent.treatment_var(args.episodes)
    return 0


if __name__ == "__main__":
    sys.exit(main())
