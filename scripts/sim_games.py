from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import numpy as np
import pandas as pd

from fbsim.config import FullConfig, load_config
from fbsim.eval.report import (drive_frame, drive_result_share, play_log_frame, play_type_share, plot_margin_hist,
                               stats, summarize_games, write_report)
from fbsim.simulate import GameSimulator, kickoff_context
from fbsim.team import Team


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--n_games", type=int, default=100)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--config", type=str, default="")
    ap.add_argument("--out", type=str, default="runs/sim_games.csv")
    ap.add_argument("--home_overall", type=int, default=50)
    ap.add_argument("--away_overall", type=int, default=50)
    ap.add_argument("--plot", action="store_true", help="also write a margin histogram PNG")
    ap.add_argument("--report", action="store_true", help="also write a markdown report next to the CSV")
    args = ap.parse_args()

    cfg = load_config(args.config) if args.config else FullConfig()
    logging.basicConfig(level=cfg.logging.level, format=cfg.logging.format)
    seed = cfg.seed if args.seed is None else args.seed
    rng = np.random.default_rng(seed)

    home = Team.from_overalls("Home", "HOME", args.home_overall, args.home_overall)
    away = Team.from_overalls("Away", "AWAY", args.away_overall, args.away_overall)
    sim = GameSimulator.from_config(cfg)

    frames, drive_frames, finals = [], [], []
    for g in range(args.n_games):
        context = kickoff_context(home, away, home_opening_kickoff=cfg.sim.home_opening_kickoff,
                                  neutral_site=cfg.sim.neutral_site)
        game, final = sim.sim(home, away, context, rng)
        frames.append(play_log_frame(game, game_id=g))
        drive_frames.append(drive_frame(game, game_id=g))
        finals.append(final)

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    plays = pd.concat(frames, ignore_index=True)
    plays.to_csv(out, index=False)
    drives = pd.concat(drive_frames, ignore_index=True)
    drives.to_csv(out.with_name(out.stem + "_drives.csv"), index=False)
    summary = summarize_games(finals)

    print(f"\n== {args.n_games} games, seed {seed} ==")
    print("-- Play-type share --")
    print(play_type_share(plays).to_string())
    print("\n-- Points per game --")
    print(pd.DataFrame({"total": stats(summary["total"]), "margin": stats(summary["margin"])}).round(2).to_string())
    print("\n-- Drive results --")
    print(drive_result_share(drives).to_string())
    print(f"\novertime games: {int(summary['overtime'].sum())}")
    if args.plot:
        png = plot_margin_hist(summary, out.with_suffix(".png"))
        print("Wrote", png)
    if args.report:
        md = write_report(out.with_suffix(".md"), plays, drives, summary)
        print("Wrote", md)
    print("Saved", out)


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        import traceback

        print("sim_games error:", e)
        traceback.print_exc()
        sys.exit(1)
