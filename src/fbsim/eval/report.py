from __future__ import annotations
from pathlib import Path
from typing import Iterable

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from fbsim.simulate import Game
from fbsim.state import GameContext
from fbsim.vocab import DriveResult

CALL_ORDER = ["run", "pass", "punt", "field_goal", "kickoff", "extra_point", "qb_kneel"]
DRIVE_RESULT_ORDER = [str(r) for r in DriveResult if r != DriveResult.NONE]


def _is_snap(ctx: GameContext) -> bool:
    return not (ctx.next_play_kickoff or ctx.next_play_extra_point)


def play_log_frame(game: Game, game_id: int = 0) -> pd.DataFrame:
    """One row per snap: situation before the play and what happened."""
    rows = []
    for drive_id, drive in enumerate(game.drives):
        for p in drive.plays:
            ctx, res = p.context, p.result
            rows.append({
                "game": game_id,
                "drive": drive_id,
                "qtr": ctx.quarter,
                "half_secs": ctx.half_seconds,
                "home_possession": ctx.home_possession,
                "down": ctx.down,
                "ydstogo": ctx.distance,
                "yardline_100": ctx.yards_to_touchdown(),
                "play_type": p.call.value,
                "yards": res.net_yards,
                "duration": res.play_duration + p.post_play.duration,
                "turnover": res.turnover,
                "off_score": res.offense_score.points(),
                "def_score": res.defense_score.points(),
                "score_home": ctx.home_score,
                "score_away": ctx.away_score,
                "drive_result": str(drive.result),
                "summary": res.summary(),
            })
    return pd.DataFrame(rows)


def drive_frame(game: Game, game_id: int = 0) -> pd.DataFrame:
    """One row per drive, keyed on who had the ball at its first scrimmage snap."""
    rows = []
    for drive_id, drive in enumerate(game.drives):
        if not drive.plays:
            continue
        snaps = [p for p in drive.plays if _is_snap(p.context)]
        start = (snaps or drive.plays)[0].context
        home_pts = away_pts = 0
        for p in drive.plays:
            for res in (p.result, p.post_play):
                pts_off, pts_def = res.offense_score.points(), res.defense_score.points()
                if p.context.home_possession:
                    home_pts, away_pts = home_pts + pts_off, away_pts + pts_def
                else:
                    home_pts, away_pts = home_pts + pts_def, away_pts + pts_off
        rows.append({
            "game": game_id,
            "drive": drive_id,
            "offense": start.home_team_short if start.home_possession else start.away_team_short,
            "qtr": start.quarter,
            "start_yardline_100": start.yards_to_touchdown(),
            "snaps": len(snaps),
            "yards": drive.total_yards(),
            "seconds": sum(p.result.play_duration + p.post_play.duration for p in drive.plays),
            "result": str(drive.result),
            "points_home": home_pts,
            "points_away": away_pts,
        })
    return pd.DataFrame(rows)


def summarize_games(finals: Iterable[GameContext]) -> pd.DataFrame:
    """Final scores, margin and winner per game."""
    df = pd.DataFrame(
        [{"home": c.home_team_short, "away": c.away_team_short,
          "score_home": c.home_score, "score_away": c.away_score,
          "quarters": c.quarter} for c in finals]
    )
    if len(df) == 0:
        return df
    df["margin"] = df["score_home"] - df["score_away"]
    df["total"] = df["score_home"] + df["score_away"]
    df["overtime"] = df["quarters"] > 4
    df["winner"] = np.where(df["margin"] > 0, df["home"], np.where(df["margin"] < 0, df["away"], "TIE"))
    return df


def play_type_share(plays: pd.DataFrame) -> pd.Series:
    return plays["play_type"].value_counts(normalize=True).reindex(CALL_ORDER).fillna(0).round(3)


def stats(x: pd.Series) -> dict:
    x = x.dropna()
    if len(x) == 0:
        return dict(n=0, mean=np.nan, std=np.nan, p10=np.nan, p50=np.nan, p90=np.nan)
    return dict(n=len(x), mean=x.mean(), std=x.std(), p10=x.quantile(.1), p50=x.quantile(.5), p90=x.quantile(.9))


def plot_margin_hist(summary: pd.DataFrame, out_png: str | Path, bins: int = 30) -> Path:
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)
    plt.figure(figsize=(6, 4))
    plt.hist(summary["margin"], bins=bins, alpha=0.7)
    plt.axvline(0, color="k", lw=1)
    plt.xlabel("home margin"); plt.ylabel("games"); plt.title(f"Final margin ({len(summary)} games)")
    plt.tight_layout(); plt.savefig(out_png); plt.close()
    return out_png


def drive_result_share(drives: pd.DataFrame) -> pd.Series:
    return drives["result"].value_counts(normalize=True).reindex(DRIVE_RESULT_ORDER).fillna(0).round(3)


def situational_slice(plays: pd.DataFrame, down: int, ytg_min: int, ytg_max: int) -> pd.DataFrame:
    m = (plays["down"] == down) & (plays["ydstogo"].between(ytg_min, ytg_max, inclusive="both"))
    return plays.loc[m].copy()


def situational_pass_rates(plays: pd.DataFrame) -> pd.DataFrame:
    """Pass share of run/pass calls in a few standard down-and-distance buckets."""
    plays = plays.loc[plays["play_type"].isin(["run", "pass"])]
    buckets = [("1st & 10", 1, 10, 10), ("2nd & 7+", 2, 7, 99), ("3rd & 1-3", 3, 1, 3), ("3rd & 7+", 3, 7, 99)]
    rows = []
    for name, down, lo, hi in buckets:
        df = situational_slice(plays, down, lo, hi)
        rate = (df["play_type"] == "pass").mean() if len(df) else np.nan
        rows.append({"situation": name, "plays": len(df), "pass_rate": rate})
    return pd.DataFrame(rows).round(3)


def plot_yards_hist(plays: pd.DataFrame, out_png: str | Path) -> Path | None:
    """Yards per run/pass play, clipped to [-10, 80]. Returns None when there are no such plays."""
    yards = {pt: plays.loc[plays["play_type"] == pt, "yards"].clip(-10, 80) for pt in ("run", "pass")}
    if not any(len(y) for y in yards.values()):
        return None
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)
    plt.figure(figsize=(6, 4))
    for pt, y in yards.items():
        if len(y) == 0:
            continue
        plt.hist(y, bins=np.arange(-10, 81, 2), alpha=0.5, density=True, label=pt)
    plt.xlabel("yards"); plt.ylabel("density"); plt.title("Yards/Play (clipped [-10,80])"); plt.legend()
    plt.tight_layout(); plt.savefig(out_png); plt.close()
    return out_png


def write_report(out_md: str | Path, plays: pd.DataFrame, drives: pd.DataFrame, summary: pd.DataFrame) -> Path:
    out_md = Path(out_md)
    out_dir = out_md.parent
    out_dir.mkdir(parents=True, exist_ok=True)
    yards_png = plot_yards_hist(plays, out_dir / "yards_hist.png")
    margin_png = plot_margin_hist(summary, out_dir / "margin_hist.png") if len(summary) else None

    rp = plays.loc[plays["play_type"].isin(["run", "pass"])]
    yard_stats = pd.DataFrame({pt: stats(rp.loc[rp["play_type"] == pt, "yards"]) for pt in ("run", "pass")}).round(2)
    points = pd.DataFrame({"total": stats(summary.get("total", pd.Series(dtype=float))),
                           "margin": stats(summary.get("margin", pd.Series(dtype=float)))}).round(2)

    with open(out_md, "w") as f:
        f.write("# Simulation Report\n\n")
        f.write(f"- Games: **{len(summary):,}**, drives: **{len(drives):,}**, plays: **{len(plays):,}**\n")
        if len(summary):
            f.write(f"- Overtime games: {int(summary['overtime'].sum())}\n")
        f.write("\n## Points per game\n\n")
        f.write(points.to_string() + "\n\n")
        if margin_png is not None:
            f.write(f"![Margin]({margin_png.name})\n\n")

        f.write("## Play-type distribution\n\n")
        f.write(play_type_share(plays).to_string() + "\n\n")

        f.write("## Situational pass rates\n\n")
        f.write(situational_pass_rates(plays).to_string(index=False) + "\n\n")

        f.write("## Yards/Play (Run+Pass)\n\n")
        if yards_png is not None:
            f.write(f"![Yards]({yards_png.name})\n\n")
        f.write(yard_stats.to_string() + "\n\n")

        f.write("## Drive results\n\n")
        if len(drives):
            f.write(drive_result_share(drives).to_string() + "\n\n")
            f.write(f"Mean drive: {drives['snaps'].mean():.1f} snaps, {drives['yards'].mean():.1f} yards\n")
        else:
            f.write("_No drives._\n")
    return out_md
