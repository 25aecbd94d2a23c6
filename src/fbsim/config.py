from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Literal
import yaml

from fbsim.constants import HOME_FIELD_BONUS

class SimCfg(BaseModel):
    max_plays: int = Field(default=1_000, gt=0)
    home_field_bonus: int = Field(default=HOME_FIELD_BONUS, ge=0, le=100)
    neutral_site: bool = False
    home_opening_kickoff: bool = True

class PlayCallCfg(BaseModel):
    run_shift: float = Field(default=0.0, ge=-1.0, le=1.0)
    fourth_down_aggr: float = Field(default=1.0, gt=0.0)

class LoggingCfg(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

class FullConfig(BaseModel):
    seed: int = 42
    sim: SimCfg = SimCfg()
    playcall: PlayCallCfg = PlayCallCfg()
    logging: LoggingCfg = LoggingCfg()

def load_config(path: str) -> FullConfig:
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    return FullConfig.model_validate(raw)
