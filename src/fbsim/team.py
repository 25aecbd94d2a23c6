from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field

from fbsim.constants import (DEFAULT_RATING, MAX_SHORT_NAME, MAX_TEAM_NAME,
                             RATING_MAX, RATING_MIN)


def Rating(default: int = DEFAULT_RATING):
    return Field(default=default, ge=RATING_MIN, le=RATING_MAX)


def with_advantage(rating: int, bonus: int) -> int:
    """Rating boosted by a home-field bonus, capped at the rating ceiling."""
    return min(RATING_MAX, rating + bonus)


class _Ratings(BaseModel):
    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_overall(cls, overall: int):
        return cls(**{name: overall for name in cls.model_fields})

    def overall(self) -> int:
        vals = [getattr(self, name) for name in type(self).model_fields]
        return round(sum(vals) / len(vals))

    def advantage(self, skill: str, bonus: int) -> int:
        return with_advantage(getattr(self, skill), bonus)


class Offense(_Ratings):
    passing: int = Rating()
    blocking: int = Rating()
    rushing: int = Rating()
    receiving: int = Rating()
    scrambling: int = Rating()
    turnovers: int = Rating()
    field_goals: int = Rating()
    punting: int = Rating()
    kickoffs: int = Rating()
    kick_return_defense: int = Rating()


class Defense(_Ratings):
    blitzing: int = Rating()
    rush_defense: int = Rating()
    pass_defense: int = Rating()
    coverage: int = Rating()
    turnovers: int = Rating()
    kick_returning: int = Rating()


class Coach(_Ratings):
    risk_taking: int = Rating()
    run_pass: int = Rating()
    up_tempo: int = Rating()


class Team(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(default="Null Island Defaults", max_length=MAX_TEAM_NAME)
    short_name: str = Field(default="NULL", max_length=MAX_SHORT_NAME)
    coach: Coach = Coach()
    offense: Offense = Offense()
    defense: Defense = Defense()

    @classmethod
    def from_overalls(cls, name: str, short_name: str, offense: int, defense: int) -> "Team":
        return cls(
            name=name,
            short_name=short_name,
            offense=Offense.from_overall(offense),
            defense=Defense.from_overall(defense),
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.short_name}) OFF {self.offense.overall()} DEF {self.defense.overall()}"
