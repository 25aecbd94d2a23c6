import pydantic
import pytest

from fbsim.config import FullConfig, load_config
from fbsim.simulate import GameSimulator, PlaySimulator
from fbsim.team import Coach, Defense, Offense, Team, with_advantage


def test_defaults():
    cfg = FullConfig()
    assert cfg.sim.max_plays == 1000 and cfg.sim.home_field_bonus == 3
    assert cfg.playcall.run_shift == 0.0 and cfg.playcall.fourth_down_aggr == 1.0
    assert cfg.logging.level == "WARNING"


def test_load_yaml(tmp_path):
    path = tmp_path / "sim.yaml"
    path.write_text("seed: 7\nsim:\n  max_plays: 400\n  neutral_site: true\nplaycall:\n  run_shift: 0.1\n")
    cfg = load_config(str(path))
    assert cfg.seed == 7 and cfg.sim.max_plays == 400 and cfg.sim.neutral_site
    assert cfg.playcall.run_shift == 0.1
    assert cfg.logging.level == "WARNING"

    sim = GameSimulator.from_config(cfg)
    assert sim.max_plays == 400
    assert sim.drive.play.run.home_field_bonus == 0


def test_empty_yaml_is_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(str(path)) == FullConfig()


def test_bad_values_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("sim:\n  max_plays: 0\n")
    with pytest.raises(pydantic.ValidationError):
        load_config(str(path))
    with pytest.raises(pydantic.ValidationError):
        FullConfig.model_validate({"logging": {"level": "LOUD"}})


def test_play_simulator_knobs_from_config():
    cfg = FullConfig.model_validate({"playcall": {"run_shift": -0.2, "fourth_down_aggr": 1.5},
                                     "sim": {"home_field_bonus": 5}})
    sim = PlaySimulator.from_config(cfg)
    assert sim.playcall.run_shift == -0.2 and sim.playcall.fourth_down_aggr == 1.5
    assert sim.passing.home_field_bonus == 5


def test_team_ratings():
    t = Team.from_overalls("Null Island", "NULL", 70, 40)
    assert t.offense.overall() == 70 and t.defense.overall() == 40
    assert t.coach == Coach()
    assert str(t) == "Null Island (NULL) OFF 70 DEF 40"
    assert t.offense.advantage("passing", 3) == 73
    assert with_advantage(99, 3) == 100


def test_team_validation():
    with pytest.raises(pydantic.ValidationError):
        Offense(passing=101)
    with pytest.raises(pydantic.ValidationError):
        Defense(blitzing=-1)
    with pytest.raises(pydantic.ValidationError):
        Team(short_name="TOOLONG")
    assert Team().name == "Null Island Defaults"
