"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest

from houghdeskew.config import DeskewConfig, EstimateConfig, PreprocessConfig, load_config
from houghdeskew.exceptions import ConfigurationError


def test_defaults():
    config = DeskewConfig()
    assert config.preprocess.max_height == 1200
    assert config.preprocess.threshold == 60
    assert config.detect.min_length_divisor == 50.0
    assert config.detect.max_gap == 20
    assert config.estimate.angle_window == 15.0
    assert config.estimate.trim_fraction == 0.05
    assert config.estimate.min_good_ratio == 0.75
    assert config.estimate.fold_direction is False
    assert config.debug.log_target == "stdout"


def test_no_path_gives_defaults():
    assert load_config(None) == DeskewConfig()


def test_from_dict_overrides_single_keys():
    config = DeskewConfig.from_dict({"estimate": {"trim_fraction": 0.1}})
    assert config.estimate.trim_fraction == 0.1
    assert config.estimate.angle_window == 15.0
    assert config.preprocess == PreprocessConfig()


def test_round_trip_through_dict():
    config = DeskewConfig(estimate=EstimateConfig(min_good_ratio=0.5))
    assert DeskewConfig.from_dict(config.to_dict()) == config


def test_load_toml(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text(
        "[preprocess]\nmax_height = 800\n\n[estimate]\nfold_direction = true\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.preprocess.max_height == 800
    assert config.estimate.fold_direction is True


def test_load_accepts_string_path(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)) == DeskewConfig()


def test_sample_config_matches_defaults():
    sample = Path(__file__).resolve().parent.parent / "config.sample.toml"
    assert load_config(sample) == DeskewConfig()


def test_missing_file(tmp_path: Path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "absent.toml")


def test_invalid_toml(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("[estimate\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)


@pytest.mark.parametrize(
    "data",
    [
        {"unknown": {}},
        {"estimate": {"no_such_key": 1}},
        {"estimate": 3},
        {"estimate": {"trim_fraction": 0.6}},
        {"estimate": {"min_good_ratio": 1.5}},
        {"estimate": {"angle_window": 0}},
        {"preprocess": {"threshold": 300}},
        {"preprocess": {"max_height": 0}},
        {"detect": {"max_gap": -1}},
        {"debug": {"log_target": "syslog"}},
    ],
)
def test_invalid_values(data):
    with pytest.raises(ConfigurationError):
        DeskewConfig.from_dict(data)


def test_error_message_includes_details():
    with pytest.raises(ConfigurationError) as excinfo:
        EstimateConfig(trim_fraction=0.9)
    assert "trim_fraction=0.9" in str(excinfo.value)
