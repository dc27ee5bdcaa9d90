"""Tests for golsim.config."""

import pytest

from golsim.config import ConfigError, SimulationConfig


class TestValidate:
    def test_defaults_are_valid(self) -> None:
        config = SimulationConfig().validate()
        assert (config.rows, config.cols) == (60, 80)
        assert config.step_interval == 0.25

    @pytest.mark.parametrize(
        "overrides",
        [
            {"width": 0},
            {"cell_size": 0},
            {"cell_size": 7},
            {"step_interval_ms": -1},
            {"initial_density": 1.5},
            {"engine": "hashlife"},
            {"workers": 0},
            {"saving_type": "cloud"},
            {"record_fps": 0},
            {"record_seconds": 0.0},
        ],
    )
    def test_rejects_invalid(self, overrides) -> None:
        with pytest.raises(ConfigError):
            SimulationConfig(**overrides).validate()

    def test_config_error_is_value_error(self) -> None:
        assert issubclass(ConfigError, ValueError)


class TestWithEnv:
    def test_record_env_var_enables_recording(self) -> None:
        assert SimulationConfig().with_env({"GOL_RECORD": "1"}).record

    def test_without_env_var(self) -> None:
        assert not SimulationConfig().with_env({}).record
