"""
Configuration Tests
===================

Tests for RunConfig environment handling and MachineConfig validation.
"""

import pytest

from kijo.config import MachineConfig, RunConfig
from kijo.emulator import Machine


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("KIJO_MAX_STEPS", "KIJO_TRACE", "KIJO_INPUT_ENCODING"):
        monkeypatch.delenv(name, raising=False)


class TestRunConfig:
    """Defaults, environment and overrides."""

    def test_defaults(self):
        config = RunConfig()
        assert config.max_steps == 10_000
        assert config.trace is False
        assert config.dump is True
        assert config.breakpoints == []
        assert config.input_encoding == "utf-8"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("KIJO_MAX_STEPS", "250")
        monkeypatch.setenv("KIJO_TRACE", "yes")
        monkeypatch.setenv("KIJO_INPUT_ENCODING", "latin-1")
        config = RunConfig.from_env()
        assert config.max_steps == 250
        assert config.trace is True
        assert config.input_encoding == "latin-1"

    def test_from_env_invalid_steps(self, monkeypatch):
        monkeypatch.setenv("KIJO_MAX_STEPS", "lots")
        assert RunConfig.from_env().max_steps == 10_000

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("TRUE", True), ("0", False), ("no", False),
    ])
    def test_trace_values(self, monkeypatch, value, expected):
        monkeypatch.setenv("KIJO_TRACE", value)
        assert RunConfig.from_env().trace is expected

    def test_with_overrides(self):
        base = RunConfig(max_steps=50, trace=True)
        config = base.with_overrides(max_steps=None, dump=False, breakpoints=[3, 1])
        assert config.max_steps == 50
        assert config.trace is True
        assert config.dump is False
        assert config.breakpoints == [3, 1]
        assert base.dump is True

    def test_breakpoints_not_shared(self):
        assert RunConfig().breakpoints is not RunConfig().breakpoints


class TestMachineConfig:
    """MachineConfig validation and use."""

    def test_unknown_encoding(self):
        with pytest.raises(LookupError):
            MachineConfig(input_encoding="no-such-codec")

    def test_machine_config_from_run_config(self):
        assert RunConfig(input_encoding="latin-1").machine_config() == MachineConfig("latin-1")

    def test_input_encoding_used_by_machine(self):
        machine = Machine(MachineConfig(input_encoding="latin-1"))
        machine.reset([], "é")
        assert machine.input_remaining == b"\xe9"
