"""
Configuration Tests — profiles, overrides and JSON config files.
"""
import sys
import os
import json
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from rv_regsim.config import (
    SimConfig, HostConfig, SIM_PROFILES, load_config, PHYSICAL, INSTRUCTION,
)
from rv_regsim.errors import ConfigError, SimulatorError


class TestProfiles:

    def test_all_profiles_build(self):
        for name in SIM_PROFILES:
            cfg = SimConfig.from_profile(name)
            assert cfg.profile == name

    def test_defaults(self):
        cfg = SimConfig.from_profile()
        assert cfg == SimConfig()
        assert cfg.register_bits == 64
        assert cfg.instruction_bytes == 4
        assert cfg.label_addressing == PHYSICAL
        assert cfg.resolve_labels and cfg.resolve_constants
        assert not cfg.truncate_li_immediate

    def test_assembler_profile(self):
        cfg = SimConfig.from_profile("assembler")
        assert cfg.label_addressing == INSTRUCTION
        assert cfg.truncate_li_immediate

    def test_overrides(self):
        cfg = SimConfig.from_profile("verbatim", resolve_labels=True)
        assert cfg.resolve_labels
        assert not cfg.resolve_constants
        assert cfg.with_overrides(cache_enabled=True).cache_enabled

    def test_unknown_profile(self):
        with pytest.raises(ConfigError):
            SimConfig.from_profile("nope")

    def test_unknown_setting(self):
        with pytest.raises(ConfigError):
            SimConfig.from_profile("default", colour="blue")

    def test_invalid_values(self):
        with pytest.raises(ConfigError):
            SimConfig(label_addressing="sideways")
        with pytest.raises(ConfigError):
            SimConfig(register_bits=0)
        with pytest.raises(ConfigError):
            SimConfig(snapshot_interval=-1)

    def test_wrong_value_types(self):
        bad = [
            {"snapshot_interval": "4"},
            {"register_bits": 64.0},
            {"register_bits": True},
            {"cache_enabled": "yes"},
            {"label_addressing": None},
        ]
        for overrides in bad:
            with pytest.raises(ConfigError):
                SimConfig.from_profile("default", **overrides)
        with pytest.raises(ConfigError):
            HostConfig(extensions=(".s", 3))

    def test_config_error_is_simulator_error(self):
        assert issubclass(ConfigError, SimulatorError)


class TestLoadConfig:

    def _write(self, tmp_path, data):
        p = tmp_path / "sim.json"
        p.write_text(json.dumps(data), encoding="utf-8")
        return p

    def test_profile_and_overrides(self, tmp_path):
        p = self._write(tmp_path, {
            "profile": "assembler",
            "truncate_li_immediate": False,
            "host": {"auto_reset_on_language_change": True, "extensions": [".S"]},
        })
        sim, host = load_config(p)
        assert sim.profile == "assembler"
        assert sim.label_addressing == INSTRUCTION
        assert not sim.truncate_li_immediate
        assert host.auto_reset_on_language_change
        assert host.extensions == (".S",)

    def test_empty_object_gives_defaults(self, tmp_path):
        sim, host = load_config(self._write(tmp_path, {}))
        assert sim == SimConfig()
        assert host == HostConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "absent.json")

    def test_bad_json(self, tmp_path):
        p = tmp_path / "bad.json"
        p.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(p)

    def test_non_object(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(self._write(tmp_path, [1, 2]))

    def test_unknown_host_key(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(self._write(tmp_path, {"host": {"theme": "dark"}}))

    def test_wrong_value_types(self, tmp_path):
        for data in (
            {"snapshot_interval": "4"},
            {"profile": ["default"]},
            {"profile": 3},
            {"host": {"extensions": ".s"}},
            {"host": {"language_ids": ["riscv", 1]}},
            {"host": {"auto_reset_on_language_change": "true"}},
        ):
            with pytest.raises(ConfigError):
                load_config(self._write(tmp_path, data))

    def test_not_utf8(self, tmp_path):
        p = tmp_path / "sim.json"
        p.write_bytes(b'{"profile": "\xff"}')
        with pytest.raises(ConfigError):
            load_config(p)
