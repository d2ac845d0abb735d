"""
Simulator profiles and configuration.

A profile is a named bundle of settings, the same way a build target is.
Anything in a profile can be overridden per machine, from a JSON file, or
from the CLI.

    "default"    labels + constants resolved, snapshot cache on
    "verbatim"   operands stored exactly as written, no cache
    "assembler"  only instruction lines take address slots, LI keeps 12 bits

Config file format (JSON):

    {
        "profile": "default",
        "resolve_labels": false,
        "host": {"auto_reset_on_language_change": true}
    }
"""

from __future__ import annotations
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Tuple, Union
import json

from .errors import ConfigError

__all__ = ['SimConfig', 'HostConfig', 'SIM_PROFILES', 'load_config',
           'PHYSICAL', 'INSTRUCTION']

# label_addressing modes
PHYSICAL = 'physical'        # every physical line occupies one slot
INSTRUCTION = 'instruction'  # only decodable instruction lines do


SIM_PROFILES: Dict[str, Dict[str, Any]] = {
    "default": {
        "label_addressing": PHYSICAL,
        "resolve_labels": True,
        "resolve_constants": True,
        "truncate_li_immediate": False,
        "cache_enabled": True,
        "description": "Live preview: labels and .equ constants resolved",
    },
    "verbatim": {
        "label_addressing": PHYSICAL,
        "resolve_labels": False,
        "resolve_constants": False,
        "truncate_li_immediate": False,
        "cache_enabled": False,
        "description": "Operands stored exactly as written, re-run from reset",
    },
    "assembler": {
        "label_addressing": INSTRUCTION,
        "resolve_labels": True,
        "resolve_constants": True,
        "truncate_li_immediate": True,
        "cache_enabled": True,
        "description": "Assembler-style addresses, LI as addi rd, zero, imm12",
    },
}


@dataclass(frozen=True)
class SimConfig:
    """Settings for one RegisterMachine."""
    profile: str = "default"
    register_bits: int = 64
    instruction_bytes: int = 4
    label_addressing: str = PHYSICAL
    resolve_labels: bool = True
    resolve_constants: bool = True
    truncate_li_immediate: bool = False
    cache_enabled: bool = True
    snapshot_interval: int = 16     # store a cache entry every N lines

    def __post_init__(self):
        _check_types(self)
        if self.label_addressing not in (PHYSICAL, INSTRUCTION):
            raise ConfigError(f"label_addressing must be '{PHYSICAL}' or "
                              f"'{INSTRUCTION}', got '{self.label_addressing}'")
        for name in ('register_bits', 'instruction_bytes', 'snapshot_interval'):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")

    @classmethod
    def from_profile(cls, name: str = "default", **overrides) -> 'SimConfig':
        """Build a config from a named profile plus keyword overrides."""
        if not isinstance(name, str) or name not in SIM_PROFILES:
            raise ConfigError(f"Unknown profile '{name}' "
                              f"(choose from: {', '.join(SIM_PROFILES)})")
        settings = {k: v for k, v in SIM_PROFILES[name].items() if k != "description"}
        settings.update(overrides)
        settings.pop("profile", None)
        _check_keys(cls, settings)
        return cls(profile=name, **settings)

    def with_overrides(self, **overrides) -> 'SimConfig':
        _check_keys(type(self), overrides)
        return replace(self, **overrides)


@dataclass(frozen=True)
class HostConfig:
    """What the editor host treats as an assembly buffer, and when to reset."""
    extensions: Tuple[str, ...] = ('.s', '.asm', '.riscv', '.rv')
    language_ids: Tuple[str, ...] = ('riscv', 'risc-v', 'asm-riscv', 'riscv-asm')
    auto_reset_on_language_change: bool = False

    def __post_init__(self):
        _check_types(self)
        for key in ('extensions', 'language_ids'):
            if not all(isinstance(item, str) for item in getattr(self, key)):
                raise ConfigError(f"{key} must be a list of strings")


# field annotation -> accepted runtime type
_FIELD_TYPES = {'str': str, 'int': int, 'bool': bool}


def _check_types(config):
    for f in fields(config):
        value = getattr(config, f.name)
        if f.type.startswith('Tuple'):
            expected = tuple
        else:
            expected = _FIELD_TYPES[f.type]
        # bool is an int subclass
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ConfigError(f"{f.name} must be of type {expected.__name__}, "
                              f"got {type(value).__name__}")


def _check_keys(cls, settings: Dict[str, Any]):
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(settings) - known)
    if unknown:
        raise ConfigError(f"Unknown setting(s): {', '.join(unknown)}")


def load_config(path: Union[str, Path]) -> Tuple[SimConfig, HostConfig]:
    """Read a JSON config file into (SimConfig, HostConfig)."""
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding='utf-8'))
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {p}")
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config {p}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Config {p}: top level must be an object")

    host_data = data.pop("host", {}) or {}
    if not isinstance(host_data, dict):
        raise ConfigError(f"Config {p}: 'host' must be an object")
    profile = data.pop("profile", "default")

    sim = SimConfig.from_profile(profile, **data)

    _check_keys(HostConfig, host_data)
    for key in ('extensions', 'language_ids'):
        if key in host_data:
            if not isinstance(host_data[key], list):
                raise ConfigError(f"Config {p}: host.{key} must be a list")
            host_data[key] = tuple(host_data[key])
    host = HostConfig(**host_data)
    return sim, host
