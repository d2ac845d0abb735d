"""
rv_regsim — live register preview for RISC-V assembly
=====================================================
Answers "what is in every register at this line?" for an assembly buffer,
fast enough to re-run on each keystroke or cursor move.

Architecture:
    ┌──────────┐    ┌───────────┐    ┌────────────────┐    ┌──────────────┐
    │ Source   │───>│  Decoder  │───>│ RegisterMachine│───>│ register view│
    │ + line N │    │ (per line)│    │ symbols + exec │    │ (read-only)  │
    └──────────┘    └───────────┘    └────────────────┘    └──────────────┘

    - decoder.py:    one line -> (MNEMONIC, [operands]) or None
    - registers.py:  the 33-entry register file, value formatting
    - machine.py:    symbol pass + execution pass (LI, MV, RET, CALL)
    - cache.py:      per-line snapshots, invalidated when the text changes
    - config.py:     profiles and JSON config
    - host.py:       editor-facing session + register panel rows
"""

__version__ = "0.1.0"

from .errors import SimulatorError, OperandError, ConfigError
from .decoder import decode, strip_comment, split_label
from .registers import RegisterFile, RegisterSnapshot, REGISTER_TABLE, format_value
from .config import SimConfig, HostConfig, SIM_PROFILES, load_config
from .machine import RegisterMachine, RegisterChange, SymbolTable
from .host import BufferSession, register_tree, is_recognized


def simulate(source: str, target_line: int, *, profile: str = "default"):
    """One-shot helper: registers after ``target_line`` of ``source``."""
    machine = RegisterMachine(SimConfig.from_profile(profile))
    return machine.parse_to_line(source, target_line)
