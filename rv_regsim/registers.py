"""
Register File — the 33 architectural registers of the simulated RV64 core.

Register model:
  x0        zero   hard-wired 0; writes are discarded
  x1        ra     return address (caller-saved)
  x2..x4    sp gp tp
  x5..x7    t0..t2
  x8..x9    s0 s1  (s0 is also fp)
  x10..x17  a0..a7
  x18..x27  s2..s11
  x28..x31  t3..t6
  pc        program counter

Categories:
  special — hard-wired or fixed ABI role: zero, sp, gp, tp, pc
  save    — callee-saved: s0..s11
  temp    — caller-saved / temporaries: ra, t*, a*

Values are exact-width unsigned ints. A register can also hold a symbolic
value (a str) when the instruction that wrote it named something the
machine could not resolve to a number, e.g. ``CALL foo`` with no label
``foo``. Symbolic values are displayed verbatim.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union
import re

__all__ = ['Value', 'RegisterState', 'RegisterSnapshot', 'RegisterFile',
           'REGISTER_TABLE', 'SPECIAL', 'SAVE', 'TEMP', 'format_value',
           'parse_literal']

Value = Union[int, str]

SPECIAL = 'special'
SAVE = 'save'
TEMP = 'temp'

DEFAULT_BITS = 64

_LITERAL_RE = re.compile(r"([+-]?)(0[xX][0-9a-fA-F]+|0[bB][01]+|0[oO][0-7]+|[0-9]+)")
_LITERAL_BASES = {"0x": 16, "0b": 2, "0o": 8}

# (canonical name, numeric alias, category), in display order
REGISTER_TABLE: Tuple[Tuple[str, str, str], ...] = (
    ('zero', 'x0',  SPECIAL),
    ('ra',   'x1',  TEMP),
    ('sp',   'x2',  SPECIAL),
    ('gp',   'x3',  SPECIAL),
    ('tp',   'x4',  SPECIAL),
    ('t0',   'x5',  TEMP),
    ('t1',   'x6',  TEMP),
    ('t2',   'x7',  TEMP),
    ('s0',   'x8',  SAVE),
    ('s1',   'x9',  SAVE),
    ('a0',   'x10', TEMP),
    ('a1',   'x11', TEMP),
    ('a2',   'x12', TEMP),
    ('a3',   'x13', TEMP),
    ('a4',   'x14', TEMP),
    ('a5',   'x15', TEMP),
    ('a6',   'x16', TEMP),
    ('a7',   'x17', TEMP),
    ('s2',   'x18', SAVE),
    ('s3',   'x19', SAVE),
    ('s4',   'x20', SAVE),
    ('s5',   'x21', SAVE),
    ('s6',   'x22', SAVE),
    ('s7',   'x23', SAVE),
    ('s8',   'x24', SAVE),
    ('s9',   'x25', SAVE),
    ('s10',  'x26', SAVE),
    ('s11',  'x27', SAVE),
    ('t3',   'x28', TEMP),
    ('t4',   'x29', TEMP),
    ('t5',   'x30', TEMP),
    ('t6',   'x31', TEMP),
    ('pc',   'pc',  SPECIAL),
)

# Extra spellings accepted in operands
_EXTRA_ALIASES = {'fp': 's0'}


def format_value(value: Value, bits: int = DEFAULT_BITS) -> str:
    """Render a register value: 0x + hex zero-padded to the bit width.

    Symbolic values come back unchanged.
    """
    if isinstance(value, str):
        return value
    digits = (bits + 3) // 4
    return f"0x{value & ((1 << bits) - 1):0{digits}x}"


def parse_literal(text: str, bits: int = DEFAULT_BITS) -> Optional[int]:
    """Parse a numeric literal and mask it to ``bits``.

    Supports: 0x1F (hex), 0b101 (binary), 0o17 (octal), 42 (decimal),
    -1 (two's complement). Returns None when ``text`` is not a number.
    A sign is only accepted in front of the prefix, and digit
    separators ('_') are not accepted at all.
    """
    m = _LITERAL_RE.fullmatch(text.strip())
    if m is None:
        return None
    sign, digits = m.group(1), m.group(2)
    base = _LITERAL_BASES.get(digits[:2].lower())
    value = int(digits[2:], base) if base else int(digits, 10)
    if sign == '-':
        value = -value
    return value & ((1 << bits) - 1)


@dataclass
class RegisterState:
    """Mutable per-register state owned by a RegisterFile."""
    name: str
    alias: str
    bits: int
    category: str
    value: Value = 0
    changed: bool = False
    previous_values: List[Value] = field(default_factory=list)

    @property
    def display(self) -> str:
        return format_value(self.value, self.bits)


@dataclass(frozen=True)
class RegisterSnapshot:
    """Read-only record handed to callers."""
    name: str
    alias: str
    bits: int
    category: str
    value: str
    changed: bool
    history: Tuple[str, ...] = ()
    symbolic: bool = False


class RegisterFile:
    """The fixed set of 33 registers.

    Usage:
        regs = RegisterFile()
        regs.write('a0', 5)
        regs.read('x10')        # -> 5
        regs.view()['a0'].value # -> '0x0000000000000005'
    """

    ZERO = 'zero'
    PC = 'pc'

    def __init__(self, bits: int = DEFAULT_BITS):
        self.bits = bits
        self._regs: Dict[str, RegisterState] = {}
        self._names: Dict[str, str] = {}
        for name, alias, category in REGISTER_TABLE:
            self._regs[name] = RegisterState(name, alias, bits, category)
            self._names[name] = name
            self._names[alias] = name
        for extra, name in _EXTRA_ALIASES.items():
            self._names[extra] = name

    def __len__(self) -> int:
        return len(self._regs)

    def __iter__(self) -> Iterator[RegisterState]:
        return iter(self._regs.values())

    def __eq__(self, other) -> bool:
        if not isinstance(other, RegisterFile):
            return NotImplemented
        return self._regs == other._regs

    def resolve(self, name: str) -> Optional[str]:
        """Canonical name for an ABI name or xN alias, or None if unknown."""
        return self._names.get(name.strip().lower())

    def __contains__(self, name: str) -> bool:
        return self.resolve(name) is not None

    def get(self, name: str) -> Optional[RegisterState]:
        canonical = self.resolve(name)
        return self._regs[canonical] if canonical else None

    def read(self, name: str) -> Value:
        """Current value. ``zero`` always reads 0."""
        canonical = self.resolve(name)
        if canonical is None:
            raise KeyError(name)
        if canonical == self.ZERO:
            return 0
        return self._regs[canonical].value

    def write(self, name: str, value: Value) -> bool:
        """Store ``value``, logging the old one and setting ``changed``.

        Ints are masked to the register width. Returns False (and does
        nothing) for writes to ``zero``.
        """
        canonical = self.resolve(name)
        if canonical is None:
            raise KeyError(name)
        if canonical == self.ZERO:
            return False
        reg = self._regs[canonical]
        if isinstance(value, int):
            value &= (1 << reg.bits) - 1
        reg.previous_values.append(reg.value)
        reg.value = value
        reg.changed = True
        return True

    def reset(self):
        """Power-on state: every register 0, no change tracking."""
        for reg in self._regs.values():
            reg.value = 0
            reg.changed = False
            reg.previous_values = []

    def copy(self) -> 'RegisterFile':
        """Deep copy (values, flags and change logs)."""
        clone = RegisterFile(self.bits)
        for name, reg in self._regs.items():
            dst = clone._regs[name]
            dst.value = reg.value
            dst.changed = reg.changed
            dst.previous_values = list(reg.previous_values)
        return clone

    def restore(self, other: 'RegisterFile'):
        """Overwrite this file's state with ``other``'s."""
        for name, reg in other._regs.items():
            dst = self._regs[name]
            dst.value = reg.value
            dst.changed = reg.changed
            dst.previous_values = list(reg.previous_values)

    def changed_names(self) -> List[str]:
        return [r.name for r in self._regs.values() if r.changed]

    def view(self) -> Mapping[str, RegisterSnapshot]:
        """Read-only mapping of canonical name -> RegisterSnapshot."""
        return MappingProxyType({
            name: RegisterSnapshot(
                name=reg.name,
                alias=reg.alias,
                bits=reg.bits,
                category=reg.category,
                value=reg.display,
                changed=reg.changed,
                history=tuple(format_value(v, reg.bits) for v in reg.previous_values),
                symbolic=isinstance(reg.value, str),
            )
            for name, reg in self._regs.items()
        })

    def display(self) -> str:
        """One line per register, for debugging and the CLI."""
        lines = []
        for reg in self._regs.values():
            mark = '*' if reg.changed else ' '
            lines.append(f"{mark} {reg.name:<5s} ({reg.alias:>3s}) {reg.display}")
        return '\n'.join(lines)
