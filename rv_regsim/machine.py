"""
Register Machine — runs assembly source up to a line and reports registers.

How a run works:
  Symbol pass:    Scan every line. A leading 'name:' becomes a label whose
                  address is the line's slot x 4 bytes; '.equ NAME, value'
                  becomes a constant. Rebuilt from scratch on every call.
  Execution pass: Start from the power-on register file (or from the
                  nearest cached snapshot of the same source text) and
                  execute lines 1..target in order.

Supported instructions:
  LI   rd, imm     rd <- imm
  MV   rd, rs      rd <- rs
  RET              pc <- ra
  CALL target      ra <- pc + 4, pc <- target

Everything else is ignored. Bad operands (wrong count, unknown register,
empty value) skip the whole instruction and leave a message in
``diagnostics``; nothing is raised to the caller.

One machine is one editing session. Machines share no state, so separate
buffers (or threads) each get their own instance.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional
import logging

from .cache import SnapshotCache
from .config import PHYSICAL, SimConfig
from .decoder import decode, is_comment_or_blank, split_label
from .errors import OperandError
from .registers import RegisterFile, RegisterSnapshot, Value, format_value, parse_literal

__all__ = ['RegisterMachine', 'RegisterChange', 'SymbolTable', 'EQU_DIRECTIVES']

log = logging.getLogger(__name__)

EQU_DIRECTIVES = ('.EQU', '.SET')

# ──────────────────────────────────────────────
# Run records
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class RegisterChange:
    """One register write during the current run."""
    line: int
    register: str
    value: str
    previous: str


@dataclass
class SymbolTable:
    """Labels (name -> '0x%08x' address) and .equ constants (name -> text)."""
    labels: Dict[str, str] = field(default_factory=dict)
    constants: Dict[str, str] = field(default_factory=dict)

    def clear(self):
        self.labels.clear()
        self.constants.clear()

    def address_of(self, name: str) -> Optional[int]:
        addr = self.labels.get(name)
        return int(addr, 16) if addr is not None else None

    def constant(self, name: str) -> Optional[str]:
        return self.constants.get(name)


# ──────────────────────────────────────────────
# The machine
# ──────────────────────────────────────────────

class RegisterMachine:
    """Register-state simulator for one assembly buffer.

    Usage:
        m = RegisterMachine()
        regs = m.parse_to_line(source_text, cursor_line)
        regs['a0'].value     # '0x0000000000000005'
        regs['a0'].changed   # True
    """

    def __init__(self, config: Optional[SimConfig] = None):
        self.config = config or SimConfig()
        self.registers = RegisterFile(self.config.register_bits)
        self.symbols = SymbolTable()
        self.changes: List[RegisterChange] = []   # writes in the current run
        self.diagnostics: List[str] = []          # skipped-instruction messages
        self._cache = SnapshotCache()
        self._mask = (1 << self.config.register_bits) - 1
        self._dispatch: Dict[str, Callable[[List[str], int], None]] = self._build_dispatch()

    def _build_dispatch(self) -> dict:
        return {
            'LI':   self._op_li,
            'MV':   self._op_mv,
            'RET':  self._op_ret,
            'CALL': self._op_call,
        }

    @property
    def supported_mnemonics(self):
        return tuple(self._dispatch)

    # ══════════════════════════════════════════════
    # Public operations
    # ══════════════════════════════════════════════

    def reset(self):
        """Power-on registers, empty symbol table, no change tracking."""
        self.registers.reset()
        self.symbols.clear()
        self.changes = []
        self.diagnostics = []
        self._cache.clear()

    def parse_to_line(self, source: str, target_line: int) -> Mapping[str, RegisterSnapshot]:
        """Registers after executing lines 1..target_line of ``source``.

        target_line is 1-indexed and clamped to the file: 0 (or less)
        executes nothing, anything past the last line runs the whole file.
        """
        lines = source.split('\n')
        target = max(0, min(int(target_line), len(lines)))

        self.build_symbols(lines)

        start = 0
        snapshot = None
        if self.config.cache_enabled:
            self._cache.sync(source)
            snapshot = self._cache.nearest(target)

        if snapshot is not None:
            self.registers.restore(snapshot.registers)
            self.changes = list(snapshot.changes)
            self.diagnostics = list(snapshot.diagnostics)
            start = snapshot.line
        else:
            self.registers.reset()
            self.changes = []
            self.diagnostics = []

        log.debug("Run to line %d of %d (resume from line %d)", target, len(lines), start)

        interval = self.config.snapshot_interval
        for idx in range(start, target):
            line_num = idx + 1
            self.execute_line(lines[idx], line_num)
            if self.config.cache_enabled and (line_num % interval == 0 or line_num == target):
                self._cache.store(line_num, self.registers, self.changes, self.diagnostics)

        return self.get_register_states()

    def get_register_states(self) -> Mapping[str, RegisterSnapshot]:
        """Read-only view of the current register file."""
        return self.registers.view()

    def execute_line(self, line: str, line_num: int = 0) -> bool:
        """Apply one source line to the current state.

        Returns True if an instruction executed, False if the line was
        blank, a comment, a label/directive, unsupported or malformed.
        """
        _, rest = split_label(line)
        if not rest:
            return False
        decoded = decode(rest)
        if decoded is None:
            return False

        mnemonic, operands = decoded
        handler = self._dispatch.get(mnemonic)
        if handler is None:
            return False

        try:
            handler(operands, line_num)
        except OperandError as e:
            self.diagnostics.append(str(e))
            log.debug("Skipped: %s", e)
            return False
        return True

    def history(self, register: Optional[str] = None) -> List[RegisterChange]:
        """Writes made in the current run, optionally for one register."""
        if register is None:
            return list(self.changes)
        canonical = self.registers.resolve(register)
        return [c for c in self.changes if c.register == canonical]

    # ══════════════════════════════════════════════
    # Symbol pass
    # ══════════════════════════════════════════════

    def build_symbols(self, lines: List[str]):
        """Rebuild the label and constant tables from every line."""
        self.symbols.clear()
        step = self.config.instruction_bytes
        physical = self.config.label_addressing == PHYSICAL
        slot = 0

        for idx, line in enumerate(lines):
            if is_comment_or_blank(line):
                continue
            label, rest = split_label(line)

            if label:
                addr = (idx if physical else slot) * step
                if label in self.symbols.labels:
                    log.debug("Line %d: label '%s' redefined", idx + 1, label)
                self.symbols.labels[label] = f"0x{addr:08x}"

            decoded = decode(rest) if rest else None
            if decoded is None:
                continue
            mnemonic, operands = decoded
            if mnemonic in EQU_DIRECTIVES:
                if len(operands) == 2 and operands[0]:
                    self.symbols.constants[operands[0]] = operands[1]
            elif not mnemonic.startswith('.'):
                slot += 1

        log.debug("Symbols: %d label(s), %d constant(s)",
                  len(self.symbols.labels), len(self.symbols.constants))

    # ══════════════════════════════════════════════
    # Operand helpers
    # ══════════════════════════════════════════════

    @staticmethod
    def _expect(operands: List[str], count: int, mnemonic: str, line_num: int):
        if len(operands) != count:
            raise OperandError(f"{mnemonic}: expected {count} operand(s), "
                               f"got {len(operands)}", line_num)

    def _register(self, text: str, mnemonic: str, line_num: int) -> str:
        canonical = self.registers.resolve(text)
        if canonical is None:
            raise OperandError(f"{mnemonic}: unknown register '{text}'", line_num)
        return canonical

    def _immediate(self, text: str, line_num: int) -> Value:
        """LI operand: a literal, a .equ constant, or (unresolved) the text itself."""
        if not text:
            raise OperandError("LI: empty immediate", line_num)
        bits = self.config.register_bits
        value = parse_literal(text, bits)

        if value is None and self.config.resolve_constants:
            seen = set()
            name = text
            while value is None and name in self.symbols.constants and name not in seen:
                seen.add(name)
                name = self.symbols.constants[name]
                value = parse_literal(name, bits)

        if value is None:
            return text
        if self.config.truncate_li_immediate:
            value &= 0xFFF
            if value & 0x800:
                value -= 0x1000
            value &= self._mask
        return value

    def _target(self, text: str, line_num: int) -> Value:
        """CALL operand: a literal address, a label, or (unresolved) the text."""
        if not text:
            raise OperandError("CALL: empty target", line_num)
        value = parse_literal(text, self.config.register_bits)
        if value is None and self.config.resolve_labels:
            value = self.symbols.address_of(text)
        return text if value is None else value

    def _write(self, name: str, value: Value, line_num: int):
        reg = self.registers.get(name)
        previous = reg.display
        if self.registers.write(name, value):
            self.changes.append(RegisterChange(line_num, reg.name, reg.display, previous))
        else:
            log.debug("Line %d: write to %s discarded", line_num, reg.name)

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Each handler validates everything before its first write, so a
    # rejected instruction never leaves a partial update behind.

    def _op_li(self, ops: List[str], line_num: int):
        self._expect(ops, 2, 'LI', line_num)
        rd = self._register(ops[0], 'LI', line_num)
        value = self._immediate(ops[1], line_num)
        self._write(rd, value, line_num)

    def _op_mv(self, ops: List[str], line_num: int):
        self._expect(ops, 2, 'MV', line_num)
        rd = self._register(ops[0], 'MV', line_num)
        rs = self._register(ops[1], 'MV', line_num)
        self._write(rd, self.registers.read(rs), line_num)

    def _op_ret(self, ops: List[str], line_num: int):
        self._expect(ops, 0, 'RET', line_num)
        self._write(RegisterFile.PC, self.registers.read('ra'), line_num)

    def _op_call(self, ops: List[str], line_num: int):
        self._expect(ops, 1, 'CALL', line_num)
        target = self._target(ops[0], line_num)
        pc = self.registers.read(RegisterFile.PC)
        if isinstance(pc, str):
            raise OperandError(f"CALL: program counter holds unresolved '{pc}', "
                               f"cannot compute return address", line_num)
        return_addr = (pc + self.config.instruction_bytes) & self._mask
        self._write('ra', return_addr, line_num)
        self._write(RegisterFile.PC, target, line_num)

    def __repr__(self) -> str:
        changed = ', '.join(self.registers.changed_names()) or '-'
        return (f"<RegisterMachine profile={self.config.profile} "
                f"pc={format_value(self.registers.read('pc'), self.registers.bits)} "
                f"changed={changed}>")
