"""
Editor host boundary.

The simulator never watches documents itself. An editor integration feeds
it events through a BufferSession, one per open buffer:

    session = BufferSession()
    view = session.activate("boot.s", "riscv", text, cursor_line)
    view = session.cursor_moved(12)        # re-run to line 12
    view = session.text_changed(new_text)  # re-run at the same line
    rows = register_tree(view)             # what the register panel shows

Every trigger returns the fresh register view, or None when the buffer is
not an assembly file (unrecognized buffers are never simulated).
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import PurePath
from typing import List, Mapping, Optional, Tuple
import logging

from .config import HostConfig, SimConfig
from .machine import RegisterMachine
from .registers import SAVE, SPECIAL, TEMP, RegisterSnapshot

__all__ = ['BufferSession', 'RegisterRow', 'RegisterGroup', 'register_tree',
           'is_recognized']

log = logging.getLogger(__name__)

RegisterView = Mapping[str, RegisterSnapshot]


def is_recognized(path: Optional[str], language_id: Optional[str] = None,
                  host_config: Optional[HostConfig] = None) -> bool:
    """True if the host should simulate this buffer."""
    cfg = host_config or HostConfig()
    if language_id and language_id.lower() in cfg.language_ids:
        return True
    if path:
        return PurePath(path).suffix.lower() in cfg.extensions
    return False


class BufferSession:
    """Owns the RegisterMachine for one buffer and replays host events."""

    def __init__(self, config: Optional[SimConfig] = None,
                 host_config: Optional[HostConfig] = None):
        self.machine = RegisterMachine(config)
        self.host_config = host_config or HostConfig()
        self.path: Optional[str] = None
        self.language_id: Optional[str] = None
        self.text: str = ""
        self.line: int = 1
        self.recognized = False

    def activate(self, path: Optional[str], language_id: Optional[str],
                 text: str, line: int = 1) -> Optional[RegisterView]:
        """The buffer became the active editor."""
        self.path = path
        self.language_id = language_id
        self.text = text
        self.line = line
        self.recognized = is_recognized(path, language_id, self.host_config)
        return self._refresh()

    def text_changed(self, text: str) -> Optional[RegisterView]:
        self.text = text
        return self._refresh()

    def cursor_moved(self, line: int) -> Optional[RegisterView]:
        self.line = line
        return self._refresh()

    def language_changed(self, language_id: Optional[str]) -> Optional[RegisterView]:
        """Declared content type changed; resets first when configured to."""
        if language_id != self.language_id and self.host_config.auto_reset_on_language_change:
            log.debug("Language changed %s -> %s, resetting", self.language_id, language_id)
            self.machine.reset()
        self.language_id = language_id
        self.recognized = is_recognized(self.path, language_id, self.host_config)
        return self._refresh()

    def reset(self) -> RegisterView:
        """Host 'reset registers' command."""
        self.machine.reset()
        return self.machine.get_register_states()

    def _refresh(self) -> Optional[RegisterView]:
        if not self.recognized:
            return None
        return self.machine.parse_to_line(self.text, self.line)


# ──────────────────────────────────────────────
# Register panel rows
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class RegisterRow:
    label: str          # "a0"
    description: str    # "0x0000000000000005"
    tooltip: str        # "a0 (x10), 64-bit temp, previous: 0x...0"
    changed: bool


@dataclass(frozen=True)
class RegisterGroup:
    label: str
    rows: Tuple[RegisterRow, ...]


GROUP_ORDER = (SPECIAL, SAVE, TEMP)


def _row(snap: RegisterSnapshot) -> RegisterRow:
    tooltip = f"{snap.name} ({snap.alias}), {snap.bits}-bit {snap.category}"
    if snap.history:
        tooltip += f", previous: {snap.history[-1]}"
    return RegisterRow(snap.name, snap.value, tooltip, snap.changed)


def register_tree(view: RegisterView) -> List[RegisterGroup]:
    """Group registers by category, in register-file order within a group."""
    groups = []
    for category in GROUP_ORDER:
        rows = tuple(_row(s) for s in view.values() if s.category == category)
        groups.append(RegisterGroup(category, rows))
    return groups
