"""
Per-line snapshot cache for the register machine.

After executing line N the machine may store a full copy of its state
here. A later request for line M >= N restarts from the nearest stored
line instead of from reset.

Invalidation is wholesale: the cache is bound to the SHA-1 of the source
text it was filled from, and any other text clears every entry. Entries
are never patched individually.
"""

from __future__ import annotations
from bisect import bisect_right, insort
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import hashlib
import logging

from .registers import RegisterFile

__all__ = ['Snapshot', 'SnapshotCache', 'source_digest']

log = logging.getLogger(__name__)


def source_digest(source: str) -> str:
    return hashlib.sha1(source.encode('utf-8', 'surrogatepass')).hexdigest()


@dataclass(frozen=True)
class Snapshot:
    """Machine state right after ``line`` (1-indexed) executed."""
    line: int
    registers: RegisterFile
    changes: Tuple = ()
    diagnostics: Tuple[str, ...] = ()


class SnapshotCache:

    def __init__(self):
        self._digest: Optional[str] = None
        self._entries: Dict[int, Snapshot] = {}
        self._lines: List[int] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, line: int) -> bool:
        return line in self._entries

    @property
    def digest(self) -> Optional[str]:
        return self._digest

    def sync(self, source: str) -> bool:
        """Bind the cache to ``source``. Returns True if entries were dropped."""
        digest = source_digest(source)
        if digest == self._digest:
            return False
        dropped = bool(self._entries)
        self.clear()
        self._digest = digest
        if dropped:
            log.debug("Snapshot cache invalidated (source %s)", digest[:12])
        return dropped

    def store(self, line: int, registers: RegisterFile, changes=(), diagnostics=()):
        if line not in self._entries:
            insort(self._lines, line)
        self._entries[line] = Snapshot(line, registers.copy(),
                                       tuple(changes), tuple(diagnostics))

    def nearest(self, line: int) -> Optional[Snapshot]:
        """The stored snapshot with the largest line number <= ``line``."""
        idx = bisect_right(self._lines, line)
        if idx == 0:
            return None
        return self._entries[self._lines[idx - 1]]

    def clear(self):
        self._entries.clear()
        self._lines.clear()
        self._digest = None
