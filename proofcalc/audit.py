"""
Append-only audit log of completed calculations.

Entries are immutable ``LogEntry`` records kept in insertion order; display
order (newest first, as the front end shows it) is derived on read. One lock
serializes appends and clears, and every read returns a snapshot tuple.
"""
from __future__ import annotations

import threading
from typing import Iterable, List, Optional, Tuple

from .formatting import FormatKind, format_value
from .schemas import LogEntry

# Spreadsheet cell labels, per mode: (label, source, key, kind)
_LAYOUT = {
    "top": [
        ("Weight (B2):     ", "inputs", "weight", None),
        ("Proof (B4):      ", "inputs", "proof", None),
        ("PG Conv (B5):    ", "outputs", "conversion_factor", FormatKind.CONVERSION_FACTOR),
        ("2nd H2O (B6):    ", "outputs", "water_to_add", FormatKind.WATER_VOLUME),
        ("2nd Weight (B8): ", "outputs", "new_weight", FormatKind.WEIGHT),
    ],
    "bottom": [
        ("Dist Weight (B13):", "inputs", "dist_weight", None),
        ("Dist PF (B15):    ", "inputs", "dist_proof", None),
        ("PG Conv (B16):    ", "outputs", "conversion_factor", FormatKind.CONVERSION_FACTOR),
        ("1st H2O (B17):    ", "outputs", "water_to_add", FormatKind.WATER_VOLUME),
    ],
    "variable": [
        ("Weight:          ", "inputs", "weight", None),
        ("Current Proof:   ", "inputs", "current_proof", None),
        ("Target Proof:    ", "inputs", "target_proof", None),
        ("PG Conv:         ", "outputs", "conversion_factor", FormatKind.CONVERSION_FACTOR),
        ("Target PG Conv:  ", "outputs", "target_conversion_factor", FormatKind.CONVERSION_FACTOR),
        ("H2O:             ", "outputs", "water_to_add", FormatKind.WATER_VOLUME),
        ("New Weight:      ", "outputs", "new_weight", FormatKind.WEIGHT),
    ],
}


class AuditLog:
    def __init__(self, entries: Iterable[LogEntry] = (), max_entries: Optional[int] = None):
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be > 0 or None")
        self._lock = threading.Lock()
        self._entries: List[LogEntry] = list(entries)
        self.max_entries = max_entries
        self._trim()

    def _trim(self) -> None:
        if self.max_entries is not None and len(self._entries) > self.max_entries:
            del self._entries[: len(self._entries) - self.max_entries]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def append(self, entry: LogEntry) -> LogEntry:
        if not isinstance(entry, LogEntry):
            raise TypeError(f"expected LogEntry, got {type(entry).__name__}")
        with self._lock:
            self._entries.append(entry)
            self._trim()
        return entry

    def list_for(self, operator_id: Optional[str] = None) -> Tuple[LogEntry, ...]:
        """Snapshot in insertion order; ``None`` lists every operator."""
        with self._lock:
            snapshot = tuple(self._entries)
        if operator_id is None:
            return snapshot
        return tuple(e for e in snapshot if e.operator_id == operator_id)

    def newest_first(self, operator_id: Optional[str] = None) -> Tuple[LogEntry, ...]:
        return tuple(reversed(self.list_for(operator_id)))

    def clear(self, operator_id: Optional[str] = None) -> int:
        """Remove every entry (or only ``operator_id``'s). Returns the number removed."""
        with self._lock:
            before = len(self._entries)
            if operator_id is None:
                self._entries = []
            else:
                self._entries = [e for e in self._entries if e.operator_id != operator_id]
            return before - len(self._entries)


def _cell(entry: LogEntry, source: str, key: str, kind: Optional[FormatKind]) -> str:
    if source == "inputs":
        return entry.inputs.get(key, "")
    value = entry.outputs.get(key)
    if value is None:
        return ""
    return format_value(value, kind) if kind is not None else repr(value)


def render_log(entries: Iterable[LogEntry]) -> str:
    """Text listing of entries, numbered from 1 in the order given."""
    entries = list(entries)
    if not entries:
        return "(no entries yet)"
    blocks = []
    for idx, entry in enumerate(entries, start=1):
        header = f"#{idx} [{entry.mode.upper()}] {entry.timestamp.isoformat()}"
        if entry.operator_id:
            header += f" ({entry.operator_id})"
        lines = [header]
        for label, source, key, kind in _LAYOUT[entry.mode]:
            lines.append(f"  {label} {_cell(entry, source, key, kind)}".rstrip())
        blocks.append("\n".join(lines) + "\n")
    return "\n".join(blocks)
