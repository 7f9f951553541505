"""
Lightweight readers/writers for the proof table export and the audit log file.

Table exports come from the sheet's lookup range as either CSV
(``proof,factor`` with an optional header row; ``;``-separated exports with
decimal commas are accepted too) or JSON (an object of proof -> factor, or a
list of pairs / ``{"proof": .., "factor": ..}`` records).
"""
from __future__ import annotations

import csv
import json
import logging
import os
import tempfile
from typing import Any, List, Sequence, Tuple

from pydantic import TypeAdapter, ValidationError

from .errors import LoadError
from .schemas import LogEntry

logger = logging.getLogger(__name__)

_LOG_ADAPTER = TypeAdapter(List[LogEntry])


def _norm_number(s: str) -> str:
    return s.strip().replace("\u00A0", "").replace(" ", "").replace(",", ".")


def _is_header(row: Sequence[str]) -> bool:
    try:
        float(_norm_number(row[0]))
    except ValueError:
        return True
    return False


def parse_table_csv(text: str) -> List[Tuple[str, str]]:
    lines = [ln for ln in text.splitlines() if ln.strip() and not ln.lstrip().startswith("#")]
    if not lines:
        return []
    delimiter = ";" if ";" in lines[0] else ","
    rows = list(csv.reader(lines, delimiter=delimiter))
    if _is_header(rows[0]):
        rows = rows[1:]
    pairs: List[Tuple[str, str]] = []
    for n, row in enumerate(rows, start=1):
        cells = [c for c in row if c.strip()]
        if len(cells) < 2:
            raise LoadError(f"Malformed table row {n} (need proof and factor): {row!r}")
        key, factor = cells[0], cells[1]
        if delimiter == ";":
            key, factor = _norm_number(key), _norm_number(factor)
        pairs.append((key.strip(), factor.strip()))
    return pairs


def parse_table_json(text: str) -> List[Tuple[Any, Any]]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LoadError(f"Invalid JSON proof table: {e}") from e
    if isinstance(data, dict):
        return list(data.items())
    if isinstance(data, list):
        pairs: List[Tuple[Any, Any]] = []
        for n, item in enumerate(data):
            if isinstance(item, dict):
                if "proof" not in item or "factor" not in item:
                    raise LoadError(f"JSON record {n} needs 'proof' and 'factor' keys")
                pairs.append((item["proof"], item["factor"]))
            elif isinstance(item, (list, tuple)) and len(item) == 2:
                pairs.append((item[0], item[1]))
            else:
                raise LoadError(f"Malformed JSON table entry {n}: {item!r}")
        return pairs
    raise LoadError("JSON proof table must be an object or a list")


def read_table_file(path: str) -> List[Tuple[Any, Any]]:
    ext = os.path.splitext(path)[1].lower()
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            text = f.read()
    except OSError as e:
        raise LoadError(f"Cannot read proof table {path!r}: {e}") from e
    if ext == ".json":
        return parse_table_json(text)
    if ext in (".csv", ".txt", ""):
        return parse_table_csv(text)
    raise LoadError(f"Unsupported proof table extension: {ext} (use .csv or .json)")


def dump_log(entries: Sequence[LogEntry]) -> str:
    return _LOG_ADAPTER.dump_json(list(entries), indent=2).decode("utf-8")


def parse_log(text: str) -> List[LogEntry]:
    if not text.strip():
        return []
    try:
        return _LOG_ADAPTER.validate_json(text)
    except ValidationError as e:
        raise ValueError(f"Invalid log file: {e}") from e


def save_log(path: str, entries: Sequence[LogEntry]) -> None:
    """Write the entries as a JSON array, replacing ``path`` in one step."""
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp = tempfile.mkstemp(dir=directory, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(dump_log(entries))
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise


def load_log(path: str) -> List[LogEntry]:
    """Read a log file written by ``save_log``.

    A missing or unreadable file is an empty log; the bad file is left in
    place until the next save replaces it.
    """
    if not os.path.exists(path):
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            return parse_log(f.read())
    except ValueError as e:
        logger.warning("Ignoring unreadable log file %s: %s", path, e)
        return []
