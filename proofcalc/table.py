"""
Proof table: truncated proof (tenths) -> PG conversion factor.

The table is loaded once from an external static source (the sheet's lookup
range, exported as CSV or JSON) and is read-only afterwards. A miss is a
terminal error for the request: no interpolation, no nearest-neighbour.
"""
from __future__ import annotations

import logging
import math
import os
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Tuple, Union

from .errors import LoadError, ProofNotFound
from .proof import ProofKey

logger = logging.getLogger(__name__)

KeyLike = Union[ProofKey, str, int, float]


class ProofTable(Mapping[ProofKey, float]):
    """Immutable mapping of ``ProofKey`` to conversion factor."""

    __slots__ = ("_factors",)

    def __init__(self, factors: Mapping[ProofKey, float]):
        self._factors = MappingProxyType(dict(factors))

    def __getitem__(self, key: KeyLike) -> float:
        return self._factors[self._coerce(key)]

    def __iter__(self) -> Iterator[ProofKey]:
        return iter(self._factors)

    def __len__(self) -> int:
        return len(self._factors)

    def __contains__(self, key: object) -> bool:
        try:
            return self._coerce(key) in self._factors  # type: ignore[arg-type]
        except ValueError:
            return False

    def __repr__(self) -> str:
        return f"ProofTable({len(self)} entries)"

    @staticmethod
    def _coerce(key: KeyLike) -> ProofKey:
        if isinstance(key, ProofKey):
            return key
        try:
            return ProofKey.parse(key)
        except Exception as e:
            raise ValueError(f"invalid proof key: {key!r}") from e

    def lookup(self, key: KeyLike) -> float:
        """Return the conversion factor for ``key`` or raise ``ProofNotFound``."""
        try:
            k = self._coerce(key)
        except ValueError:
            raise ProofNotFound(str(key)) from None
        try:
            factor = self._factors[k]
        except KeyError:
            raise ProofNotFound(str(k)) from None
        logger.debug("proof %s -> conversion factor %r", k, factor)
        return factor

    def as_dict(self) -> Dict[str, float]:
        """External string-keyed form, in key order."""
        return {str(k): self._factors[k] for k in sorted(self._factors)}


def _pairs(source: Any) -> Iterable[Tuple[Any, Any]]:
    if isinstance(source, Mapping):
        return source.items()
    return source


def build_table(pairs: Iterable[Tuple[Any, Any]]) -> ProofTable:
    """Build a table from raw key/factor pairs, rejecting duplicates and bad values."""
    factors: Dict[ProofKey, float] = {}
    for i, pair in enumerate(pairs):
        try:
            raw_key, raw_factor = pair
        except (TypeError, ValueError) as e:
            raise LoadError(f"entry {i}: expected a (proof, factor) pair, got {pair!r}") from e
        try:
            key = ProofKey.parse(raw_key)
        except Exception as e:
            raise LoadError(f"entry {i}: invalid proof key {raw_key!r}") from e
        try:
            factor = float(raw_factor)
        except (TypeError, ValueError) as e:
            raise LoadError(f"entry {i}: invalid conversion factor {raw_factor!r}") from e
        if not math.isfinite(factor):
            raise LoadError(f"entry {i}: conversion factor must be finite, got {raw_factor!r}")
        if key in factors:
            raise LoadError(f"duplicate proof key {key} (entry {i})")
        factors[key] = factor
    if not factors:
        raise LoadError("proof table source is empty")
    return ProofTable(factors)


def load_proof_table(source: Any) -> ProofTable:
    """Load a proof table.

    ``source`` may be a mapping (key -> factor), an iterable of pairs, or a path
    to a ``.csv`` / ``.json`` file. Any failure is reported as ``LoadError``.
    """
    if isinstance(source, ProofTable):
        return source
    if isinstance(source, (str, os.PathLike)):
        from .io import read_table_file

        pairs = read_table_file(os.fspath(source))
        table = build_table(pairs)
        logger.info("loaded proof table from %s (%d entries)", os.fspath(source), len(table))
        return table
    if source is None:
        raise LoadError("no proof table source given")
    try:
        pairs = list(_pairs(source))
    except TypeError as e:
        raise LoadError(f"unsupported proof table source: {type(source).__name__}") from e
    return build_table(pairs)
