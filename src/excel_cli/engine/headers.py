"""Header normalization: stable, unique column names for row records."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TypeVar

from openpyxl.utils import get_column_letter

FALLBACK_PREFIX = "Col"

T = TypeVar("T")


def fallback_name(column: int) -> str:
    """Placeholder for a blank header: column 1 -> ColA, 27 -> ColAA."""
    return f"{FALLBACK_PREFIX}{get_column_letter(column)}"


def dedupe_headers(names: Iterable[str]) -> list[str]:
    """Suffix repeated names (case-insensitive) with ``_2``, ``_3``, ...

    First occurrences are kept as-is. A generated name never collides with
    any name already emitted, so the result is unique under casefolding.
    """
    taken: set[str] = set()
    counters: dict[str, int] = {}
    result: list[str] = []
    for name in names:
        key = name.casefold()
        if key not in taken:
            taken.add(key)
            result.append(name)
            continue
        n = counters.get(key, 1)
        while True:
            n += 1
            candidate = f"{name}_{n}"
            if candidate.casefold() not in taken:
                break
        counters[key] = n
        taken.add(candidate.casefold())
        result.append(candidate)
    return result


def normalize_headers(texts: Sequence[str], first_column: int = 1) -> list[str]:
    """Turn raw header texts into names, one per column of the span.

    ``first_column`` is the absolute 1-based column of ``texts[0]``; it
    drives the fallback name of blank headers.
    """
    names = [
        text if text.strip() else fallback_name(first_column + offset)
        for offset, text in enumerate(texts)
    ]
    return dedupe_headers(names)


def build_records(headers: Sequence[str], rows: Iterable[Sequence[T]]) -> list[dict[str, T]]:
    """Zip each row against the headers; cells past the shorter side are dropped."""
    return [dict(zip(headers, row)) for row in rows]
