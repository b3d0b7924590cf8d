from __future__ import annotations

from typing import Iterable


def coerce_bool(value: bool | str | int) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes", "y", "on"}:
            return True
        if normalized in {"false", "0", "no", "n", "off"}:
            return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def parse_names_csv(value: str | Iterable[str] | None) -> list[str]:
    """Parse parameter names from a comma-separated string or a list of strings.

    Names are stripped and de-duplicated in order. Matching is case-sensitive,
    so ``Ref`` and ``ref`` are both kept.
    """
    if not value:
        return []

    if isinstance(value, str):
        raw_names: Iterable[str] = value.split(",")
    else:
        raw_names = (part for item in value for part in str(item).split(","))
    return unique_ordered(name.strip() for name in raw_names if name.strip())


def unique_ordered(values: Iterable[str]) -> list[str]:
    """Return de-duplicated values while preserving order."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result
