from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class QueryParam:
    """One ``name[=value]`` segment of a query string.

    ``name`` and ``value`` are decoded; ``raw_name`` and ``raw_value`` hold the
    text as it appeared in the URL. ``value`` is ``None`` for a bare parameter.
    """

    name: str
    value: str | None = None
    raw_name: str = ""
    raw_value: str | None = None

    @property
    def is_bare(self) -> bool:
        return self.raw_value is None


@dataclass(frozen=True)
class CleanResult:
    original: str
    url: str
    kept: tuple[QueryParam, ...] = ()
    removed: tuple[QueryParam, ...] = ()

    @property
    def changed(self) -> bool:
        return self.url != self.original

    @property
    def removed_names(self) -> list[str]:
        return [param.name for param in self.removed]
