from __future__ import annotations

from typing import Iterable

from url_query_cleaner.models import CleanResult


def summarize_removed(results: Iterable[CleanResult]) -> dict[str, int]:
    removed: dict[str, int] = {}
    for result in results:
        for name in result.removed_names:
            removed[name] = removed.get(name, 0) + 1
    return removed
