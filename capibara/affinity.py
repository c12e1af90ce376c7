"""Run-scoped aggregation of OS affinity tags per header."""

from __future__ import annotations

from typing import Dict, Iterable, List


class AffinityAggregator:
    """Maps a header ref to the first-seen union of its entities' OS tags.

    Every entity pass merges into the aggregator; the header pass reads from it.
    :meth:`seal` marks the barrier between the two, after which merging is an
    error because header affinities may already have been read.
    """

    def __init__(self) -> None:
        self._affinities: Dict[str, List[str]] = {}
        self._sealed = False

    def merge(self, header_ref: str, tags: Iterable[str]) -> None:
        if self._sealed:
            raise RuntimeError(
                f"Affinity for {header_ref!r} merged after header discovery started"
            )
        known = self._affinities.setdefault(header_ref, [])
        for tag in tags:
            if tag not in known:
                known.append(tag)

    def affinity_for(self, header_ref: str) -> List[str]:
        return list(self._affinities.get(header_ref, []))

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def snapshot(self) -> Dict[str, List[str]]:
        return {ref: list(tags) for ref, tags in self._affinities.items()}


__all__ = ["AffinityAggregator"]
