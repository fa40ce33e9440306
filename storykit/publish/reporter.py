"""
Publish Reporting

Collects the per-object outcome of a publish or sync run and logs it.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from loguru import logger

STATES = ("create", "update", "delete", "cache", "skip", "exists")


@dataclass(frozen=True)
class PublishEvent:
    key: str
    state: str


@dataclass
class PublishReport:
    """Outcome of one publish task."""

    target: str = ""
    simulate: bool = False
    events: list[PublishEvent] = field(default_factory=list)

    def add(self, event: PublishEvent) -> None:
        self.events.append(event)
        prefix = "[simulate] " if self.simulate else ""
        logger.info("{}[{:<7}] {}", prefix, event.state, event.key)

    def consume(self, events: Iterable[PublishEvent]) -> "PublishReport":
        for event in events:
            self.add(event)
        return self

    @property
    def counts(self) -> dict[str, int]:
        tally = Counter(event.state for event in self.events)
        return {state: tally.get(state, 0) for state in STATES}

    def keys(self, state: str) -> list[str]:
        return [event.key for event in self.events if event.state == state]

    @property
    def written(self) -> int:
        counts = self.counts
        return counts["create"] + counts["update"] + counts["delete"]

    def log_summary(self) -> None:
        summary = ", ".join(f"{state}={count}" for state, count in self.counts.items() if count)
        logger.info("{}: {}", self.target or "publish", summary or "nothing to do")


__all__ = ["PublishEvent", "PublishReport", "STATES"]
