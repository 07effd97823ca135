"""Run report assembled from scenario results."""

from collections import Counter
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from page_probe.models.result import STATUSES, ScenarioResult, ScenarioStatus


def utcnow() -> datetime:
    """Return the current wall-clock time in UTC."""
    return datetime.now(timezone.utc)


def summarize(results: Iterable[ScenarioResult]) -> Mapping[ScenarioStatus, int]:
    """Count results per status, including statuses that never occurred."""
    counts = Counter(result.status for result in results)
    return {status: counts.get(status, 0) for status in STATUSES}


@dataclass(frozen=True, kw_only=True)
class Report:
    """Aggregate of all results of one run."""

    started_at: datetime
    finished_at: datetime
    results: Sequence[ScenarioResult]
    summary: Mapping[ScenarioStatus, int]

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "total": len(self.results),
            "summary": dict(self.summary),
            "results": [result.to_dict() for result in self.results],
        }


@dataclass(kw_only=True)
class ReportBuilder:
    """Collects results in completion order and finalizes them into a Report."""

    clock: Callable[[], datetime] = utcnow
    started_at: datetime = field(init=False)
    results: list[ScenarioResult] = field(init=False, default_factory=list)
    last_completed_at: datetime | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        self.started_at = self.clock()

    def add(self, result: ScenarioResult) -> None:
        """Append a completed result."""
        self.results.append(result)
        self.last_completed_at = self.clock()

    def extend(self, results: Iterable[ScenarioResult]) -> None:
        """Append several completed results."""
        for result in results:
            self.add(result)

    def finalize(self) -> Report:
        """Freeze the collected results into a Report."""
        results = tuple(self.results)
        return Report(
            started_at=self.started_at,
            finished_at=self.last_completed_at or self.started_at,
            results=results,
            summary=summarize(results),
        )
