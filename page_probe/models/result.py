"""Models for scenario execution results."""

import traceback
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

ScenarioStatus = Literal["passed", "failed", "timed_out", "errored"]

STATUSES: tuple[ScenarioStatus, ...] = ("passed", "failed", "timed_out", "errored")


@dataclass(frozen=True, kw_only=True)
class ScenarioError:
    """Diagnostic captured from a scenario that did not pass."""

    type: str
    message: str
    stack: str | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ScenarioError":
        """Capture type, message and formatted stack of an exception."""
        return cls(
            type=type(exc).__name__,
            message=str(exc) or type(exc).__name__,
            stack="".join(traceback.format_exception(exc)),
        )


@dataclass(frozen=True, kw_only=True)
class ScenarioResult:
    """Outcome of a single scenario execution.

    Only ``duration_ms`` is meaningful for a ``timed_out`` result.
    """

    suite_name: str
    scenario_name: str
    status: ScenarioStatus
    duration_ms: float
    data: Mapping[str, Any] = field(default_factory=dict)
    error: ScenarioError | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "suite": self.suite_name,
            "scenario": self.scenario_name,
            "status": self.status,
            "duration_ms": round(self.duration_ms, 1),
            "data": dict(self.data),
            "error": (
                None
                if self.error is None
                else {
                    "type": self.error.type,
                    "message": self.error.message,
                    "stack": self.error.stack,
                }
            ),
        }
