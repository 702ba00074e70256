"""
Run report models.

Standardizes the output of one sync run for the caller and the logs.
"""

import enum
from dataclasses import dataclass, field
from typing import List, Optional


class RunStatus(str, enum.Enum):
    COMPLETED = "completed"
    STORE_UNAVAILABLE = "store_unavailable"
    OVERLAP = "overlap"
    DEADLINE_EXCEEDED = "deadline_exceeded"


class CollectionOutcome(str, enum.Enum):
    """Terminal state of a single collection pipeline."""

    SKIPPED = "skipped"
    UNCHANGED = "unchanged"
    CHANGED = "changed"
    ERRORED = "errored"


@dataclass
class RunReport:
    """
    Aggregated result of a sync run.

    `processed` holds every collection that reached Done, `changed` is the
    subset whose artifacts were rewritten.
    """

    status: RunStatus = RunStatus.COMPLETED
    processed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    changed: List[str] = field(default_factory=list)
    errored: List[str] = field(default_factory=list)
    signals_raised: int = 0
    started_at: float = 0.0
    finished_at: Optional[float] = None

    def record(self, name: str, outcome: CollectionOutcome, signal_raised: bool = False) -> None:
        if outcome is CollectionOutcome.SKIPPED:
            self.skipped.append(name)
        elif outcome is CollectionOutcome.ERRORED:
            self.errored.append(name)
        else:
            self.processed.append(name)
            if outcome is CollectionOutcome.CHANGED:
                self.changed.append(name)
        if signal_raised:
            self.signals_raised += 1

    @property
    def duration(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return self.finished_at - self.started_at

    def summary(self) -> str:
        return (
            f"status={self.status.value} processed={len(self.processed)} "
            f"skipped={len(self.skipped)} changed={len(self.changed)} "
            f"errored={len(self.errored)} signals={self.signals_raised}"
        )
