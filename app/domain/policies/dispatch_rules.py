"""DispatchRules — tunable constants of the dispatch protocol."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_WORKLOAD_THRESHOLD = 10


@dataclass(frozen=True)
class DispatchRules:
    """Rules the engine applies on assignment and reassignment.

    Attributes:
        workload_threshold: number of ACTIVE assignments a technician may hold
            before an assignment result carries an advisory warning.
        reason_required_in_progress: whether reassigning work that is already
            underway must carry a non-blank reason.
    """

    workload_threshold: int = DEFAULT_WORKLOAD_THRESHOLD
    reason_required_in_progress: bool = True

    def workload_warning(self, workload: int, subject: str = "Technician") -> str | None:
        """Return an advisory message when *workload* exceeds the threshold.

        The warning never blocks an assignment; it only annotates the result.
        """
        if workload <= self.workload_threshold:
            return None
        return (
            f"Warning: {subject} has {workload} active tasks, which exceeds "
            f"the recommended threshold of {self.workload_threshold}"
        )
