# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from enum import Enum


class JobState(Enum):
    """
    Lifecycle state of a single job as tracked by the chunk scheduler.
    """

    PENDING = 1
    SUBMITTED = 2
    RUNNING = 3
    FINISHED = 4
    FAILED = 5

    def __str__(self) -> str:
        """
        Return the lowercase string representation of the enum variant.
        """
        return self.name.lower()

    def isActive(self) -> bool:
        """Return True if the job occupies a slot in the batch system."""
        return self in (JobState.SUBMITTED, JobState.RUNNING)

    def isCompleted(self) -> bool:
        """Return True if the job has a result or an error attached."""
        return self in (JobState.FINISHED, JobState.FAILED)
