# =============================================
# workhub/services/job_guard.py
# =============================================
"""
Capacity and lifecycle rules deciding whether a job takes new applications.

The check here is pure and used for early, descriptive errors. The
authoritative enforcement is the conditional counter update in
JobRepository.increment_application_count, which applies the same three
rules inside the database.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Type

from workhub.core.exceptions import (
    ConflictError,
    DeadlinePassedError,
    JobFullError,
    JobNotActiveError
)
from workhub.schemas.enums import JobStatusEnum

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class GuardResult:
    ok: bool
    reason: Optional[Type[ConflictError]] = None

    def raise_for_job(self, job) -> None:
        if self.ok:
            return
        if self.reason is DeadlinePassedError:
            raise DeadlinePassedError(job.job_id, job.application_deadline)
        if self.reason is JobFullError:
            raise JobFullError(job.job_id, job.max_applications)
        raise JobNotActiveError(job.job_id, job.status)


def can_accept_application(job, now: Optional[datetime] = None) -> GuardResult:
    """Evaluate deadline, capacity and status, in that order"""
    now = as_utc(now or utcnow())

    deadline = as_utc(job.application_deadline)
    if deadline is not None and now > deadline:
        return GuardResult(False, DeadlinePassedError)

    if job.max_applications is not None and (job.current_applications or 0) >= job.max_applications:
        return GuardResult(False, JobFullError)

    if job.status != JobStatusEnum.ACTIVE.value:
        return GuardResult(False, JobNotActiveError)

    return GuardResult(True)
