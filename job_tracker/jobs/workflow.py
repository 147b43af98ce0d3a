"""Status workflow: transition planning and the side effects of a status change."""

import random
from dataclasses import dataclass, field, replace

from job_tracker.jobs.models import JobRecord, Status

CONGRATULATION_MESSAGES = [
    "Congratulations! Your hard work has paid off! This offer is well-deserved!",
    "Amazing news! You've landed an offer! Time to celebrate your success!",
    "Fantastic! You've secured an offer! Your skills and dedication shine through!",
    "Well done! This job offer proves your talent and perseverance!",
    "Incredible achievement! You've earned this offer through your excellence!",
    "Outstanding! This offer is a testament to your capabilities and hard work!",
    "Bravo! You've successfully navigated the process and secured an offer!",
    "Bull's eye! Your preparation and skills have landed you this fantastic offer!",
    "What wonderful news! This offer opens up exciting new possibilities for you!",
    "Excellent work! You've proven your worth and earned this amazing opportunity!",
    "You're on fire! This job offer shows how impressive you truly are!",
    "Superstar! Your talent has been recognized with this well-deserved offer!",
]

DEFAULT_TOAST_MS = 5000
OFFER_TOAST_MS = 8000


@dataclass
class Toast:
    """Short-lived message shown to the user."""

    kind: str  # success, info, warning, error
    message: str
    duration_ms: int = DEFAULT_TOAST_MS

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "duration_ms": self.duration_ms}


@dataclass
class TransitionResult:
    job: JobRecord
    changed: bool = False
    toasts: list[Toast] = field(default_factory=list)
    congratulation: str | None = None

    def to_dict(self) -> dict:
        return {
            "job_id": self.job.id,
            "status": self.job.status.value,
            "changed": self.changed,
            "toasts": [t.to_dict() for t in self.toasts],
            "congratulation": self.congratulation,
        }


def plan_transition(job: JobRecord, new_status, rng: random.Random | None = None) -> TransitionResult:
    """Compute the updated job and side effects for moving job to new_status.

    Moving to the current status is a no-op with no side effects.
    """
    new_status = Status.parse(new_status)
    old_status = job.status
    if new_status == old_status:
        return TransitionResult(job=job)

    result = TransitionResult(job=replace(job, status=new_status), changed=True)

    if new_status == Status.OFFER:
        result.congratulation = (rng or random).choice(CONGRATULATION_MESSAGES)
        result.toasts.append(Toast(
            "success",
            f"Congratulations! You got an offer from {job.company}!",
            OFFER_TOAST_MS,
        ))
    elif new_status == Status.INTERVIEWING and old_status == Status.APPLIED:
        result.toasts.append(Toast("info", f"Great! You're now interviewing with {job.company}!"))
    elif new_status == Status.REJECTED:
        result.toasts.append(Toast(
            "warning",
            "Keep going! Every rejection is one step closer to the right offer.",
        ))

    return result
