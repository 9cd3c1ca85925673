"""Hand notification jobs to the notifier with per-recipient failure isolation."""
import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from garden_alerts.notifiers import NotifierABC, SendResult
from garden_alerts.schemas import NotificationJob

logger = logging.getLogger(__name__)


@dataclass
class DispatchReport:
    """Counts for one fan-out batch; failed holds the recipients that did not get mail."""

    delivered: int = 0
    failed: list[str] = field(default_factory=list)


async def _deliver(
    notifier: NotifierABC, job: NotificationJob, semaphore: asyncio.Semaphore
) -> SendResult:
    async with semaphore:
        try:
            return await notifier.send(job.email, job.subject, job.body)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Notifier raised while sending to %s", job.email)
            return SendResult.transient(f"{type(exc).__name__}: {exc}")


async def dispatch(
    notifier: NotifierABC,
    jobs: Sequence[NotificationJob],
    *,
    max_concurrency: int = 5,
) -> DispatchReport:
    """Send every job; one recipient's failure never stops the others.

    Failures are logged, not retried (at-least-once is not attempted here).
    """
    report = DispatchReport()
    if not jobs:
        return report
    semaphore = asyncio.Semaphore(max(1, max_concurrency))
    results = await asyncio.gather(*(_deliver(notifier, job, semaphore) for job in jobs))
    for job, result in zip(jobs, results):
        if result.ok:
            report.delivered += 1
            continue
        report.failed.append(job.email)
        if result.auth_failure:
            logger.error("Authentication failure sending to %s: %s", job.email, result.reason)
        else:
            logger.warning(
                "%s failure sending to %s: %s", result.status.value.capitalize(), job.email, result.reason
            )
    logger.info("Dispatched %d emails: %d delivered, %d failed", len(jobs), report.delivered, len(report.failed))
    return report
