"""Daily quotation refresh job."""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from fincontrol.domain.entities import QuotationRunResult, ScheduleCheck
from fincontrol.quotes.service import QuotationService

logger = logging.getLogger(__name__)

JOB_NAME = "DailyQuotationJob"
JOB_TIMEZONE = "America/Sao_Paulo"
# Run at 19:00, Monday to Friday, after the exchange closes
JOB_SCHEDULE = "0 19 * * 1-5"
MARKET_CLOSE_HOUR = 19


def _local_now() -> datetime:
    return datetime.now(ZoneInfo(JOB_TIMEZONE))


class QuotationJob:
    """Gated wrapper around ``QuotationService.refresh_all``.

    The automatic trigger only runs on weekdays at or after the market
    close hour; a forced run skips that check.
    """

    def __init__(self, service: QuotationService, now: Callable[[], datetime] = _local_now):
        """Initialize the job.

        Args:
            service: Quotation service that performs the refresh
            now: Clock returning the current local time
        """
        self.service = service
        self._now = now

    @property
    def info(self) -> dict[str, str]:
        """Name, schedule and timezone of the job."""
        return {
            "name": JOB_NAME,
            "description": "Refresh asset quotes daily after the market closes",
            "schedule": JOB_SCHEDULE,
            "timezone": JOB_TIMEZONE,
        }

    def should_run(self, now: Optional[datetime] = None) -> ScheduleCheck:
        """Check whether the automatic trigger may run at ``now``."""
        now = now or self._now()
        is_weekday = now.weekday() < 5
        is_after_close = now.hour >= MARKET_CLOSE_HOUR
        if not is_weekday:
            reason = "Weekend - skipping quote refresh"
        elif not is_after_close:
            reason = f"Too early ({now.hour}h) - waiting for market close ({MARKET_CLOSE_HOUR}h)"
        else:
            reason = "Market closed - ready to refresh"
        return ScheduleCheck(
            should_run=is_weekday and is_after_close,
            is_weekday=is_weekday,
            is_after_close=is_after_close,
            current_day=now.isoweekday(),
            current_hour=now.hour,
            reason=reason,
        )

    def execute(self, now: Optional[datetime] = None) -> QuotationRunResult:
        """Run the refresh if the schedule gate allows it."""
        check = self.should_run(now)
        if not check.should_run:
            logger.info("[%s] %s", JOB_NAME, check.reason)
            return QuotationRunResult(success=True, skipped=True, reason=check.reason)

        logger.info("[%s] Starting scheduled quote refresh", JOB_NAME)
        return self._run(forced=False)

    def force_execute(self) -> QuotationRunResult:
        """Run the refresh regardless of day and hour."""
        logger.info("[%s] Starting forced quote refresh", JOB_NAME)
        return self._run(forced=True)

    def _run(self, forced: bool) -> QuotationRunResult:
        result = self.service.refresh_all()
        if result.success:
            if result.failed:
                logger.warning("[%s] %d ticker(s) failed", JOB_NAME, result.failed)
        else:
            logger.error("[%s] Quote refresh failed: %s", JOB_NAME, result.message)
        if forced:
            return replace(result, forced=True)
        return result
