"""Dashboard service - period statistics with comparison to the previous period"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User
from ...utils.dates import end_of_day, parse_datetime, start_of_day, utc_now
from .repository import ACTIVE_STATUSES, DashboardRepository

logger = logging.getLogger(__name__)

PERIODS = ("today", "week", "month", "quarter", "year", "custom")


def resolve_period(
    period: str,
    now: datetime,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> tuple[datetime, datetime, datetime, datetime]:
    """
    (start, end, previous_start, previous_end) for a dashboard period.

    Named periods run from their calendar start up to the end of today and
    compare against the whole previous calendar period. Weeks start on Monday.
    A custom range compares against the same duration immediately before it.
    """
    end = end_of_day(now)
    today = start_of_day(now)

    if period == "today":
        start = today
        prev_start = today - timedelta(days=1)
        return start, end, prev_start, end_of_day(prev_start)

    if period == "week":
        start = today - timedelta(days=today.weekday())
        prev_start = start - timedelta(weeks=1)
        return start, end, prev_start, end_of_day(start - timedelta(days=1))

    if period == "quarter":
        start = today.replace(month=(today.month - 1) // 3 * 3 + 1, day=1)
        prev_start = start - relativedelta(months=3)
        return start, end, prev_start, end_of_day(start - timedelta(days=1))

    if period == "year":
        start = today.replace(month=1, day=1)
        prev_start = start - relativedelta(years=1)
        return start, end, prev_start, end_of_day(start - timedelta(days=1))

    if period == "custom":
        if not start_date or not end_date:
            raise HTTPException(status_code=400, detail="Start date and end date are required for a custom range")
        try:
            start = start_of_day(parse_datetime(start_date))
            end = end_of_day(parse_datetime(end_date))
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid date range")
        if end < start:
            raise HTTPException(status_code=400, detail="End date must be after start date")
        duration = end - start
        prev_end = start - timedelta(microseconds=1)
        return start, end, prev_end - duration, prev_end

    # month
    start = today.replace(day=1)
    prev_start = start - relativedelta(months=1)
    return start, end, prev_start, end_of_day(start - timedelta(days=1))


def percent_change(current: float, previous: float) -> float:
    if previous > 0:
        return round((current - previous) / previous * 100, 1)
    return 100.0 if current > 0 else 0.0


def rate(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


class DashboardService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = DashboardRepository()

    def get_stats(
        self,
        user: User,
        period: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        period = period or "month"
        if period not in PERIODS:
            raise HTTPException(status_code=400, detail="Invalid period")
        now = now or utc_now()
        start, end, prev_start, prev_end = resolve_period(period, now, start_date, end_date)
        company_id = user.company_id

        revenue = self.repo.paid_revenue(self.db, company_id, start, end)
        previous_revenue = self.repo.paid_revenue(self.db, company_id, prev_start, prev_end)

        active_jobs = self.repo.count_jobs(self.db, company_id, start, end, ACTIVE_STATUSES)
        scheduled_jobs = self.repo.count_jobs(self.db, company_id, start, end, ("scheduled",))
        period_jobs = self.repo.count_jobs(self.db, company_id, start, end)
        previous_period_jobs = self.repo.count_jobs(self.db, company_id, prev_start, prev_end)
        completed_jobs = self.repo.count_completed(self.db, company_id, start, end)
        previous_completed = self.repo.count_completed(self.db, company_id, prev_start, prev_end)

        total_jobs = self.repo.count_jobs(self.db, company_id)
        all_completed = self.repo.count_completed(self.db, company_id)

        period_rate = rate(completed_jobs, period_jobs)
        previous_rate = rate(previous_completed, previous_period_jobs)
        outstanding_count, outstanding_amount = self.repo.outstanding_invoices(self.db, company_id)

        return {
            "period": period,
            "range": {
                "startDate": start.isoformat(),
                "endDate": end.isoformat(),
                "previousStartDate": prev_start.isoformat(),
                "previousEndDate": prev_end.isoformat(),
            },
            "revenue": round(revenue, 2),
            "previousRevenue": round(previous_revenue, 2),
            "revenueChange": percent_change(revenue, previous_revenue),
            "activeJobs": active_jobs,
            "periodJobs": period_jobs,
            "previousPeriodJobs": previous_period_jobs,
            "completedJobs": completed_jobs,
            "previousCompletedJobs": previous_completed,
            "completedJobsChange": completed_jobs - previous_completed,
            "scheduledJobs": scheduled_jobs,
            "completionRate": round(period_rate, 1),
            "completionRateAllTime": round(rate(all_completed, total_jobs), 1),
            "completionRateChange": round(period_rate - previous_rate, 1),
            "activeEmployees": self.repo.count_active_employees(self.db, company_id),
            "totalCustomers": self.repo.count_customers(self.db, company_id),
            "pendingTasks": self.repo.count_pending_tasks(self.db, company_id, start, end),
            "overdueJobs": self.repo.count_jobs(
                self.db, company_id, start, end, ACTIVE_STATUSES, scheduled_before=now
            ),
            "outstandingInvoices": outstanding_count,
            "outstandingAmount": round(outstanding_amount, 2),
            "breakdown": {
                "jobsByStatus": {
                    "scheduled": scheduled_jobs,
                    "inProgress": active_jobs - scheduled_jobs,
                    "completed": completed_jobs,
                }
            },
        }
