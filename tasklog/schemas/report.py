"""
Report schemas
"""
from datetime import date
from typing import List, Optional
from pydantic import BaseModel

from tasklog.models.task_log import LogStatus


class ChartPoint(BaseModel):
    date: date
    completed: int
    total: int


class RecentActivity(BaseModel):
    id: str
    log_date: date
    employee_id: str
    employee_name: str
    description: str
    status: LogStatus


class DashboardOut(BaseModel):
    date_from: date
    date_to: date
    total: int
    completed: int
    completion_rate: int
    pending_approval_count: int
    commitment_pending_count: int
    missing_today_count: int
    missing_today: List[str]
    chart: List[ChartPoint]
    recent_activity: List[RecentActivity]


class AdherenceOut(BaseModel):
    employee_id: str
    gross_days: int
    rest_days: int
    leave_days: int
    registration_days: int
    net_work_days: int
    attendance_rate: int


class TaskBreakdownRow(BaseModel):
    task_id: str
    description: str
    category: Optional[str] = None
    completed: int
    pending: int
    not_applicable: int
    rate: int


class EmployeeReportOut(BaseModel):
    adherence: AdherenceOut
    tasks: List[TaskBreakdownRow]


class ComparisonRow(BaseModel):
    rank: int
    employee_id: str
    name: str
    net_work_days: int
    registration_days: int
    completed: int
    pending: int
    not_applicable: int
    rate: float
