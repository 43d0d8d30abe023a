from .common_schema import Pagination, MemberBrief, MessageResponse, normalize_page
from .project_schema import (
    ProjectCreate, ProjectUpdate, ProjectRead, ProjectDetail, ProjectStats,
    ProjectList, ProjectSummaryView
)
from .task_schema import TaskCreate, TaskUpdate, TaskRead, TaskList
from .member_schema import (
    MemberCreate, MemberUpdate, MemberRead, MemberList,
    AssignMemberRequest, ProjectMemberRead
)
from .time_entry_schema import (
    TimeEntryCreate, TimeEntryUpdate, TimeEntryRead,
    TimeEntryList, TimeEntryPageSummary
)
from .budget_schema import (
    UpdateRevenueRequest, BudgetRead, CostBreakdown, MemberCost, TaskCost,
    BudgetSummaryView, BudgetComparison
)

__all__ = [
    # Common
    "Pagination", "MemberBrief", "MessageResponse", "normalize_page",

    # Project
    "ProjectCreate", "ProjectUpdate", "ProjectRead", "ProjectDetail", "ProjectStats",
    "ProjectList", "ProjectSummaryView",

    # Task
    "TaskCreate", "TaskUpdate", "TaskRead", "TaskList",

    # Member
    "MemberCreate", "MemberUpdate", "MemberRead", "MemberList",
    "AssignMemberRequest", "ProjectMemberRead",

    # Time entry
    "TimeEntryCreate", "TimeEntryUpdate", "TimeEntryRead",
    "TimeEntryList", "TimeEntryPageSummary",

    # Budget
    "UpdateRevenueRequest", "BudgetRead", "CostBreakdown", "MemberCost", "TaskCost",
    "BudgetSummaryView", "BudgetComparison",
]
