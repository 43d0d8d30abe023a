# services/summary.py
"""Project-level reports assembled from the variance, cost and budget components."""
import uuid

from sqlmodel import Session

from models.models import Budget
from schemas import (
    BudgetRead, BudgetSummaryView, CostBreakdown, MemberCost, ProjectSummaryView, TaskCost
)
from services.budget_ledger import BudgetLedger
from services.cost_aggregator import CostAggregator
from services.lookups import get_active_project
from services.variance import project_task_summary

DEFICIT_WARNING = "Warning: this project is running at a deficit. Increase revenue or reduce costs."


def budget_view(budget: Budget) -> BudgetRead:
    return BudgetRead.model_validate(budget)


class SummaryComposer:
    def __init__(self, session: Session):
        self.session = session
        self.costs = CostAggregator(session)
        self.budgets = BudgetLedger(session, self.costs)

    def budget_summary(self, project_id: uuid.UUID) -> BudgetSummaryView:
        project = get_active_project(self.session, project_id)

        # The ledger refreshes total_cost before anything else reads it
        budget = self.budgets.get_or_create_budget(project_id)
        cost = self.costs.project_cost_summary(project_id)

        member_costs = [
            MemberCost(
                member_id=line.member_id,
                member_name=line.member_name,
                hours=line.hours,
                hourly_rate=line.average_hourly_rate,
                cost=line.cost,
                percentage=line.percentage,
            )
            for line in self.costs.member_cost_breakdown(project_id)
        ]
        task_costs = [
            TaskCost(task_id=line.task_id, task_name=line.task_name, hours=line.hours, cost=line.cost)
            for line in self.costs.task_cost_breakdown(project_id)
        ]

        return BudgetSummaryView(
            project_id=project.id,
            project_name=project.name,
            budget=budget_view(budget),
            cost_breakdown=CostBreakdown(
                labor_cost=cost.total_cost,
                total_hours=cost.total_hours,
                average_rate=cost.average_rate,
            ),
            member_costs=member_costs,
            task_costs=task_costs,
            warning_message=DEFICIT_WARNING if budget.is_deficit else None,
        )

    def project_summary(self, project_id: uuid.UUID) -> ProjectSummaryView:
        get_active_project(self.session, project_id)
        summary = project_task_summary(self.session, project_id)

        return ProjectSummaryView(
            project_id=summary.project_id,
            total_tasks=summary.total_tasks,
            total_planned_hours=summary.total_planned_hours,
            total_actual_hours=summary.total_actual_hours,
            variance_hours=summary.variance_hours,
            variance_percentage=summary.variance_percentage,
            is_over_budget=summary.is_over_budget,
            completed_tasks=summary.completed_tasks,
            in_progress_tasks=summary.in_progress_tasks,
            todo_tasks=summary.todo_tasks,
            blocked_tasks=summary.blocked_tasks,
            completion_rate=summary.completion_rate,
        )
