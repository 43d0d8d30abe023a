# routes/budget.py
from fastapi import APIRouter, Depends
from sqlmodel import Session
import uuid

from core.database import get_session
from core.security import get_current_user_id
from schemas import BudgetComparison, BudgetRead, BudgetSummaryView, UpdateRevenueRequest
from services.budget_ledger import BudgetLedger
from services.lookups import get_owned_project
from services.summary import SummaryComposer, budget_view

router = APIRouter(prefix="/projects/{project_id}/budget", tags=["Budget"])


# ==================================================================
#  ✅ Get Budget (created on first access, cost refreshed every read)
# ==================================================================
@router.get("", response_model=BudgetRead)
def get_budget(
    project_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    get_owned_project(session, project_id, user_id)
    return budget_view(BudgetLedger(session).get_or_create_budget(project_id))


# ==================================================================
#  ✅ Set Revenue
# ==================================================================
@router.put("/revenue", response_model=BudgetRead)
def update_revenue(
    project_id: uuid.UUID,
    data: UpdateRevenueRequest,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    get_owned_project(session, project_id, user_id)
    budget = BudgetLedger(session).set_revenue(project_id, data.revenue, data.currency)
    return budget_view(budget)


# ==================================================================
#  ✅ Budget Summary (cost breakdown + deficit warning)
# ==================================================================
@router.get("/summary", response_model=BudgetSummaryView)
def get_budget_summary(
    project_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    get_owned_project(session, project_id, user_id)
    return SummaryComposer(session).budget_summary(project_id)


# ==================================================================
#  ✅ Planned budget vs. actual labor cost
# ==================================================================
@router.get("/comparison", response_model=BudgetComparison)
def get_budget_comparison(
    project_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    get_owned_project(session, project_id, user_id)
    result = BudgetLedger(session).budget_comparison(project_id)
    return BudgetComparison(
        project_id=result.project_id,
        planned_budget=result.planned_budget,
        actual_cost=result.actual_cost,
        variance=result.variance,
        variance_rate=result.variance_rate,
        is_over_budget=result.is_over_budget,
    )
