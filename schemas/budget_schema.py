# budget_schema.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Optional
import uuid


class UpdateRevenueRequest(BaseModel):
    revenue: float = Field(..., ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)

    model_config = ConfigDict(allow_inf_nan=False)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not value.isalpha():
            raise ValueError("currency must be a 3-letter code")
        return value.upper()


class BudgetRead(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    revenue: float
    total_cost: float
    profit: float
    profit_rate: float
    currency: str
    is_deficit: bool

    model_config = ConfigDict(from_attributes=True)


class CostBreakdown(BaseModel):
    labor_cost: float
    total_hours: float
    average_rate: float


class MemberCost(BaseModel):
    member_id: uuid.UUID
    member_name: str
    hours: float
    hourly_rate: float
    cost: float
    percentage: float


class TaskCost(BaseModel):
    task_id: uuid.UUID
    task_name: str
    hours: float
    cost: float


class BudgetSummaryView(BaseModel):
    project_id: uuid.UUID
    project_name: str
    budget: BudgetRead
    cost_breakdown: CostBreakdown
    member_costs: List[MemberCost]
    task_costs: List[TaskCost] = []
    warning_message: Optional[str] = None


class BudgetComparison(BaseModel):
    project_id: uuid.UUID
    planned_budget: float
    actual_cost: float
    variance: float
    variance_rate: float
    is_over_budget: bool
