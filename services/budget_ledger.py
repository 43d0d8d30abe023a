# services/budget_ledger.py
"""
Per-project budget: revenue in, labor cost out.

The stored ``total_cost`` is a cache of the cost aggregator's result. It is
recomputed and saved, together with profit, every time the budget is read or
its revenue changes.
"""
from dataclasses import dataclass
from typing import Callable, Optional
import logging
import math
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from core.config import settings
from core.database import transaction
from core.exceptions import InvalidInputError, StorageError
from models.models import Budget, utcnow
from services.cost_aggregator import CostAggregator
from services.lookups import get_active_project

logger = logging.getLogger(__name__)


class _BudgetCreatedConcurrently(Exception):
    """Our lazy insert lost the race against another creator."""


def calculate_profit(budget: Budget) -> Budget:
    budget.calculate_profit()
    return budget


@dataclass
class BudgetComparisonResult:
    project_id: uuid.UUID
    planned_budget: float
    actual_cost: float

    @property
    def variance(self) -> float:
        return self.actual_cost - self.planned_budget

    @property
    def variance_rate(self) -> float:
        if self.planned_budget <= 0:
            return 0.0
        return self.variance / self.planned_budget * 100

    @property
    def is_over_budget(self) -> bool:
        return self.variance > 0


class BudgetLedger:
    def __init__(self, session: Session, costs: Optional[CostAggregator] = None):
        self.session = session
        self.costs = costs or CostAggregator(session)

    def get_or_create_budget(self, project_id: uuid.UUID) -> Budget:
        get_active_project(self.session, project_id)
        return self._recompute(project_id)

    def set_revenue(
        self,
        project_id: uuid.UUID,
        revenue: float,
        currency: Optional[str] = None,
    ) -> Budget:
        if revenue is None or not math.isfinite(revenue) or revenue < 0:
            raise InvalidInputError.for_field("revenue", "revenue must be a finite number, 0 or greater")
        if currency is not None:
            if len(currency) != 3 or not currency.isalpha():
                raise InvalidInputError.for_field("currency", "currency must be a 3-letter code")
            currency = currency.upper()

        get_active_project(self.session, project_id)

        def apply(budget: Budget) -> None:
            budget.revenue = revenue
            if currency:
                budget.currency = currency

        budget = self._recompute(project_id, apply)
        logger.info("Set revenue for project %s to %s %s", project_id, revenue, budget.currency)
        return budget

    def budget_comparison(self, project_id: uuid.UUID) -> BudgetComparisonResult:
        project = get_active_project(self.session, project_id)
        summary = self.costs.project_cost_summary(project_id)
        return BudgetComparisonResult(
            project_id=project_id,
            planned_budget=project.budget_amount or 0.0,
            actual_cost=summary.total_cost,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _recompute(
        self,
        project_id: uuid.UUID,
        mutate: Optional[Callable[[Budget], None]] = None,
    ) -> Budget:
        # A concurrent first read may insert the row between our select and
        # insert; only that collision is retried, once, picking up their row.
        for attempt in range(2):
            try:
                with transaction(self.session):
                    budget = self._locked_budget(project_id)
                    if mutate:
                        mutate(budget)
                    budget.total_cost = self.costs.project_cost_summary(project_id).total_cost
                    calculate_profit(budget)
                    budget.updated_at = utcnow()
                    self.session.add(budget)
                break
            except _BudgetCreatedConcurrently as exc:
                if attempt:
                    raise StorageError(exc.__cause__) from exc
                logger.warning("Budget for project %s was created concurrently, re-reading", project_id)

        self.session.refresh(budget)
        return budget

    def _find_locked_budget(self, project_id: uuid.UUID) -> Optional[Budget]:
        return self.session.exec(
            select(Budget).where(Budget.project_id == project_id).with_for_update()
        ).first()

    def _locked_budget(self, project_id: uuid.UUID) -> Budget:
        budget = self._find_locked_budget(project_id)
        if budget is None:
            budget = Budget(project_id=project_id, currency=settings.DEFAULT_CURRENCY)
            self.session.add(budget)
            try:
                self.session.flush()
            except IntegrityError as exc:
                # The insert carries only defaults for an existing project, so
                # the one constraint it can break is the per-project uniqueness.
                raise _BudgetCreatedConcurrently() from exc
            logger.info("Created budget for project %s", project_id)
        return budget
