"""Labor cost rollups."""

from datetime import date

import pytest

from models.models import TimeEntry, utcnow
from services.cost_aggregator import CostAggregator
from services.time_ledger import TimeLedger
from tests.factories import WORK_DATE, make_member, make_project, make_task


@pytest.fixture
def project(session, owner_id):
    return make_project(session, owner_id)


def test_empty_project_has_zero_average_rate(session, project):
    summary = CostAggregator(session).project_cost_summary(project.id)

    assert summary.total_hours == 0
    assert summary.total_cost == 0
    assert summary.average_rate == 0


def test_two_members_share_of_cost(session, owner_id, project):
    task = make_task(session, project)
    member_a = make_member(session, name="A", hourly_rate=3000)
    member_b = make_member(session, name="B", hourly_rate=4000)
    ledger = TimeLedger(session)
    ledger.record_entry(owner_id, task.id, member_a.id, WORK_DATE, 5)
    ledger.record_entry(owner_id, task.id, member_b.id, WORK_DATE, 10)

    costs = CostAggregator(session)
    summary = costs.project_cost_summary(project.id)
    assert summary.total_cost == 55000
    assert summary.total_hours == 15
    assert summary.average_rate == pytest.approx(3666.67, abs=0.01)

    lines = {line.member_id: line for line in costs.member_cost_breakdown(project.id)}
    assert lines[member_a.id].cost == 15000
    assert lines[member_a.id].percentage == pytest.approx(27.27, abs=0.01)
    assert lines[member_b.id].percentage == pytest.approx(72.73, abs=0.01)
    assert lines[member_b.id].member_name == "B"


def test_member_rate_is_unweighted_mean_of_snapshots(session, owner_id, project):
    # 1h at 1000 and 9h at 3000: the mean of the two rates is 2000, while the
    # hours-weighted effective rate would be 2800. The plain mean is reported.
    task = make_task(session, project)
    member = make_member(session, hourly_rate=1000)
    ledger = TimeLedger(session)
    ledger.record_entry(owner_id, task.id, member.id, WORK_DATE, 1)
    member.hourly_rate = 3000
    session.add(member)
    session.commit()
    ledger.record_entry(owner_id, task.id, member.id, WORK_DATE, 9)

    [line] = CostAggregator(session).member_cost_breakdown(project.id)

    assert line.hours == 10
    assert line.average_hourly_rate == 2000
    assert line.cost == 28000
    assert line.percentage == 100


def test_missing_snapshot_counts_as_zero_cost(session, owner_id, project):
    task = make_task(session, project)
    member = make_member(session, hourly_rate=2000)
    session.add(TimeEntry(task_id=task.id, member_id=member.id, user_id=owner_id,
                          work_date=WORK_DATE, hours=3, hourly_rate_snapshot=None))
    session.add(TimeEntry(task_id=task.id, member_id=member.id, user_id=owner_id,
                          work_date=WORK_DATE, hours=2, hourly_rate_snapshot=2000))
    session.commit()

    costs = CostAggregator(session)
    summary = costs.project_cost_summary(project.id)
    assert summary.total_hours == 5
    assert summary.total_cost == 4000

    [line] = costs.member_cost_breakdown(project.id)
    assert line.average_hourly_rate == 2000


def test_member_breakdown_is_ordered_by_member_id(session, owner_id, project):
    task = make_task(session, project)
    members = [make_member(session, name=f"M{i}", hourly_rate=1000) for i in range(4)]
    ledger = TimeLedger(session)
    for member in members:
        ledger.record_entry(owner_id, task.id, member.id, WORK_DATE, 1)

    lines = CostAggregator(session).member_cost_breakdown(project.id)

    assert [line.member_id for line in lines] == sorted(m.id for m in members)


def test_soft_deleted_tasks_and_other_projects_are_excluded(session, owner_id, project):
    live = make_task(session, project, name="Live")
    dropped = make_task(session, project, name="Dropped")
    elsewhere = make_task(session, make_project(session, owner_id, name="Elsewhere"))
    member = make_member(session, hourly_rate=1000)
    ledger = TimeLedger(session)
    ledger.record_entry(owner_id, live.id, member.id, WORK_DATE, 2)
    ledger.record_entry(owner_id, dropped.id, member.id, WORK_DATE, 3)
    ledger.record_entry(owner_id, elsewhere.id, member.id, WORK_DATE, 4)

    dropped.deleted_at = utcnow()
    session.add(dropped)
    session.commit()

    costs = CostAggregator(session)
    assert costs.project_cost_summary(project.id).total_cost == 2000
    tasks = costs.task_cost_breakdown(project.id)
    assert [(t.task_name, t.hours, t.cost) for t in tasks] == [("Live", 2, 2000)]


def test_task_breakdown_per_task(session, owner_id, project):
    first = make_task(session, project, name="First")
    second = make_task(session, project, name="Second")
    member = make_member(session, hourly_rate=1500)
    ledger = TimeLedger(session)
    ledger.record_entry(owner_id, first.id, member.id, WORK_DATE, 2)
    ledger.record_entry(owner_id, first.id, member.id, date(2024, 4, 2), 1)
    ledger.record_entry(owner_id, second.id, member.id, WORK_DATE, 4)

    lines = {line.task_id: line for line in CostAggregator(session).task_cost_breakdown(project.id)}

    assert lines[first.id].hours == 3
    assert lines[first.id].cost == 4500
    assert lines[second.id].cost == 6000
