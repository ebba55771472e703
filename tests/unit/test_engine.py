"""Unit tests for the financial health engine"""

import pytest
from datetime import date
from decimal import Decimal
from budget_gateway.domain.engine import compute_financial_health, compute_timeline
from budget_gateway.domain.exceptions import ConfigError
from budget_gateway.domain.models import (
    CAUTION,
    CRITICAL,
    DANGER,
    HEALTHY,
    INFO,
    WARNING,
    ReservePolicy,
    TransactionEvent,
)
from conftest import TODAY, make_event


def fixed_reserve(value) -> ReservePolicy:
    return ReservePolicy("fixed", Decimal(str(value)))


def health(events, current_balance, reserve=0, weekend_weight=1, today=TODAY, opening_balance=None, **kwargs):
    return compute_financial_health(
        events,
        current_balance if opening_balance is None else opening_balance,
        current_balance,
        today,
        kwargs.pop("reserve_policy", fixed_reserve(reserve)),
        Decimal(str(weekend_weight)),
        kwargs.pop("reference_income", Decimal("0")),
        **kwargs,
    )


def test_flat_month_splits_slack_evenly():
    """Test 1000 balance, reserve 200, 10 days left -> 80/day"""
    result = health([], Decimal("1000"), reserve=200)

    assert result.status == HEALTHY
    assert result.daily_budget == Decimal("80.00")
    assert result.weekend_daily_budget == Decimal("80.00")
    assert result.days_remaining == 10
    assert result.minimum_reserve == Decimal("200.00")
    assert result.projected_end_balance == Decimal("1000.00")
    assert all(a.allowance == Decimal("80.00") for a in result.daily_allowances)
    assert not [a for a in result.alerts if a.severity == CRITICAL]


def test_scheduled_expense_breaching_reserve_is_danger():
    """Test 500 balance, 600 bill in three days -> DANGER, zero budget"""
    bill_day = date(2026, 10, 25)
    events = [make_event(bill_day, 600, category="bills", is_projected=True, source_id="bill")]

    result = health(events, Decimal("500"), reserve=0)

    assert result.status == DANGER
    assert result.daily_budget == 0
    assert result.weekend_daily_budget == 0
    assert result.bottleneck_date == bill_day
    assert result.bottleneck_balance == Decimal("-100.00")
    critical = [a for a in result.alerts if a.severity == CRITICAL]
    assert len(critical) == 1
    assert critical[0].date == bill_day
    assert "2026-10-25" in critical[0].message
    # Month closes negative on a later day: reported, but not as a second critical
    assert any(a.severity == WARNING and a.date == date(2026, 10, 31) for a in result.alerts)
    assert all(a.allowance == 0 for a in result.daily_allowances)


def test_weekend_days_get_weighted_share():
    """Test 300 balance over Tue..Sun with weekend weight 2 -> 37.5 / 75"""
    today = date(2026, 5, 26)  # Tuesday

    result = health([], Decimal("300"), reserve=0, weekend_weight=2, today=today)

    allowances = {a.date: a.allowance for a in result.daily_allowances}
    assert result.daily_budget == Decimal("37.50")
    assert result.weekend_daily_budget == Decimal("75.00")
    assert allowances[date(2026, 5, 29)] == Decimal("37.50")  # Friday
    assert allowances[date(2026, 5, 30)] == Decimal("75.00")  # Saturday
    assert allowances[date(2026, 5, 31)] == Decimal("75.00")  # Sunday
    assert sum(allowances.values()) == Decimal("300.00")


def test_no_recent_spend_gives_indefinite_autonomy():
    """Test zero trailing spend -> indefinite sentinel, never a division error"""
    result = health([], Decimal("1000"), reserve=200)

    assert result.autonomy_is_indefinite
    assert result.average_daily_variable_spend == 0


def test_budget_stops_at_bottleneck_and_income_after_it_does_not_count():
    """Test allowance horizon ends at the last day of the minimum balance"""
    events = [
        make_event(date(2026, 10, 27), 400, category="bills", is_projected=True, source_id="power"),
        make_event(date(2026, 10, 29), 300, type="income", is_projected=True, source_id="gig"),
    ]

    result = health(events, Decimal("1000"), reserve=100, weekend_weight=Decimal("1.5"))

    assert result.bottleneck_date == date(2026, 10, 27)
    assert result.slack == Decimal("500.00")
    # Oct 22..28: five weekdays at 1 and a weekend at 1.5 -> weight 8
    assert result.daily_budget == Decimal("62.50")
    assert result.weekend_daily_budget == Decimal("93.75")
    allowances = {a.date.day: a.allowance for a in result.daily_allowances}
    assert allowances[24] == Decimal("93.75")
    assert allowances[28] == Decimal("62.50")
    assert allowances[29] == allowances[30] == allowances[31] == 0


def test_allowances_exhaust_slack_exactly_at_bottleneck():
    """Test spending every allowance up to the bottleneck lands on the reserve"""
    events = [
        make_event(date(2026, 10, 27), 400, is_projected=True, source_id="a"),
        make_event(date(2026, 10, 29), 300, type="income", is_projected=True, source_id="b"),
    ]

    result = health(events, Decimal("1000"), reserve=100, weekend_weight=Decimal("1.5"))

    spent = sum(a.allowance for a in result.daily_allowances)
    assert spent == result.slack
    assert result.bottleneck_balance - spent == result.minimum_reserve
    for projection in result.daily_projections:
        spent_so_far = sum(a.allowance for a in result.daily_allowances if a.date <= projection.date)
        assert projection.balance - spent_so_far >= result.minimum_reserve


def test_projection_starts_from_realized_balance(sample_month_events):
    """Test realized events are not counted twice and the month closes as the ledger does"""
    opening = Decimal("500")
    current = Decimal("2090")  # 500 + 3000 - 1200 - 140 - 70

    result = health(sample_month_events, current, reserve=200, opening_balance=opening)

    ledger = compute_timeline(sample_month_events, opening, 2026, 10)
    assert result.projected_end_balance == ledger[-1].running_balance
    assert result.daily_projections[0].balance == current
    assert result.bottleneck_balance == Decimal("1690.00")
    assert result.daily_budget == Decimal("212.86")  # 1490 over 7 days
    assert result.status == HEALTHY


def test_month_totals_and_commitments(sample_month_events):
    """Test realized vs scheduled totals and the commitment split"""
    events = sample_month_events + [
        make_event(date(2026, 10, 30), 60, category="dining", is_projected=True, source_id="dinner"),
        make_event(date(2026, 10, 28), 45, category="Utilities", is_projected=True, source_id="water"),
        make_event(date(2026, 10, 26), 35, category="phone", is_projected=True, is_recurring=True, source_id="phone"),
    ]

    result = health(events, Decimal("2090"), reserve=200, opening_balance=Decimal("500"))

    assert result.future_commitments == Decimal("480.00")  # power + water + phone
    assert result.flexible_commitments == Decimal("60.00")
    assert result.realized_income == Decimal("3000.00")
    assert result.projected_income == Decimal("300.00")
    assert result.realized_expenses == Decimal("1410.00")
    assert result.projected_expenses == Decimal("540.00")
    assert result.month_progress == Decimal("0.7097")
    assert any(a.severity == INFO and a.amount == Decimal("540.00") for a in result.alerts)


def test_autonomy_uses_trailing_variable_spend(sample_month_events):
    """Test 210 of groceries in the last 7 days -> 30/day"""
    result = health(sample_month_events, Decimal("1000"), reserve=0)

    assert result.average_daily_variable_spend == Decimal("30.00")
    assert result.autonomy_days == Decimal("33.33")
    assert not result.autonomy_is_indefinite


def test_percentage_reserve_uses_reference_income():
    """Test 10% of 3000 income -> 300 reserve"""
    result = health(
        [],
        Decimal("1000"),
        reserve_policy=ReservePolicy("percentage", Decimal("10")),
        reference_income=Decimal("3000"),
    )

    assert result.minimum_reserve == Decimal("300.00")
    assert result.daily_budget == Decimal("70.00")


def test_negative_reference_income_rejected_for_percentage_reserve():
    with pytest.raises(ConfigError):
        health(
            [],
            Decimal("1000"),
            reserve_policy=ReservePolicy("percentage", Decimal("10")),
            reference_income=Decimal("-1"),
        )


def test_weekend_weight_below_one_rejected():
    """Test invalid weight fails even when there is nothing to compute"""
    with pytest.raises(ConfigError):
        health([], Decimal("1000"), weekend_weight=Decimal("0.5"))
    with pytest.raises(ConfigError):
        health(None, Decimal("0"), weekend_weight=Decimal("0.5"))


@pytest.mark.parametrize("kind,value", [("percentage", "150"), ("percentage", "-5"), ("fixed", "-1"), ("floating", "5")])
def test_invalid_reserve_policy_rejected(kind, value):
    with pytest.raises(ConfigError):
        ReservePolicy(kind, Decimal(value))


def test_missing_ledger_gives_zeroed_result():
    """Test no ledger at all -> HEALTHY, every amount 0"""
    result = health(None, Decimal("0"))

    assert result.status == HEALTHY
    assert result.daily_budget == 0
    assert result.current_balance == 0
    assert result.daily_projections == []
    assert result.alerts == []
    assert result.autonomy_is_indefinite


def test_empty_ledger_with_zero_balances_gives_zeroed_result():
    result = health([], Decimal("0"))

    assert result.status == HEALTHY
    assert result.daily_projections == []
    assert result.days_remaining == 0


def test_malformed_events_are_dropped_with_warnings():
    """Test a bad record never aborts the computation"""
    events = [
        {"date": "2026-10-27", "type": "expense", "amount": "100", "category": "bills", "isProjected": True},
        {"date": "2026-10-28", "type": "transfer", "amount": "50", "sourceId": "odd-type"},
        {"type": "expense", "amount": "50", "sourceId": "no-date"},
    ]

    result = health(events, Decimal("1000"), reserve=0)

    assert len(result.warnings) == 2
    assert result.projected_end_balance == Decimal("900.00")


def test_past_month_has_no_projection():
    """Test a closed month: nothing left to allocate"""
    result = health([], Decimal("1000"), reserve=0, year=2026, month=9)

    assert result.status == HEALTHY
    assert result.daily_projections == []
    assert result.daily_budget == 0
    assert result.projected_end_balance == Decimal("1000.00")
    assert result.month_progress == Decimal("1")


def test_future_month_projects_through_its_end():
    """Test viewing next month: the window runs from today to that month's end"""
    events = [make_event(date(2026, 11, 10), 300, is_projected=True, source_id="nov-bill")]

    result = health(events, Decimal("1000"), reserve=0, year=2026, month=11)

    assert result.days_remaining == 40
    assert result.projected_end_balance == Decimal("700.00")
    assert result.month_progress == 0


def test_overdue_scheduled_items_are_reported_not_projected():
    events = [make_event(date(2026, 10, 20), 80, is_projected=True, source_id="late")]

    result = health(events, Decimal("1000"), reserve=0)

    assert result.projected_end_balance == Decimal("1000.00")
    assert any(a.severity == INFO and "1 scheduled item" in a.message for a in result.alerts)


def test_thin_slack_is_caution():
    """Test slack under 10% of the current balance"""
    events = [make_event(date(2026, 10, 30), 850, is_projected=True, source_id="big")]

    result = health(events, Decimal("1000"), reserve=100)

    assert result.status == CAUTION
    assert result.slack == Decimal("50.00")


def test_same_inputs_same_result(sample_month_events):
    first = health(sample_month_events, Decimal("2090"), reserve=200, opening_balance=Decimal("500"))
    second = health(sample_month_events, Decimal("2090"), reserve=200, opening_balance=Decimal("500"))

    assert first == second


def test_custom_day_weigher_replaces_weekend_weight():
    """Test a holiday counted as a double day in the distribution"""
    holiday = date(2026, 10, 26)

    result = health(
        [],
        Decimal("1100"),
        reserve=0,
        weigher=lambda d: Decimal("2") if d == holiday else Decimal("1"),
    )

    allowances = {a.date: a.allowance for a in result.daily_allowances}
    assert allowances[holiday] == Decimal("200.00")
    assert result.daily_budget == Decimal("100.00")
    assert result.weekend_daily_budget == Decimal("100.00")  # Saturdays weigh 1 here


def test_weekend_budget_follows_custom_weigher():
    """Test the weekend figure uses the weigher's weight for Saturday"""
    result = health(
        [],
        Decimal("1000"),
        reserve=0,
        weekend_weight=Decimal("1.5"),
        weigher=lambda d: Decimal("3") if d.weekday() == 5 else Decimal("1"),
    )

    # Oct 22..31: 8 days at 1 plus Saturdays 24 and 31 at 3 -> weight 14
    assert result.daily_budget == Decimal("71.43")
    assert result.weekend_daily_budget == Decimal("214.29")


def assert_projection_consistent(result):
    """Running balance rebuilt from the rounded daily nets matches every day"""
    balance = result.current_balance
    for projection in result.daily_projections:
        assert projection.incomes >= 0
        assert projection.expenses >= 0
        balance = balance + projection.incomes - projection.expenses
        assert projection.balance == balance
    net = sum(p.incomes - p.expenses for p in result.daily_projections)
    assert net == result.projected_end_balance - result.current_balance


def test_projection_conserves_and_reconstructs_balance(sample_month_events):
    events = sample_month_events + [
        make_event(TODAY, 25, category="transport", is_projected=True, source_id="pass"),
    ]

    result = health(events, Decimal("2090"), reserve=200, opening_balance=Decimal("500"))

    assert result.daily_projections[0].balance == Decimal("2065.00")
    assert result.projected_end_balance == Decimal("1965.00")
    assert_projection_consistent(result)


def test_projection_conserves_with_sub_cent_amounts():
    """Test rounding of the output keeps daily nets and balances in agreement"""
    events = [
        make_event(date(2026, 10, 23), "0.005", is_projected=True, source_id="fee-1"),
        make_event(date(2026, 10, 24), "0.005", is_projected=True, source_id="fee-2"),
        make_event(date(2026, 10, 26), "0.333", type="income", is_projected=True, source_id="interest"),
        make_event(date(2026, 10, 26), "0.114", is_projected=True, source_id="fee-3"),
    ]

    result = health(events, Decimal("10"), reserve=0)

    assert result.projected_end_balance == Decimal("10.21")
    assert_projection_consistent(result)


def test_typed_event_with_int_amount_is_usable():
    """Test a loosely typed event does not abort the computation"""
    loose = TransactionEvent(
        date="2026-10-25",
        type="expense",
        amount=600,
        category="bills",
        is_projected=True,
        is_recurring=False,
        source_id="loose",
    )
    broken = TransactionEvent(
        date="someday",
        type="expense",
        amount=50,
        category="bills",
        is_projected=True,
        is_recurring=False,
        source_id="broken",
    )

    result = health([loose, broken], Decimal("500"), reserve=0)

    assert result.bottleneck_balance == Decimal("-100.00")
    assert result.status == DANGER
    assert len(result.warnings) == 1
