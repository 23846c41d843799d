# ruff: noqa: E501
from __future__ import annotations

from decimal import Decimal

import pytest

from fc_statements import CategoryMatcher, build_registry, normalize_line


@pytest.fixture(scope="module")
def matcher() -> CategoryMatcher:
    return CategoryMatcher(build_registry())


def _names(matcher: CategoryMatcher, raw: str) -> list[str]:
    return [m.definition.display_name for m in matcher.match(normalize_line(raw))]


def test_simple_line_matches_first_category(matcher: CategoryMatcher):
    matches = matcher.match(normalize_line("2020-01-01,Interest repayment,140.00,"))

    assert len(matches) == 1
    assert matches[0].definition.display_name == "Interest repayment"
    assert matches[0].value == Decimal("140.00")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2020-01-03,Early interest repayment for loan part 17,0.05,", "Early interest repayment"),
        ("2020-01-03,Early principal repayment for loan part 17,5.00,", "Early principal repayment"),
        ("2020-01-03,Principal recovery repayment for loan part 17,1.10,", "Principal recovery repayment"),
        ("2020-01-05,Loan offer on Acme Ltd - loan part 18,,20.0", "New loans made"),
        ("2020-01-09,Servicing fee for loan part 17,,0.02", "Fees"),
        ("2020-01-11,TRANSFERIN ORDERID: 42,100.00,", "Deposits"),
        ("2020-01-21,FC Len Withdrawal,,30.00", "Withdrawals"),
    ],
)
def test_ordinary_categories(matcher: CategoryMatcher, raw: str, expected: str):
    assert _names(matcher, raw) == [expected]


def test_loan_part_principal_and_interest_are_told_apart(matcher: CategoryMatcher):
    description = '"Loan Part ID 123456 : Principal 20.00, Interest 0.05, Delta 0.00, Fee 0.00"'

    assert _names(matcher, f"2019-06-30,{description},20.0,") == ["Principal credit"]
    assert _names(matcher, f"2019-06-30,{description},0.05,") == ["Interest credit"]
    assert _names(matcher, f"2019-06-30,{description},,20.0") == ["Principal debit"]
    assert _names(matcher, f"2019-06-30,{description},,0.05") == ["Interest debit"]


def test_zero_debit_with_zero_delta_and_fee_goes_to_historical_delta(matcher: CategoryMatcher):
    raw = '2019-06-30,"Loan Part ID 123456 : Principal 20.00, Interest 0.05, Delta 0.00, Fee 0.00",,0.0'

    # Both delta and fee sub-values satisfy the line; registry order decides.
    assert _names(matcher, raw) == ["Historical delta"]
    assert _names(matcher, raw) == ["Historical delta"]


def test_zero_fee_only_goes_to_historical_fees(matcher: CategoryMatcher):
    raw = '2019-06-30,"Loan Part ID 123456 : Principal 20.00, Interest 0.05, Delta 0.50, Fee 0.00",,0.0'

    assert _names(matcher, raw) == ["Historical fees"]


def test_loan_capital_only_line(matcher: CategoryMatcher):
    raw = (
        '2020-01-10,"Loan Part ID 555 : Principal £20.00, Interest £0.00, '
        'Transfer payment £0.00",,20.0'
    )

    assert _names(matcher, raw) == ["Loan part purchase (post-cutover)"]


def test_composite_line_contributes_to_two_categories(matcher: CategoryMatcher):
    raw = (
        '2019-12-16,"Loan Part ID 7654321 : Principal £0.00, Interest £0.15, '
        'Transfer payment -£0.45",0.3,'
    )
    matches = matcher.match(normalize_line(raw))

    assert [(m.definition.display_name, m.value) for m in matches] == [
        ("Transfer payment credit (post-cutover)", Decimal("0.30")),
        ("Accrued interest debit (post-cutover)", Decimal("0.15")),
    ]


def test_unrecognised_line_has_no_match(matcher: CategoryMatcher):
    assert matcher.match(normalize_line("2020-01-15,Goodwill gesture,5.00,")) == ()


def test_deposit_names_are_recognised():
    raw = "2020-01-02,J SMITH REF 1234,100.00,"

    assert CategoryMatcher(build_registry()).match(normalize_line(raw)) == ()
    named = CategoryMatcher(build_registry(["J SMITH"]))
    assert [m.definition.display_name for m in named.match(normalize_line(raw))] == ["Deposits"]
