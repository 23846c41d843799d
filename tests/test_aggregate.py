from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal

import pytest
from conftest import HEADER, dedent

from fc_statements import (
    MalformedLineError,
    StatementAggregator,
    build_registry,
)

JANUARY = """
    2020-01-01,Interest repayment for loan part 1001,0.14,
    2020-01-02,Principal repayment for loan part 1001,2.50,
    2020-01-05,Loan offer on Acme Ltd - loan part 1002,,20.0
    2020-01-11,TRANSFERIN ORDERID: 123,100.00,
    2020-01-15,Servicing fee for loan part 1001,,0.02
    2020-01-20,Early interest repayment for loan part 1003,0.05,
    2020-01-25,FC Len Withdrawal,,30.00
    2020-01-31,Interest repayment for loan part 1001,0.21,
"""


@pytest.fixture
def aggregator() -> StatementAggregator:
    return StatementAggregator(build_registry())


def _sums(record) -> dict[str, tuple[Decimal, int]]:
    return {
        name: (r.sum_total, r.transaction_count)
        for name, r in record.results.items()
        if r.transaction_count
    }


def test_statement_is_aggregated(aggregator: StatementAggregator, write_statement):
    record = aggregator.aggregate(write_statement("2020-01", JANUARY))

    assert _sums(record) == {
        "Interest repayment": (Decimal("0.35"), 2),
        "Early interest repayment": (Decimal("0.05"), 1),
        "Principal repayment": (Decimal("2.50"), 1),
        "New loans made": (Decimal("-20.00"), 1),
        "Fees": (Decimal("-0.02"), 1),
        "Deposits": (Decimal("100.00"), 1),
        "Withdrawals": (Decimal("-30.00"), 1),
        "Net interest (derived)": (Decimal("0.40"), 3),
        "Net deposits (derived)": (Decimal("70.00"), 2),
    }
    assert record.total_lines == 8
    assert record.unclassified_lines == 0
    assert (record.earliest, record.latest) == (date(2020, 1, 1), date(2020, 1, 31))
    assert record.period == date(2020, 1, 1)
    assert record.downloaded_at == datetime(2020, 2, 1, 9, 30)
    assert record.title == "January 2020 Statement"
    assert record.table_name == "2020-01"
    assert record.warnings == []


def test_zero_debit_sums_are_not_negated(aggregator: StatementAggregator):
    record = aggregator.aggregate_lines(["2020-01-01,Interest repayment,0.14,"])

    assert record.results["Fees"].sum_total == Decimal("0.00")
    assert not record.results["Fees"].sum_total.is_signed()


def test_every_line_is_accounted_for(
    aggregator: StatementAggregator, caplog: pytest.LogCaptureFixture
):
    caplog.set_level(logging.ERROR, logger="fc_statements")
    lines = dedent(JANUARY).splitlines() + [
        '2019-12-16,"Loan Part ID 7654321 : Principal £0.00, Interest £0.15, '
        'Transfer payment -£0.45",0.3,',
        "2020-01-15,Goodwill gesture,5.00,",
    ]
    record = aggregator.aggregate_lines(lines)

    assert record.total_lines == 10
    assert record.composite_lines == 1
    assert record.unclassified_lines == 1
    counted = sum(
        r.transaction_count
        for d in aggregator.registry
        if not d.is_derived
        for r in [record.results[d.display_name]]
    )
    assert record.total_lines + record.composite_lines == counted + record.unclassified_lines

    assert record.results["Transfer payment credit (post-cutover)"].sum_total == Decimal("0.30")
    assert record.results["Accrued interest debit (post-cutover)"].sum_total == Decimal("-0.15")
    # Accrued interest paid out reduces net interest: 0.40 - 0.15.
    assert record.results["Net interest (derived)"].sum_total == Decimal("0.25")

    assert "The unexpected line is: 2020-01-15,Goodwill gesture,5.00," in caplog.text
    # Unclassified lines do not widen the date range.
    assert record.earliest == date(2019, 12, 16)
    assert record.latest == date(2020, 1, 31)


def test_unreadable_line_is_counted_and_the_statement_continues(
    aggregator: StatementAggregator, caplog: pytest.LogCaptureFixture
):
    caplog.set_level(logging.ERROR, logger="fc_statements")
    lines = [
        "2020-01-01,Interest repayment,0.14,",
        "2020-01-02,Interest repayment,n/a,",
        "2020-01-31,Interest repayment,1.23",
        '2020-01-31,TRANSFERIN ORDERID 9,"1,000.00",',
    ]
    record = aggregator.aggregate_lines(lines)

    assert record.total_lines == 4
    assert record.unclassified_lines == 1
    assert record.results["Interest repayment"].sum_total == Decimal("1.37")
    assert record.results["Interest repayment"].transaction_count == 2
    assert record.results["Deposits"].sum_total == Decimal("1000.00")
    assert "The unexpected line is: 2020-01-02,Interest repayment,n/a," in caplog.text
    assert "two numeric value columns" in caplog.text


def test_header_blank_and_non_transaction_lines_are_skipped(aggregator: StatementAggregator):
    lines = [HEADER, "", "   ", "Total,,100.00,50.00", "2020-01-01,Interest repayment,0.14,"]
    record = aggregator.aggregate_lines(lines)

    assert record.total_lines == 1
    assert record.results["Interest repayment"].sum_total == Decimal("0.14")


def test_malformed_line_reports_file_and_line_number(
    aggregator: StatementAggregator, write_statement
):
    path = write_statement(
        "2020-01",
        '2020-01-31,"Loan Part ID 7 : Principal £20.00, Interest £0.15",,0.15',
    )
    with pytest.raises(MalformedLineError) as excinfo:
        aggregator.aggregate(path)

    err = excinfo.value
    assert err.line_number == 2
    assert err.path == path.absolute()
    assert str(err).startswith(f"{path.name}:2: ")


def test_late_first_transaction_is_warned(aggregator: StatementAggregator, write_statement):
    body = """
        2020-01-05,Interest repayment for loan part 1001,0.14,
        2020-01-31,Interest repayment for loan part 1001,0.21,
    """
    record = aggregator.aggregate(write_statement("2020-01", body))

    assert record.warnings == [
        "Statement may not contain all transactions for the whole calendar month\n"
        "Statement contains transactions from 05 January 2020 to 31 January 2020"
    ]


def test_early_download_is_warned(aggregator: StatementAggregator, write_statement):
    body = """
        2020-01-01,Interest repayment for loan part 1001,0.14,
        2020-01-19,Interest repayment for loan part 1001,0.21,
    """
    path = write_statement("2020-01", body, downloaded="2020-01-20_10-00-00")
    record = aggregator.aggregate(path)

    assert record.warnings == [
        "Statement may not contain all transactions for the whole calendar month\n"
        "Statement was downloaded at 10:00:00 on 20 January 2020 and\n"
        "contains no recorded transactions after 19 January 2020."
    ]


def test_empty_statement_is_warned(aggregator: StatementAggregator, write_statement):
    path = write_statement("2020-02", "")
    record = aggregator.aggregate(path)

    assert not record.has_transactions
    assert record.total_lines == 0
    assert len(record.warnings) == 1
    assert record.warnings[0].endswith("Statement contains no recognised transactions")


def test_hand_named_file_has_no_period(aggregator: StatementAggregator, write_statement):
    path = write_statement("2020-01", JANUARY, name="january.csv")
    record = aggregator.aggregate(path)

    assert record.period is None
    assert record.title == "january.csv"
    assert record.table_name == "january"
    assert record.warnings == []
