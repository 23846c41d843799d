"""Line normalizer: raw statement line -> :class:`StatementLine`.

A raw transaction line has four comma-separated columns::

    Date,Description,Paid In,Paid Out

The description is double-quoted when it contains commas, which loan-part
lines always do::

    2019-06-30,"Loan Part ID 123456 : Principal 20.00, Interest 0.05, Delta 0.00, Fee 0.00",20.0,

The rewrite steps run in a fixed order:

1. Inside the quoted description, every ``\\s*[,:]\\s*`` becomes ``:``. A
   quoted value column (``"1,000.00"``) loses its quotes and thousands
   separators instead.
2. ``Loan Part ID`` becomes ``Loan_Part_ID``.
3. Post-cutover loan-part lines (figures quoted with ``£``) that carry both an
   interest and a transfer payment figure are apportioned into the two value
   columns and flagged composite.
4. Missing trailing columns are added and empty columns become ``0.00``.
5. One-decimal column values gain their trailing zero.

Only step 3 can fail hard (:class:`MalformedLineError`). A line that is still
not ``date,description,number,number`` afterwards raises
:class:`UnparseableLineError`, which the aggregator treats like any other
unclassifiable line.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal

from .errors import MalformedLineError, UnparseableLineError
from .logging_setup import get_logger
from .models import Column, StatementLine, to_money

logger = get_logger("fc_statements.normalize")

CURRENCY = "£"
_COLUMN_COUNT = 4

_TRANSACTION_LINE_RE = re.compile(r"^\d{4}-\d{2}-\d{2},")
_QUOTED_SEPARATOR_RE = re.compile(r"\s*[,:]\s*")
_QUOTED_AMOUNT_RE = re.compile(r"\s*-?\d[\d,]*(?:\.\d+)?\s*")
_EMPTY_FIELD_RE = re.compile(r",(?=,|$)")
_ONE_DECIMAL_RE = re.compile(r"(\.\d)(?=,|$)")
_AMOUNT_RE = re.compile(r"-?\d+(?:\.\d+)?")
_SUBFIELD_RE = re.compile(
    r"^(?P<label>[A-Za-z][A-Za-z ]*?)\s*"
    rf"(?P<sign>-?){CURRENCY}(?P<sign2>-?)(?P<amount>\d+(?:\.\d+)?)$"
)


def is_transaction_line(raw: str) -> bool:
    """Return True when ``raw`` starts with a ``YYYY-MM-DD,`` date column."""

    return _TRANSACTION_LINE_RE.match(raw) is not None


def _is_amount(field: str) -> bool:
    return _AMOUNT_RE.fullmatch(field.strip()) is not None


def _is_amount_or_blank(field: str) -> bool:
    return not field.strip() or _is_amount(field)


def _columns(text: str) -> tuple[str, str, str, str]:
    """Split ``text`` into ``(date, description, paid_in, paid_out)``.

    Accepts the statement layout as well as ``date,paid_in,paid_out,description``.
    Missing trailing columns are returned as empty strings.
    """

    fields = text.split(",")
    if len(fields) < _COLUMN_COUNT:
        fields += [""] * (_COLUMN_COUNT - len(fields))
    value_first = _is_amount_or_blank(fields[1]) and not _is_amount_or_blank(fields[3])
    if len(fields) == _COLUMN_COUNT and value_first:
        return fields[0], fields[3], fields[1], fields[2]
    # An unquoted description can only hold extra commas if the export was
    # hand-edited; keep them inside the description.
    return fields[0], ",".join(fields[1:-2]), fields[-2], fields[-1]


def _unquote(text: str) -> str:
    parts = text.split('"')
    for i in range(1, len(parts), 2):
        if _QUOTED_AMOUNT_RE.fullmatch(parts[i]):
            parts[i] = parts[i].replace(",", "").strip()
        else:
            parts[i] = _QUOTED_SEPARATOR_RE.sub(":", parts[i])
    return "".join(parts)


def _pad_columns(text: str) -> str:
    missing = _COLUMN_COUNT - (text.count(",") + 1)
    return text + "," * missing if missing > 0 else text


def _fmt(value: Decimal) -> str:
    return f"{to_money(value):.2f}"


def _subfields(description: str) -> dict[str, Decimal]:
    """Map lower-cased labels of ``Label £1.23`` sub-fields to signed values."""

    found: dict[str, Decimal] = {}
    for part in description.split(":"):
        m = _SUBFIELD_RE.match(part.strip())
        if m is None:
            continue
        amount = Decimal(m.group("amount"))
        if m.group("sign") or m.group("sign2"):
            amount = -amount
        found[m.group("label").strip().lower()] = amount
    return found


def _canonical_description(description: str, values: dict[str, Decimal]) -> str:
    """Rewrite currency sub-fields as ``Label £0.00`` / ``Label -£0.00``.

    Labels are sentence-cased (``Transfer Payment`` -> ``Transfer payment``).
    """

    parts = []
    for part in description.split(":"):
        m = _SUBFIELD_RE.match(part.strip())
        if m is None:
            parts.append(part)
            continue
        label = m.group("label").strip()
        value = values[label.lower()]
        sign = "-" if value.is_signed() else ""
        parts.append(f"{label.capitalize()} {sign}{CURRENCY}{_fmt(abs(value))}")
    return ":".join(parts)


def _apportion(text: str, raw: str) -> tuple[str, bool]:
    """Split a post-cutover loan-part line into its credit and debit halves.

    Returns the rewritten line and whether it is a composite (two-category)
    line. Lines without a currency marker and loan-capital-only lines (the
    interest and transfer payment both quoted as ``£0.00``) are left as they
    are apart from canonical sub-field formatting.
    """

    day, description, paid_in, paid_out = _columns(text)
    if CURRENCY not in description or not description.startswith("Loan_Part_ID"):
        return text, False

    values = _subfields(description)
    missing = [k for k in ("interest", "transfer payment") if k not in values]
    if missing:
        raise MalformedLineError(
            "post-cutover loan part line is missing sub-field(s): " + ", ".join(missing),
            line=raw,
        )
    description = _canonical_description(description, values)
    interest = values["interest"]
    transfer = values["transfer payment"]

    if interest == 0 and transfer == 0:
        # Loan capital only: the value columns already carry the figure.
        return ",".join((day, description, paid_in, paid_out)), False

    if transfer.is_signed():
        # Purchase: the transfer payment net of the accrued interest is
        # credited, the accrued interest paid to the seller is debited.
        credit = abs(transfer) - interest
        debit = interest
    else:
        # Sale: mirror of the purchase rule. No sale has been observed since
        # the cutover, so this branch is unverified.
        logger.warning("Apportioning loan sale line with an unverified rule: %s", raw)
        credit = interest
        debit = transfer - interest
    return ",".join((day, description, _fmt(credit), _fmt(debit))), True


def _side(paid_in: str, paid_out: str) -> Column | None:
    has_in, has_out = bool(paid_in.strip()), bool(paid_out.strip())
    if has_in and not has_out:
        return Column.CREDIT
    if has_out and not has_in:
        return Column.DEBIT
    return None


def normalize_text(raw: str) -> tuple[str, bool, Column | None]:
    """Apply the rewrite steps to ``raw``.

    Returns ``(normalized_line, composite, side)``; see :class:`StatementLine`
    for the meaning of ``side``.
    """

    text = raw.rstrip("\r\n")
    if '"' in text:
        text = _unquote(text)
    text = _pad_columns(text.replace("Loan Part ID", "Loan_Part_ID"))
    _, _, paid_in, paid_out = _columns(text)
    side = _side(paid_in, paid_out)
    text, composite = _apportion(text, raw)
    if composite:
        side = None
    text = _EMPTY_FIELD_RE.sub(",0.00", text)
    text = _ONE_DECIMAL_RE.sub(r"\g<1>0", text)
    return text, composite, side


def normalize_line(raw: str) -> StatementLine:
    """Normalize and parse one transaction line.

    Raises
    ------
    MalformedLineError
        A post-cutover loan-part line lacks the sub-fields needed to
        apportion it.
    UnparseableLineError
        The line has no valid date or lacks two numeric value columns.
    """

    text, composite, side = normalize_text(raw)
    day, description, paid_in, paid_out = _columns(text)
    try:
        when = date.fromisoformat(day)
    except ValueError as exc:
        raise UnparseableLineError(f"invalid transaction date {day!r}", line=raw) from exc
    if not (_is_amount(paid_in) and _is_amount(paid_out)):
        raise UnparseableLineError("line does not have two numeric value columns", line=raw)
    return StatementLine(
        date=when,
        description=description,
        credit=to_money(paid_in.strip()),
        debit=to_money(paid_out.strip()),
        text=text,
        composite=composite,
        side=side,
    )


__all__ = ["CURRENCY", "is_transaction_line", "normalize_line", "normalize_text"]
