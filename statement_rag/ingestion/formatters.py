"""Text rendering for each statement section.

Every formatter returns ``None`` when the section has nothing usable, so the
chunker can skip it instead of emitting a header-only chunk.
"""

from collections.abc import Mapping
from typing import Any

CURRENCY_SYMBOL = "₹"

# Top-N lists are capped to keep the list chunks small
TOP_N_LIMIT = 10

# (label, key, kind) in display order
ACCOUNT_SUMMARY_FIELDS = [
    ("Account", "accountNumberMasked", "text"),
    ("Customer", "customerName", "text"),
    ("Period", "statementPeriod", "text"),
    ("Opening Balance", "openingBalance", "amount"),
    ("Closing Balance", "closingBalance", "amount"),
    ("Total Income", "totalIncome", "amount"),
    ("Total Expense", "totalExpense", "amount"),
    ("Total Investments", "totalInvestments", "amount"),
    ("Net Savings", "netSavings", "amount"),
    ("Savings Rate", "savingsRatePercent", "percent"),
]

TRANSACTION_FIELDS = [
    ("Date", "date", "text"),
    ("Amount", "amount", "amount"),
    ("Type", "type", "text"),
    ("Category", "category", "text"),
    ("Merchant", "merchant", "text"),
    ("Method", "paymentMethod", "text"),
    ("Narration", "narration", "text"),
]


def to_float(value: Any) -> float:
    """Best-effort numeric conversion; anything unparseable is 0."""
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = value.replace(",", "").replace(CURRENCY_SYMBOL, "").strip()
        try:
            return float(cleaned)
        except ValueError:
            return 0.0
    return 0.0


def to_int(value: Any) -> int:
    return int(to_float(value))


def to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def format_amount(value: Any) -> str:
    return f"{CURRENCY_SYMBOL}{to_float(value):.2f}"


def _render_field(value: Any, kind: str) -> str:
    if kind == "amount":
        return format_amount(value)
    if kind == "percent":
        return f"{to_float(value):.2f}%"
    return to_text(value)


def _has_value(value: Any) -> bool:
    return value is not None and value != ""


def format_account_summary(summary: Any) -> str | None:
    if not isinstance(summary, Mapping):
        return None
    parts = [
        f"{label}: {_render_field(summary[key], kind)}"
        for label, key, kind in ACCOUNT_SUMMARY_FIELDS
        if _has_value(summary.get(key))
    ]
    if not parts:
        return None
    return "\n".join(["Account Summary:", *parts])


def format_transaction_breakdown(breakdown: Any) -> str | None:
    if not isinstance(breakdown, Mapping):
        return None
    parts = []
    for method in sorted(breakdown, key=str):
        data = breakdown[method]
        if not isinstance(data, Mapping):
            continue
        amount = format_amount(data.get("amount"))
        count = to_int(data.get("count"))
        parts.append(f"{method}: {amount} ({count} transactions)")
    if not parts:
        return None
    return "\n".join(["Transaction Breakdown by Payment Method:", *parts])


def format_transaction(transaction: Any) -> str | None:
    """Render one transaction record as a single line."""
    if not isinstance(transaction, Mapping):
        return None
    parts = [
        f"{label}: {_render_field(transaction[key], kind)}"
        for label, key, kind in TRANSACTION_FIELDS
        if _has_value(transaction.get(key))
    ]
    if not parts:
        return None
    return " | ".join(parts)


def format_top_expenses(expenses: Any) -> str | None:
    if not isinstance(expenses, list):
        return None
    parts = []
    for expense in expenses:
        if len(parts) >= TOP_N_LIMIT:
            break
        if not isinstance(expense, Mapping):
            continue
        parts.append(
            f"{len(parts) + 1}. {to_text(expense.get('merchant'))} - "
            f"{format_amount(expense.get('amount'))} "
            f"({to_text(expense.get('category'))}) on {to_text(expense.get('date'))}"
        )
    if not parts:
        return None
    return "\n".join(["Top Expenses:", *parts])


def format_monthly_summary(monthly: Any) -> str | None:
    if not isinstance(monthly, list):
        return None
    parts = []
    for month in monthly:
        if not isinstance(month, Mapping):
            continue
        parts.append(
            f"{to_text(month.get('month'))}: "
            f"Income {format_amount(month.get('income'))}, "
            f"Expense {format_amount(month.get('expense'))}, "
            f"Balance {format_amount(month.get('closingBalance'))}, "
            f"Top Category: {to_text(month.get('topCategory'))}"
        )
    if not parts:
        return None
    return "\n".join(["Monthly Summary:", *parts])


def format_category_summary(categories: Any) -> str | None:
    """Render category totals, largest first (ties by name)."""
    if not isinstance(categories, Mapping):
        return None
    totals = []
    for category, value in categories.items():
        if isinstance(value, Mapping):
            value = value.get("amount")
        totals.append((str(category), to_float(value)))
    if not totals:
        return None
    totals.sort(key=lambda item: (-item[1], item[0]))
    parts = [f"{category}: {format_amount(amount)}" for category, amount in totals]
    return "\n".join(["Category Summary:", *parts])


def format_top_beneficiaries(beneficiaries: Any) -> str | None:
    if not isinstance(beneficiaries, list):
        return None
    parts = []
    for beneficiary in beneficiaries:
        if len(parts) >= TOP_N_LIMIT:
            break
        if not isinstance(beneficiary, Mapping):
            continue
        parts.append(
            f"{len(parts) + 1}. {to_text(beneficiary.get('name'))} - "
            f"{format_amount(beneficiary.get('amount'))} "
            f"({to_text(beneficiary.get('type'))})"
        )
    if not parts:
        return None
    return "\n".join(["Top Beneficiaries:", *parts])
