"""Enumeration types for statement RAG data models."""

from enum import Enum


class ChunkType(str, Enum):
    ACCOUNT_SUMMARY = "account_summary"
    TRANSACTION_BREAKDOWN = "transaction_breakdown"
    TRANSACTIONS = "transactions"
    TOP_EXPENSES = "top_expenses"
    MONTHLY_SUMMARY = "monthly_summary"
    CATEGORY_SUMMARY = "category_summary"
    TOP_BENEFICIARIES = "top_beneficiaries"

    @property
    def id_kind(self) -> str:
        """Short kind used inside chunk IDs (``{source_id}_{kind}_{ordinal}``)."""
        return _ID_KINDS[self]

    @property
    def display_name(self) -> str:
        return _TITLES[self]


_ID_KINDS = {
    ChunkType.ACCOUNT_SUMMARY: "summary",
    ChunkType.TRANSACTION_BREAKDOWN: "breakdown",
    ChunkType.TRANSACTIONS: "transactions",
    ChunkType.TOP_EXPENSES: "top_expenses",
    ChunkType.MONTHLY_SUMMARY: "monthly",
    ChunkType.CATEGORY_SUMMARY: "categories",
    ChunkType.TOP_BENEFICIARIES: "beneficiaries",
}

_TITLES = {
    ChunkType.ACCOUNT_SUMMARY: "Account Summary",
    ChunkType.TRANSACTION_BREAKDOWN: "Transaction Breakdown",
    ChunkType.TRANSACTIONS: "Transactions",
    ChunkType.TOP_EXPENSES: "Top Expenses",
    ChunkType.MONTHLY_SUMMARY: "Monthly Summary",
    ChunkType.CATEGORY_SUMMARY: "Category Summary",
    ChunkType.TOP_BENEFICIARIES: "Top Beneficiaries",
}


class QueryType(str, Enum):
    CALCULATION = "calculation"
    COMPARISON = "comparison"
    LISTING = "listing"
    SPECIFIC = "specific"
    TREND = "trend"
