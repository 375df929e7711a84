"""Shared fixtures: a deterministic keyword embedder and sample statements."""

import re
import threading
import time

import pytest

from config.settings import Settings
from statement_rag.embedding.client import EmbeddingClient
from statement_rag.embedding.provider import EmbeddingProvider
from statement_rag.errors import EmbeddingError
from statement_rag.pipeline.manager import StatementRAGManager
from statement_rag.vectorstore.memory_store import InMemoryVectorStore

# One dimension per known word; unknown words carry no weight
VOCAB = [
    "total", "expense", "expenses", "income", "balance", "account", "summary",
    "transaction", "transactions", "breakdown", "payment", "method", "amount",
    "date", "type", "category", "merchant", "debit", "credit", "upi", "neft",
    "food", "rent", "shopping", "salary", "monthly", "top", "beneficiaries",
    "savings", "opening", "closing", "net", "rate", "period", "customer",
]
VOCAB_INDEX = {word: i for i, word in enumerate(VOCAB)}
DIMS = len(VOCAB)


def keyword_vector(text: str) -> list[float]:
    vector = [0.0] * DIMS
    for word in re.findall(r"[a-z]+", text.lower()):
        if word in VOCAB_INDEX:
            vector[VOCAB_INDEX[word]] += 1.0
    return vector


class KeywordEmbeddingProvider(EmbeddingProvider):
    """Bag-of-words embedder over VOCAB. Records calls and peak concurrency."""

    def __init__(self, fail_when=None, delay: float = 0.0):
        self.fail_when = fail_when
        self.delay = delay
        self.calls: list[str] = []
        self.max_in_flight = 0
        self._in_flight = 0
        self._lock = threading.Lock()

    @property
    def model_name(self) -> str:
        return "keyword-test"

    def embed(self, text: str) -> list[float]:
        with self._lock:
            self.calls.append(text)
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.fail_when is not None and self.fail_when(text):
                raise EmbeddingError("simulated embedding failure")
            return keyword_vector(text)
        finally:
            with self._lock:
                self._in_flight -= 1


def make_transactions(count: int) -> list[dict]:
    categories = ["Food", "Rent", "Shopping"]
    return [
        {
            "date": f"2024-{i // 28 % 12 + 1:02d}-{i % 28 + 1:02d}",
            "amount": 100 + i,
            "type": "credit" if i % 3 == 0 else "debit",
            "category": categories[i % 3],
            "merchant": f"Merchant {i}",
            "paymentMethod": "UPI",
        }
        for i in range(count)
    ]


@pytest.fixture
def sample_statement():
    """Account summary, breakdown and 72 transactions: 14 chunks with defaults."""
    return {
        "accountSummary": {
            "accountNumberMasked": "XXXX1234",
            "openingBalance": 50000,
            "closingBalance": 62000,
            "totalIncome": 150000,
            "totalExpense": 138000,
            "netSavings": 12000,
            "savingsRatePercent": 8,
        },
        "transactionBreakdown": {
            "UPI": {"amount": 90000, "count": 60},
            "NEFT": {"amount": 48000, "count": 12},
        },
        "transactions": make_transactions(72),
    }


@pytest.fixture
def full_statement():
    """A statement with every section populated."""
    return {
        "accountSummary": {
            "accountNumberMasked": "XXXX9876",
            "customerName": "A. Customer",
            "statementPeriod": "01-01-2024 to 31-03-2024",
            "openingBalance": 1000.5,
            "closingBalance": 2000,
            "totalIncome": 5000,
            "totalExpense": 4000.5,
            "totalInvestments": 500,
            "netSavings": 1000,
            "savingsRatePercent": 20,
        },
        "transactionBreakdown": {
            "UPI": {"amount": 3000, "count": 10},
            "IMPS": {"amount": 1000.5, "count": 2},
        },
        "transactions": make_transactions(8),
        "topExpenses": [
            {"merchant": "Landlord", "amount": 2000, "category": "Rent", "date": "2024-01-01"},
            {"merchant": "Grocer", "amount": 500, "category": "Food", "date": "2024-01-05"},
        ],
        "monthlySummary": [
            {"month": "Jan", "income": 2000, "expense": 1500, "closingBalance": 1500, "topCategory": "Rent"},
            {"month": "Feb", "income": 1500, "expense": 1200, "closingBalance": 1800, "topCategory": "Food"},
        ],
        "categorySummary": {"Food": 800, "Rent": 2000, "Shopping": 800},
        "topBeneficiaries": [
            {"name": "Landlord", "amount": 2000, "type": "rent"},
            {"name": "Parent", "amount": 700, "type": "family"},
        ],
    }


@pytest.fixture
def rag_settings():
    return Settings(rag_embedding_dims=DIMS, rag_vector_store_url="")


@pytest.fixture
def keyword_provider():
    return KeywordEmbeddingProvider()


@pytest.fixture
def memory_store():
    return InMemoryVectorStore(DIMS)


@pytest.fixture
def make_manager(rag_settings):
    """Build a manager over an in-memory store with a given provider."""

    def _make(provider=None, settings=None, store=None):
        settings = settings or rag_settings
        return StatementRAGManager(
            settings,
            embedding_client=EmbeddingClient(provider or KeywordEmbeddingProvider()),
            vector_store=store or InMemoryVectorStore(settings.rag_embedding_dims),
        )

    return _make
