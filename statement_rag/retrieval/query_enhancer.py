"""Financial-domain query expansion.

Appends synonyms for the financial terms found in a question so short
queries ("total expense") land closer to the wording used in chunk text.
"""

import re

# Original query plus at most this many expansion terms
MAX_EXTRA_TERMS = 5
MAX_HISTORY_TERMS = 3

EXPANSIONS: dict[str, list[str]] = {
    "total expense": ["total spending", "total expenditure", "sum of expenses", "expense total"],
    "income": ["salary", "credit", "deposit", "inflow", "earnings"],
    "transaction": ["payment", "transfer", "debit", "credit"],
    "category": ["type", "classification", "group", "spending category"],
    "merchant": ["vendor", "shop", "store", "beneficiary", "payee"],
    "month": ["monthly", "period", "monthly summary"],
    "highest": ["maximum", "max", "largest", "biggest", "top"],
    "lowest": ["minimum", "min", "smallest", "bottom"],
    "balance": ["account balance", "closing balance", "opening balance"],
    "expense": ["spending", "expenditure", "outflow", "debit"],
    "investment": ["savings", "deposit", "fixed deposit"],
    "upi": ["unified payments interface", "mobile payment"],
    "imps": ["immediate payment service", "bank transfer"],
    "neft": ["national electronic funds transfer"],
}

COMMON_WORDS = frozenset("""
    the a an is are was were be been being have has had do does did will would
    could should may might must can this that these those what which who whom
    where when why how my your his her its our their and or but if then else
    for with from to of in on at by about into
""".split())


class QueryEnhancer:
    """Expands queries with financial synonyms and recent conversation terms."""

    def enhance(self, query: str) -> str:
        lowered = query.lower()
        extra: list[str] = []
        for key, synonyms in EXPANSIONS.items():
            if key not in lowered:
                continue
            for synonym in synonyms:
                if synonym not in lowered and synonym not in extra:
                    extra.append(synonym)
        if not extra:
            return query
        return " ".join([query, *extra[:MAX_EXTRA_TERMS]])

    def enhance_with_history(self, query: str, history: list[str]) -> str:
        """Enhance a query and add salient terms from the last two messages."""
        enhanced = self.enhance(query)
        if not history:
            return enhanced
        terms = self.extract_important_terms(" ".join(history[-2:]))
        if terms:
            enhanced = " ".join([enhanced, *terms[:MAX_HISTORY_TERMS]])
        return enhanced

    def extract_important_terms(self, text: str) -> list[str]:
        """Amounts and longer words are most likely to name what was discussed."""
        terms = []
        for word in text.lower().split():
            word = word.strip(".,;:!?\"'()")
            if not word or word in COMMON_WORDS or word in terms:
                continue
            if "₹" in word or re.fullmatch(r"[\d,]+(\.\d+)?", word) or len(word) > 5:
                terms.append(word)
        return terms
