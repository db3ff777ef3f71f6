"""Rule-based query expansion for recall.

Heuristic and deliberately low-precision: the only guarantees are that the
original query is always the first variant and that no two variants are
duplicates (case- and whitespace-insensitive).
"""

import logging
import re

logger = logging.getLogger(__name__)

# "Tell me about X", "What do you know about X", "Was ist über X", "Parle-moi de X"
_ABOUT_PATTERN = re.compile(
    r"^(?:what|tell\s+me|can\s+you\s+tell\s+me|could\s+you\s+tell\s+me|explain|describe"
    r"|what\s+do\s+you\s+know|info(?:rmation)?|erzähl\s+mir|was\s+weißt\s+du|parle[- ]moi"
    r"|dime|háblame|vertel\s+me)\b.*?\b"
    r"(?:about|regarding|concerning|on|über|zu|sur|de|sobre|over)\s+(?P<topic>.+)$",
    re.IGNORECASE,
)

# "What is X" / "What are X" / "What's X"
_WHAT_IS_PATTERN = re.compile(
    r"^what(?:'s|\s+is|\s+are|\s+was|\s+were)\s+(?P<topic>.+)$",
    re.IGNORECASE,
)

_OVERVIEW_PATTERN = re.compile(
    r"\b(?:overview|introduction|intro|summary|summari[sz]e|basics|getting\s+started"
    r"|high[- ]level|in\s+general|general\s+information|überblick|einführung|aperçu|resumen)\b",
    re.IGNORECASE,
)

_LEADING_ARTICLES = re.compile(r"^(?:the|a|an)\s+", re.IGNORECASE)

# Topic keyword → related-term variants
_RELATED_TERMS: dict[str, tuple[str, ...]] = {
    "vacation": ("paid time off policy", "holiday and leave allowance"),
    "pto": ("paid time off policy", "vacation days"),
    "holiday": ("public holidays calendar", "vacation policy"),
    "leave": ("leave of absence policy", "sick leave and parental leave"),
    "sick": ("sick leave policy", "absence reporting"),
    "benefits": ("employee benefits package", "health insurance coverage"),
    "insurance": ("health insurance coverage", "employee benefits package"),
    "salary": ("compensation and pay", "payroll schedule"),
    "pay": ("payroll schedule", "compensation and pay"),
    "payroll": ("payroll schedule", "payslips"),
    "expense": ("expense reimbursement policy", "travel and expense claims"),
    "travel": ("travel policy", "expense reimbursement policy"),
    "remote": ("remote work policy", "working from home"),
    "onboarding": ("new hire onboarding checklist", "first week orientation"),
    "password": ("IT security policy", "account access and passwords"),
    "security": ("IT security policy", "data protection guidelines"),
    "laptop": ("IT equipment policy", "hardware request process"),
    "hr": ("human resources contacts", "people team"),
    "contact": ("who to contact", "team directory"),
    "office": ("office locations and hours", "workplace facilities"),
    "mission": ("company mission and values", "about the company"),
    "values": ("company mission and values", "company culture"),
    "company": ("about the company", "company mission and values"),
}

_WORD_RE = re.compile(r"[\w']+", re.UNICODE)
_TRAILING_PUNCTUATION = " \t\n?!.,;:"


class QueryExpander:
    """Derives query variants to widen vector-search recall."""

    def __init__(self, max_variants: int = 8):
        self._max_variants = max(max_variants, 1)

    def expand(self, query_text: str) -> list[str]:
        """Return ordered, de-duplicated variants; the original query always comes first."""
        original = query_text.strip()
        variants: list[str] = []
        seen: set[str] = set()

        def add(candidate: str) -> None:
            candidate = " ".join(candidate.split())
            key = candidate.casefold()
            if not candidate or key in seen or len(variants) >= self._max_variants:
                return
            seen.add(key)
            variants.append(candidate)

        add(original)
        if not variants:
            return variants

        topic = self._extract_topic(original)
        if topic:
            add(topic)

        if _OVERVIEW_PATTERN.search(original):
            add(f"overview {original}")
            add(f"introduction {original}")

        words = {w.casefold() for w in _WORD_RE.findall(original)}
        for keyword, related in _RELATED_TERMS.items():
            if keyword in words or f"{keyword}s" in words:
                for term in related:
                    add(term)

        logger.debug("Expanded %r into %d variants: %s", original, len(variants), variants)
        return variants

    @staticmethod
    def _extract_topic(query: str) -> str | None:
        """Bare topic from 'what is / tell me about' questions."""
        stripped = query.strip(_TRAILING_PUNCTUATION)
        for pattern in (_ABOUT_PATTERN, _WHAT_IS_PATTERN):
            match = pattern.match(stripped)
            if match:
                topic = _LEADING_ARTICLES.sub("", match.group("topic").strip(_TRAILING_PUNCTUATION))
                return topic or None
        return None
