"""
Client name matching strategies.

Resolves a free-text client name (as extracted from a purchase order or
proforma invoice) to one of a list of known clients.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence

from rapidfuzz.distance import Levenshtein


class MatchType(Enum):
    """Strategy that produced a match."""
    EXACT = "exact"            # Normalized names are identical
    SHORT_NAME = "shortName"   # Query equals or overlaps the client's short name
    CONTAINS = "contains"      # One normalized name contains the other
    FUZZY = "fuzzy"            # Levenshtein similarity
    TOKEN = "token"            # Jaccard similarity of name words
    NONE = "none"


@dataclass(frozen=True)
class Candidate:
    """A known client the matcher may resolve a raw name to."""
    id: str
    name: str
    short_name: Optional[str] = None

    # Profile fields, carried through for enrichment only
    email: Optional[str] = None
    phone: Optional[str] = None
    payment_terms: Optional[str] = None
    delivery_terms: Optional[str] = None
    currency: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Candidate":
        """Build a candidate from a client record (camelCase or snake_case keys)."""

        def pick(*keys: str) -> Optional[str]:
            for key in keys:
                value = data.get(key)
                if value not in (None, ""):
                    return str(value)
            return None

        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            short_name=pick("shortName", "short_name"),
            email=pick("email"),
            phone=pick("phone"),
            payment_terms=pick("paymentTerms", "payment_terms"),
            delivery_terms=pick("deliveryTerms", "delivery_terms"),
            currency=pick("currency"),
        )


@dataclass
class MatchResult:
    """Result of a client matching attempt."""
    match: Optional[Candidate] = None
    confidence: int = 0
    match_type: MatchType = MatchType.NONE

    @property
    def is_match(self) -> bool:
        return self.match is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "match": self.match.id if self.match else None,
            "confidence": self.confidence,
            "matchType": self.match_type.value,
        }

    def __repr__(self) -> str:
        if self.match:
            return f"<MatchResult({self.match.name}, {self.match_type.value}, conf={self.confidence})>"
        return f"<MatchResult(no match, conf={self.confidence})>"


@dataclass(frozen=True)
class MatchSuggestion:
    """A near-miss candidate offered for manual selection."""
    id: str
    name: str
    short_name: Optional[str]
    confidence: int
    match_type: MatchType

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "shortName": self.short_name,
            "confidence": self.confidence,
            "matchType": self.match_type.value,
        }


# Legal-entity designators, matched as whole words. Word edges are the same
# characters that are turned into spaces afterwards, so stripping commutes
# with punctuation cleanup.
_EDGE = r"\s.,\-_()"
LEGAL_SUFFIX_PATTERN = re.compile(
    rf"(?<![^{_EDGE}])"
    r"(?:sdn\.?\s*bhd|bhd|plt|llc|inc|corp|ltd|pte|co)\.?"
    rf"(?![^{_EDGE}])",
    re.IGNORECASE,
)
PUNCTUATION_PATTERN = re.compile(r"[.,\-_()]")
WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize_name(name: Optional[str]) -> str:
    """
    Normalize a company name for comparison.

    - Lowercase and trim
    - Remove legal-entity suffixes (Sdn Bhd, Bhd, PLT, LLC, Inc, Corp, Ltd, Pte, Co)
    - Turn . , - _ ( ) into spaces
    - Collapse whitespace

    Normalizing an already-normalized name returns it unchanged.
    """
    if not name:
        return ""

    normalized = name.lower().strip()

    # Repeat until stable: removing one designator can expose another
    # ("sdn co bhd" -> "sdn bhd" -> "")
    while True:
        normalized, count = LEGAL_SUFFIX_PATTERN.subn(" ", normalized)
        if not count:
            break

    normalized = PUNCTUATION_PATTERN.sub(" ", normalized)
    normalized = WHITESPACE_PATTERN.sub(" ", normalized)
    return normalized.strip()


def _round_half_up(value: float) -> int:
    # Scores are non-negative, so this matches the usual "x.5 rounds up".
    return int(math.floor(value + 0.5))


def contains_score(str1: str, str2: str) -> int:
    """
    Score a containment match (70-95), proportional to how much of the
    longer name the shorter one covers. Returns 0 if neither contains the other.
    """
    longer = str1 if len(str1) > len(str2) else str2
    shorter = str2 if len(str1) > len(str2) else str1

    if shorter in longer:
        ratio = len(shorter) / len(longer)
        return _round_half_up(70 + ratio * 25)
    return 0


def fuzzy_score(str1: str, str2: str) -> int:
    """Levenshtein similarity as a 0-100 score."""
    max_length = max(len(str1), len(str2))
    if max_length == 0:
        return 100

    distance = Levenshtein.distance(str1, str2)
    return _round_half_up(((max_length - distance) / max_length) * 100)


def _tokens(value: str) -> set[str]:
    return {token for token in value.split() if len(token) > 2}


def token_score(str1: str, str2: str) -> int:
    """Jaccard similarity of name words longer than two characters (0-100)."""
    tokens1 = _tokens(str1)
    tokens2 = _tokens(str2)

    if not tokens1 or not tokens2:
        return 0

    intersection = tokens1 & tokens2
    union = tokens1 | tokens2
    return _round_half_up((len(intersection) / len(union)) * 100)


class ClientNameMatcher:
    """
    Matches a raw client name against known clients.

    Strategies, in priority order per candidate:
    1. Exact normalized name - returns immediately with confidence 100
    2. Short name equality or overlap - 95
    3. Containment - 70 to 95
    4. Levenshtein similarity
    5. Token (Jaccard) similarity

    The highest score over all candidates and strategies wins; a later
    strategy or candidate replaces the running best only with a strictly
    greater score. Matches below ``threshold`` are reported as no match,
    with the best score still in ``confidence``.

    Stateless: instances can be shared between threads.
    """

    def __init__(self, threshold: int = 70, suggestion_threshold: int = 40):
        """
        Initialize client name matcher.

        Args:
            threshold: Minimum score (0-100) to accept a match
            suggestion_threshold: Minimum score (0-100) to offer a suggestion
        """
        self.threshold = threshold
        self.suggestion_threshold = suggestion_threshold

    def find_best_match(
        self,
        raw_name: Optional[str],
        candidates: Sequence[Candidate],
    ) -> MatchResult:
        """
        Find the best matching client for an extracted name.

        Args:
            raw_name: Client name from document extraction
            candidates: Known clients, in priority order for ties

        Returns:
            MatchResult with the matched candidate, confidence and strategy
        """
        if not raw_name or not raw_name.strip() or not candidates:
            return MatchResult()

        query = normalize_name(raw_name)
        if not query:
            # Nothing left after removing designators ("Sdn. Bhd.")
            return MatchResult()

        best_match: Optional[Candidate] = None
        best_score = 0
        best_type = MatchType.NONE

        for candidate in candidates:
            name = normalize_name(candidate.name)
            if query == name:
                return MatchResult(
                    match=candidate, confidence=100, match_type=MatchType.EXACT
                )

            short_name = normalize_name(candidate.short_name)
            if short_name and (
                query == short_name or short_name in query or query in short_name
            ):
                if 95 > best_score:
                    best_match, best_score, best_type = candidate, 95, MatchType.SHORT_NAME

            if name and (name in query or query in name):
                score = contains_score(query, name)
                if score > best_score:
                    best_match, best_score, best_type = candidate, score, MatchType.CONTAINS

            score = fuzzy_score(query, name)
            if score > best_score:
                best_match, best_score, best_type = candidate, score, MatchType.FUZZY

            score = token_score(query, name)
            if score > best_score:
                best_match, best_score, best_type = candidate, score, MatchType.TOKEN

        if best_score >= self.threshold:
            return MatchResult(
                match=best_match, confidence=best_score, match_type=best_type
            )

        return MatchResult(confidence=best_score)

    def get_match_suggestions(
        self,
        raw_name: Optional[str],
        candidates: Sequence[Candidate],
        limit: int = 3,
    ) -> list[MatchSuggestion]:
        """
        Rank near-miss candidates for manual selection.

        Only edit-distance and token similarity are used, so that names which
        almost match are surfaced rather than re-confirming strong matches.

        Returns:
            Up to ``limit`` suggestions, highest confidence first
        """
        if not raw_name or not raw_name.strip() or not candidates or limit <= 0:
            return []

        query = normalize_name(raw_name)
        if not query:
            return []

        scored: list[MatchSuggestion] = []
        for candidate in candidates:
            name = normalize_name(candidate.name)
            fuzzy = fuzzy_score(query, name)
            token = token_score(query, name)
            combined = max(fuzzy, token)

            if combined >= self.suggestion_threshold:
                scored.append(MatchSuggestion(
                    id=candidate.id,
                    name=candidate.name,
                    short_name=candidate.short_name,
                    confidence=combined,
                    match_type=MatchType.FUZZY if fuzzy >= token else MatchType.TOKEN,
                ))

        # sorted() is stable, so equal scores keep input order
        scored = sorted(scored, key=lambda s: s.confidence, reverse=True)
        return scored[:limit]


_default_matcher = ClientNameMatcher()


def find_best_match(raw_name: Optional[str], candidates: Sequence[Candidate]) -> MatchResult:
    """Resolve ``raw_name`` with the default thresholds (accept at 70)."""
    return _default_matcher.find_best_match(raw_name, candidates)


def get_match_suggestions(
    raw_name: Optional[str],
    candidates: Sequence[Candidate],
    limit: int = 3,
) -> list[MatchSuggestion]:
    """Suggest near matches with the default threshold (40)."""
    return _default_matcher.get_match_suggestions(raw_name, candidates, limit)
