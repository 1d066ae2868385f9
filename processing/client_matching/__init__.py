"""
Client Matching Module

Links names extracted from purchase documents to known clients using:
- Exact and short-name matching on normalized names
- Containment scoring
- Fuzzy matching (Levenshtein via rapidfuzz) and token overlap
"""

from processing.client_matching.matchers import (
    Candidate,
    ClientNameMatcher,
    MatchResult,
    MatchSuggestion,
    MatchType,
    find_best_match,
    get_match_suggestions,
    normalize_name,
)
from processing.client_matching.service import ClientMatchingService

__all__ = [
    "Candidate",
    "ClientMatchingService",
    "ClientNameMatcher",
    "MatchResult",
    "MatchSuggestion",
    "MatchType",
    "find_best_match",
    "get_match_suggestions",
    "normalize_name",
]
