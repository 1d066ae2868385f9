"""
Client matching for extracted purchase documents.

Loads active clients from the store and links a freshly extracted PO or
proforma invoice to one of them, pre-filling the client's business terms.
"""

from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config.logging import get_logger
from config.settings import settings
from processing.client_matching.matchers import (
    Candidate,
    ClientNameMatcher,
    MatchResult,
    MatchSuggestion,
)
from processing.models import Client, ClientStatus

logger = get_logger("client_matching")


def extract_client_name(extracted: dict[str, Any]) -> str:
    """
    Pick the client name out of an extraction payload.

    Checked in order: clientName, client.name, buyer.name, shipTo.company.
    """
    if extracted.get("clientName"):
        return extracted["clientName"]

    for section, key in (("client", "name"), ("buyer", "name"), ("shipTo", "company")):
        value = extracted.get(section)
        if isinstance(value, dict) and value.get(key):
            return value[key]

    return ""


class ClientMatchingService:
    """
    Links extracted documents to known clients.

    Usage:
        service = ClientMatchingService()
        clients = service.load_clients_for_matching(db)
        enriched = service.process_extracted_data(extracted, clients)
        if enriched["clientMatch"]["found"]:
            ...
    """

    def __init__(self, matcher: Optional[ClientNameMatcher] = None):
        self.matcher = matcher or ClientNameMatcher(
            threshold=settings.CLIENT_MATCH_THRESHOLD,
            suggestion_threshold=settings.CLIENT_SUGGESTION_THRESHOLD,
        )

    def find_best_match(self, raw_name: Optional[str], clients: Sequence[Candidate]) -> MatchResult:
        return self.matcher.find_best_match(raw_name, clients)

    def get_match_suggestions(
        self,
        raw_name: Optional[str],
        clients: Sequence[Candidate],
        limit: Optional[int] = None,
    ) -> list[MatchSuggestion]:
        if limit is None:
            limit = settings.CLIENT_SUGGESTION_LIMIT
        return self.matcher.get_match_suggestions(raw_name, clients, limit)

    def load_clients_for_matching(self, db: Session) -> list[Candidate]:
        """
        Load all active clients as match candidates, ordered by name.

        Returns an empty list if the store cannot be read, so callers fall
        back to manual client entry.
        """
        stmt = (
            select(Client)
            .where(Client.status == ClientStatus.ACTIVE)
            .order_by(Client.name, Client.id)
        )
        try:
            clients = db.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Error loading clients for matching: {e}")
            return []

        logger.debug(f"Loaded {len(clients)} active clients for matching")
        return [client.to_candidate() for client in clients]

    def process_extracted_data(
        self,
        extracted: dict[str, Any],
        clients: Sequence[Candidate],
    ) -> dict[str, Any]:
        """
        Match the extracted client and enrich the payload.

        Args:
            extracted: Data from document extraction (not modified)
            clients: Candidate clients

        Returns:
            Copy of ``extracted`` with a ``clientMatch`` block and, on a
            match, the client's contact details and business terms filled in
        """
        client_name = extract_client_name(extracted)
        logger.info(f"Attempting to match client: '{client_name}'")

        result = self.find_best_match(client_name, clients)

        if result.is_match:
            match = result.match
            logger.info(
                f"Found match: '{match.name}' "
                f"({result.confidence}% confidence, {result.match_type.value})"
            )
            return {
                **extracted,
                "clientMatch": {
                    "found": True,
                    "clientId": match.id,
                    "clientName": match.name,
                    "shortName": match.short_name,
                    "confidence": result.confidence,
                    "matchType": result.match_type.value,
                    "originalExtractedName": client_name,
                },
                "clientId": match.id,
                "clientName": match.name,
                "clientShortName": match.short_name,
                "clientEmail": match.email or extracted.get("clientEmail") or "",
                "clientPhone": match.phone or extracted.get("clientPhone") or "",
                "paymentTerms": (
                    match.payment_terms
                    or extracted.get("paymentTerms")
                    or settings.DEFAULT_PAYMENT_TERMS
                ),
                "deliveryTerms": (
                    match.delivery_terms
                    or extracted.get("deliveryTerms")
                    or settings.DEFAULT_DELIVERY_TERMS
                ),
                "currency": (
                    match.currency
                    or extracted.get("currency")
                    or settings.DEFAULT_CURRENCY
                ),
            }

        logger.info(
            f"No match found for: '{client_name}' (best score: {result.confidence}%)"
        )
        suggestions = self.get_match_suggestions(client_name, clients)
        return {
            **extracted,
            "clientMatch": {
                "found": False,
                "confidence": result.confidence,
                "matchType": result.match_type.value,
                "originalExtractedName": client_name,
                "suggestedAction": "manual_entry",
                "suggestions": [s.to_dict() for s in suggestions],
            },
        }
