#!/usr/bin/env python3
"""
Tests for extraction enrichment and the client store.
"""

import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

from processing.client_matching import Candidate, ClientMatchingService, ClientNameMatcher
from processing.client_matching.service import extract_client_name
from processing.models import Base, Client, ClientStatus


@pytest.fixture
def db():
    """In-memory client store."""
    engine = create_engine("sqlite://", future=True)
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def service():
    return ClientMatchingService(ClientNameMatcher(threshold=70, suggestion_threshold=40))


def setup_test_clients(db):
    """Create test clients."""
    clients = [
        Client(
            id="c-abc",
            name="ABC Manufacturing Sdn Bhd",
            short_name="ABC Mfg",
            email="purchasing@abc.com.my",
            phone="+60 3-1234 5678",
            payment_terms="Net 60",
            delivery_terms="FOB",
            currency="MYR",
        ),
        Client(
            id="c-daikin",
            name="Daikin Malaysia Sales Sdn Bhd",
            short_name="Daikin",
        ),
        Client(
            id="c-old",
            name="Acme Trading Co.",
            status=ClientStatus.INACTIVE,
        ),
    ]
    db.add_all(clients)
    db.commit()
    return clients


# --- extract_client_name -------------------------------------------------

@pytest.mark.parametrize(
    "extracted, expected",
    [
        ({"clientName": "ABC", "client": {"name": "Other"}}, "ABC"),
        ({"client": {"name": "A"}, "buyer": {"name": "B"}}, "A"),
        ({"clientName": "", "buyer": {"name": "B"}}, "B"),
        ({"shipTo": {"company": "C"}}, "C"),
        ({"client": None, "shipTo": {"company": "C"}}, "C"),
        ({}, ""),
    ],
)
def test_extract_client_name(extracted, expected):
    assert extract_client_name(extracted) == expected


# --- process_extracted_data ----------------------------------------------

def test_process_extracted_data_with_match(service):
    clients = [
        Candidate(
            id="c1",
            name="ABC Manufacturing",
            short_name="ABC",
            email="buy@abc.com",
            delivery_terms="FOB",
        ),
    ]
    extracted = {
        "clientName": "ABC Manufacturing Sdn Bhd",
        "poNumber": "PO-001",
        "paymentTerms": "Net 60",
    }

    enriched = service.process_extracted_data(extracted, clients)

    assert enriched["clientMatch"] == {
        "found": True,
        "clientId": "c1",
        "clientName": "ABC Manufacturing",
        "shortName": "ABC",
        "confidence": 100,
        "matchType": "exact",
        "originalExtractedName": "ABC Manufacturing Sdn Bhd",
    }
    assert enriched["poNumber"] == "PO-001"
    assert enriched["clientId"] == "c1"
    assert enriched["clientName"] == "ABC Manufacturing"
    assert enriched["clientShortName"] == "ABC"
    assert enriched["clientEmail"] == "buy@abc.com"
    assert enriched["clientPhone"] == ""
    # Client profile, then document, then configured default
    assert enriched["deliveryTerms"] == "FOB"
    assert enriched["paymentTerms"] == "Net 60"
    assert enriched["currency"] == "MYR"


def test_process_extracted_data_does_not_mutate_input(service):
    extracted = {"clientName": "ABC Manufacturing"}
    service.process_extracted_data(extracted, [Candidate(id="c1", name="ABC Manufacturing")])
    assert extracted == {"clientName": "ABC Manufacturing"}


def test_process_extracted_data_without_match(service):
    clients = [Candidate(id="1", name="ABC Manufacturing")]
    extracted = {"buyer": {"name": "ABX Manufacturers Group"}}

    enriched = service.process_extracted_data(extracted, clients)

    match = enriched["clientMatch"]
    assert match["found"] is False
    assert match["confidence"] == 61
    assert match["matchType"] == "none"
    assert match["originalExtractedName"] == "ABX Manufacturers Group"
    assert match["suggestedAction"] == "manual_entry"
    assert match["suggestions"] == [{
        "id": "1",
        "name": "ABC Manufacturing",
        "shortName": None,
        "confidence": 61,
        "matchType": "fuzzy",
    }]
    assert "clientId" not in enriched


def test_process_extracted_data_without_name(service):
    enriched = service.process_extracted_data(
        {"poNumber": "PO-002"}, [Candidate(id="1", name="ABC Manufacturing")]
    )
    assert enriched["clientMatch"]["found"] is False
    assert enriched["clientMatch"]["confidence"] == 0
    assert enriched["clientMatch"]["suggestions"] == []


# --- client store --------------------------------------------------------

def test_load_clients_for_matching(db, service):
    setup_test_clients(db)

    candidates = service.load_clients_for_matching(db)

    assert [c.id for c in candidates] == ["c-abc", "c-daikin"]
    abc = candidates[0]
    assert abc.short_name == "ABC Mfg"
    assert abc.payment_terms == "Net 60"
    assert abc.email == "purchasing@abc.com.my"
    # Column defaults
    assert candidates[1].payment_terms == "Net 30"
    assert candidates[1].delivery_terms == "DDP"


def test_load_clients_on_database_error(service):
    # No tables created
    engine = create_engine("sqlite://", future=True)
    session = sessionmaker(bind=engine)()
    try:
        assert service.load_clients_for_matching(session) == []
    finally:
        session.close()
        engine.dispose()


def test_end_to_end_from_store(db, service):
    setup_test_clients(db)
    clients = service.load_clients_for_matching(db)

    enriched = service.process_extracted_data({"clientName": "ABC Mfg"}, clients)
    assert enriched["clientMatch"]["matchType"] == "shortName"
    assert enriched["clientId"] == "c-abc"
    assert enriched["deliveryTerms"] == "FOB"

    # Inactive clients are never matched
    enriched = service.process_extracted_data({"clientName": "Acme Trading"}, clients)
    assert enriched["clientMatch"]["found"] is False


def test_import_clients(db):
    from import_clients import import_rows

    rows = [
        {"id": "c-1", "name": "ABC Manufacturing Sdn Bhd", "shortName": "ABC"},
        {"id": "", "name": "Daikin Malaysia", "status": "inactive"},
        {"id": "c-2", "name": ""},
        {"id": "c-1", "name": "ABC Manufacturing Sdn Bhd", "paymentTerms": "Net 45"},
    ]

    stats = import_rows(db, rows)

    assert stats == {"created": 2, "updated": 1, "skipped": 1}
    abc = db.get(Client, "c-1")
    assert abc.short_name == "ABC"
    assert abc.payment_terms == "Net 45"
    daikin = db.query(Client).filter(Client.name == "Daikin Malaysia").one()
    assert daikin.status == ClientStatus.INACTIVE


def test_import_clients_dry_run(db):
    from import_clients import import_rows

    stats = import_rows(db, [{"name": "New Client"}], dry_run=True)

    assert stats["created"] == 1
    assert db.query(Client).count() == 0


def test_reimport_without_status_keeps_inactive_client(db):
    from import_clients import import_rows

    import_rows(db, [{"id": "c-1", "name": "Old Co Trading", "status": "inactive"}])
    stats = import_rows(db, [
        {"id": "c-1", "name": "Old Co Trading", "paymentTerms": "Net 45"},
        {"id": "c-1", "name": "Old Co Trading", "status": "  "},
    ])

    assert stats == {"created": 0, "updated": 2, "skipped": 0}
    client = db.get(Client, "c-1")
    assert client.status == ClientStatus.INACTIVE
    assert client.payment_terms == "Net 45"

    # An explicit status still applies
    import_rows(db, [{"id": "c-1", "name": "Old Co Trading", "status": "Active"}])
    assert db.get(Client, "c-1").status == ClientStatus.ACTIVE


# --- CSV candidates ------------------------------------------------------

def test_load_candidates_from_csv(tmp_path, service):
    from match_client import load_candidates_from_csv

    path = tmp_path / "clients.csv"
    path.write_text(
        "id,name,shortName,paymentTerms,currency\n"
        "c-1,ABC Manufacturing Sdn Bhd,ABC Mfg,Net 60,\n"
        "c-2,,NONAME,,\n"
        "c-3,Daikin Malaysia Sales Sdn Bhd,,,USD\n",
        encoding="utf-8",
    )

    candidates = load_candidates_from_csv(path)

    assert [c.id for c in candidates] == ["c-1", "c-3"]
    assert candidates[0].short_name == "ABC Mfg"
    assert candidates[0].payment_terms == "Net 60"
    assert candidates[0].currency is None
    assert candidates[1].short_name is None
    assert candidates[1].currency == "USD"

    result = service.find_best_match("ABC Mfg", candidates)
    assert result.match.id == "c-1"
    assert result.match_type.value == "shortName"


# --- database / logging helpers ------------------------------------------

@pytest.mark.parametrize(
    "url, expected",
    [
        ("sqlite://", None),
        ("sqlite:///:memory:", None),
        ("postgresql://user:pw@localhost/higgsflow", None),
    ],
)
def test_sqlite_directory_without_file(url, expected):
    from processing.database import sqlite_directory

    assert sqlite_directory(url) is expected


def test_sqlite_directory_for_file(tmp_path):
    from processing.database import sqlite_directory

    db_file = tmp_path / "store" / "clients.db"
    assert sqlite_directory(f"sqlite:///{db_file}") == db_file.parent.resolve()


def test_session_scope_closes_session(monkeypatch):
    from processing import database

    closed = []

    class FakeSession:
        def close(self):
            closed.append(True)

    monkeypatch.setattr(database, "SessionLocal", FakeSession)

    with database.session_scope() as session:
        assert isinstance(session, FakeSession)
    assert closed == [True]


def test_module_loggers_share_application_handlers():
    from config.logging import ROOT_LOGGER_NAME, get_logger
    from processing.client_matching import service as service_module

    assert service_module.logger.name == f"{ROOT_LOGGER_NAME}.client_matching"
    assert get_logger("client_matching") is service_module.logger
    assert service_module.logger.parent.name == ROOT_LOGGER_NAME
