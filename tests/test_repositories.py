"""
Tests for the document store and record repositories.

Uses both the in-memory store and SQLite in-memory database.
"""
import json
import logging
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from treeshop.domain.entities.employee import Employee, EmployeeStatus
from treeshop.domain.entities.invoice import Invoice, InvoiceStatus
from treeshop.domain.entities.lead import Lead, LeadStatus
from treeshop.domain.entities.pricing import PackageTier, PricingSettings, RateTable
from treeshop.domain.entities.proposal import Proposal, ProposalStatus
from treeshop.domain.entities.work_order import WorkOrder
from treeshop.domain.exceptions import RecordNotFoundError
from treeshop.infrastructure import (
    EmployeeRepository,
    InMemoryDocumentStore,
    InvoiceRepository,
    LeadRepository,
    PricingRepository,
    ProposalRepository,
    SqlDocumentStore,
    WorkOrderRepository,
)
from treeshop.models import init_db

NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def sql_store():
    """Create a SQLite in-memory document store for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    init_db(bind=engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield SqlDocumentStore(session)
    session.close()


@pytest.fixture(params=["memory", "sql"])
def store(request, sql_store):
    if request.param == "memory":
        return InMemoryDocumentStore()
    return sql_store


# =============================================================================
# Document Store
# =============================================================================

class TestDocumentStore:
    """Tests for DocumentStore implementations."""

    def test_missing_key(self, store):
        assert store.get("nothing") is None

    def test_put_and_overwrite(self, store):
        store.put("k", b"one")
        store.put("k", b"two")
        assert store.get("k") == b"two"

    def test_delete(self, store):
        store.put("k", b"one")
        assert store.delete("k") is True
        assert store.delete("k") is False
        assert store.get("k") is None


# =============================================================================
# Collection Repositories
# =============================================================================

class TestCollectionRepository:
    """Tests for JsonCollectionRepository CRUD and queries."""

    def test_add_and_get(self, store):
        repo = LeadRepository(store)
        lead = Lead(customer_first_name="Dana", estimated_value=Decimal("1200.50"))
        repo.add(lead)

        loaded = repo.get(lead.id)
        assert loaded.customer_first_name == "Dana"
        assert loaded.estimated_value == Decimal("1200.50")
        assert repo.get(str(lead.id)).id == lead.id

    def test_empty_collection(self, store):
        assert LeadRepository(store).list_all() == []

    def test_update(self, store):
        repo = LeadRepository(store)
        lead = repo.add(Lead(customer_first_name="Dana"))
        lead.transition_to(LeadStatus.CONTACTED)
        repo.update(lead)
        assert repo.get(lead.id).status == LeadStatus.CONTACTED

    def test_update_missing(self, store):
        with pytest.raises(RecordNotFoundError):
            LeadRepository(store).update(Lead())

    def test_require(self, store):
        repo = LeadRepository(store)
        with pytest.raises(RecordNotFoundError) as exc_info:
            repo.require(uuid4())
        assert exc_info.value.record_type == "Lead"
        with pytest.raises(RecordNotFoundError):
            repo.require("not-a-uuid")

    def test_delete(self, store):
        repo = LeadRepository(store)
        lead = repo.add(Lead())
        assert repo.delete(lead.id) is True
        assert repo.delete(lead.id) is False
        assert repo.list_all() == []

    def test_search(self, store):
        repo = LeadRepository(store)
        repo.add(Lead(customer_first_name="Dana", customer_last_name="Reyes"))
        repo.add(Lead(customer_first_name="Sam", project_description="Palmetto clearing"))

        assert [l.customer_first_name for l in repo.search("REYES")] == ["Dana"]
        assert [l.customer_first_name for l in repo.search("palmetto")] == ["Sam"]
        assert len(repo.search("")) == 2

    def test_collections_are_separate(self, store):
        LeadRepository(store).add(Lead())
        assert ProposalRepository(store).list_all() == []

    def test_undecodable_collection(self, store, caplog):
        store.put("leads", b"{not json")
        with caplog.at_level(logging.WARNING):
            assert LeadRepository(store).list_all() == []
        assert "treating as empty" in caplog.text

    def test_write_replaces_undecodable_collection(self, store):
        store.put("leads", b"[{\"id\": \"broken\"}]")
        repo = LeadRepository(store)
        repo.add(Lead(customer_first_name="Dana"))
        assert len(repo.list_all()) == 1


class TestRecordQueries:
    """Tests for record-specific queries."""

    def test_expired_proposals(self, store):
        repo = ProposalRepository(store)
        expired = repo.add(Proposal(valid_until=NOW - timedelta(days=1)))
        repo.add(Proposal(valid_until=NOW + timedelta(days=1)))
        repo.add(Proposal(valid_until=NOW - timedelta(days=1), status=ProposalStatus.ACCEPTED))

        assert [p.id for p in repo.get_expired(NOW)] == [expired.id]

    def test_overdue_work_orders(self, store):
        repo = WorkOrderRepository(store)
        late = repo.add(WorkOrder(scheduled_end_date=NOW - timedelta(hours=1)))
        repo.add(WorkOrder())
        assert [w.id for w in repo.get_overdue(NOW)] == [late.id]

    def test_invoices_by_effective_status(self, store):
        repo = InvoiceRepository(store)
        overdue = repo.add(Invoice(
            total_amount=Decimal("100"), status=InvoiceStatus.SENT, due_date=NOW - timedelta(days=1),
        ))
        repo.add(Invoice(
            total_amount=Decimal("100"), status=InvoiceStatus.SENT, due_date=NOW + timedelta(days=1),
        ))

        assert [i.id for i in repo.by_effective_status(InvoiceStatus.OVERDUE, NOW)] == [overdue.id]
        assert len(repo.by_status(InvoiceStatus.SENT)) == 2

    def test_available_employees(self, store):
        repo = EmployeeRepository(store)
        active = repo.add(Employee(first_name="Ana"))
        repo.add(Employee(first_name="Bo", status=EmployeeStatus.ON_LEAVE))
        assert [e.id for e in repo.get_available()] == [active.id]


# =============================================================================
# Pricing Repository
# =============================================================================

class TestPricingRepository:
    """Tests for PricingRepository."""

    def test_defaults_when_nothing_saved(self, store):
        rate_table, settings = PricingRepository(store).load()
        assert rate_table.base_rate == Decimal("2500.0")
        assert settings.final_markup_multiplier == Decimal("1.15")

    def test_save_and_load(self, store):
        repo = PricingRepository(store)
        rate_table = RateTable()
        rate_table.set_rate(PackageTier.LARGE, Decimal("3600"))
        rate_table.set_base_rate(Decimal("2700"))
        settings = PricingSettings(final_markup_multiplier=Decimal("1.2"), business_name="Acme Mulching")
        repo.save(rate_table, settings)

        loaded_table, loaded_settings = repo.load()
        assert loaded_table.base_rate == Decimal("2700")
        assert loaded_table.is_overridden(PackageTier.LARGE)
        assert loaded_table.rate_for(PackageTier.LARGE) == Decimal("3600")
        assert loaded_settings.final_markup_multiplier == Decimal("1.2")
        assert loaded_settings.business_name == "Acme Mulching"

    def test_stored_as_json(self, store):
        PricingRepository(store).save(RateTable(), PricingSettings())
        data = json.loads(store.get("pricing"))
        assert set(data) == {"rate_table", "settings"}

    def test_corrupt_document_falls_back(self, store, caplog):
        store.put("pricing", b'{"rate_table": {"rates": {"gigantic": "1"}}, "settings": {}}')
        with caplog.at_level(logging.WARNING):
            rate_table, _ = PricingRepository(store).load()
        assert rate_table.base_rate == Decimal("2500.0")
        assert "using configured defaults" in caplog.text

    def test_missing_section_falls_back(self, store):
        store.put("pricing", b'{"rate_table": {}}')
        _, settings = PricingRepository(store).load()
        assert settings.deposit_percentage == Decimal("0.25")
