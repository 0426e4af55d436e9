"""
Unit tests for HoldingService.

Tests cover:
- Add, update and delete with validation
- Snapshot recorded after every mutation
- Change notifications and unsubscribe
- Background quote refresh
- Persistence failures surfaced as error state
- CSV import/export, backup/restore and reset
"""

import asyncio
import json
import pytest
from decimal import Decimal

from networth.core.exceptions import NotFoundError, ValidationError
from networth.domain.models import (
    Category,
    ChangeKind,
    Currency,
    IntValue,
    Market,
    PortfolioSnapshot,
    TextValue,
)
from networth.repositories.serialization import holding_to_dict
from networth.repositories.sqlalchemy.orm_models import KeyValueBlobORM
from networth.repositories.sqlalchemy.portfolio_store import HOLDINGS_KEY
from networth.services import (
    HistoryTracker,
    HoldingCreate,
    HoldingService,
    HoldingUpdate,
    QuoteCache,
    ValuationEngine,
)

from tests.conftest import FailingPortfolioStore, GatedQuoteProvider, local_datetime, make_cash


def equity_create(symbol: str, shares: int, market: Market = Market.TW) -> HoldingCreate:
    return HoldingCreate(
        category=Category.EQUITY,
        name=symbol,
        value=Decimal(shares),
        extras={
            "symbol": TextValue(symbol),
            "shares": IntValue(shares),
            "market": TextValue(market.value),
        },
    )


@pytest.fixture
def events(holding_service) -> list:
    received = []
    holding_service.subscribe(received.append)
    return received


# =============================================================================
# MUTATION TESTS
# =============================================================================


class TestAddHolding:
    """Tests for add_holding."""

    def test_add_persists_and_snapshots(self, holding_service, portfolio_store, fixed_now):
        """
        GIVEN an empty portfolio
        WHEN I add cash of 30,000
        THEN it is stored and a 30,000 snapshot is recorded
        """
        holding = holding_service.add_holding(
            HoldingCreate(category=Category.CASH, name="Bank", value=Decimal("30000"))
        )

        assert holding_service.holdings() == [holding]
        assert [h.holding_id for h in portfolio_store.load_holdings()] == [holding.holding_id]
        snapshots = holding_service.snapshots()
        assert len(snapshots) == 1
        assert snapshots[0].total_value == Decimal("30000")
        assert snapshots[0].taken_at == fixed_now
        assert len(portfolio_store.load_snapshots()) == 1

    def test_add_notifies(self, holding_service, events):
        holding = holding_service.add_holding(
            HoldingCreate(category=Category.CASH, name="Bank", value=Decimal("1"))
        )

        assert events[-1].kind == ChangeKind.HOLDING_ADDED
        assert events[-1].holding_id == holding.holding_id

    def test_blank_name_rejected(self, holding_service):
        with pytest.raises(ValidationError):
            holding_service.add_holding(HoldingCreate(category=Category.CASH, name="  "))

    def test_negative_value_rejected(self, holding_service):
        with pytest.raises(ValidationError):
            holding_service.add_holding(
                HoldingCreate(category=Category.CASH, name="Bank", value=Decimal("-5"))
            )
        assert holding_service.holdings() == []

    def test_created_at_kept_when_given(self, holding_service):
        created = local_datetime(2024, 1, 1)

        holding = holding_service.add_holding(
            HoldingCreate(category=Category.CASH, name="Bank", created_at=created)
        )

        assert holding.created_at == created


class TestUpdateDeleteHolding:
    """Tests for update_holding and delete_holding."""

    def test_partial_update(self, holding_service, events):
        """
        GIVEN a cash holding
        WHEN I update only its value
        THEN the name is unchanged and a new snapshot reflects the value
        """
        holding = holding_service.add_holding(
            HoldingCreate(category=Category.CASH, name="Bank", value=Decimal("100"))
        )

        updated = holding_service.update_holding(holding.holding_id, HoldingUpdate(value=Decimal("250")))

        assert updated.name == "Bank"
        assert updated.value == Decimal("250")
        assert holding_service.snapshots()[-1].total_value == Decimal("250")
        assert events[-1].kind == ChangeKind.HOLDING_UPDATED

    def test_update_rejects_negative_without_changes(self, holding_service):
        holding = holding_service.add_holding(
            HoldingCreate(category=Category.CASH, name="Bank", value=Decimal("100"))
        )

        with pytest.raises(ValidationError):
            holding_service.update_holding(
                holding.holding_id, HoldingUpdate(name="New", value=Decimal("-1"))
            )
        assert holding.name == "Bank"

    def test_update_unknown_id(self, holding_service):
        with pytest.raises(NotFoundError):
            holding_service.update_holding("missing", HoldingUpdate(name="X"))

    def test_delete(self, holding_service, events):
        holding = holding_service.add_holding(
            HoldingCreate(category=Category.CASH, name="Bank", value=Decimal("100"))
        )

        holding_service.delete_holding(holding.holding_id)

        assert holding_service.holdings() == []
        assert holding_service.snapshots()[-1].total_value == Decimal("0")
        assert events[-1].kind == ChangeKind.HOLDING_DELETED

    def test_delete_unknown_id(self, holding_service):
        with pytest.raises(NotFoundError):
            holding_service.delete_holding("missing")


# =============================================================================
# QUERY TESTS
# =============================================================================


class TestQueries:
    """Tests for filtered and sorted views."""

    def test_filter_and_sort(self, holding_service):
        holding_service.add_holding(
            HoldingCreate(category=Category.CASH, name="A", value=Decimal("5"),
                          created_at=local_datetime(2025, 1, 1))
        )
        holding_service.add_holding(
            HoldingCreate(category=Category.FUND, name="B", value=Decimal("50"),
                          created_at=local_datetime(2025, 3, 1))
        )
        holding_service.add_holding(
            HoldingCreate(category=Category.CASH, name="C", value=Decimal("20"),
                          created_at=local_datetime(2025, 2, 1))
        )

        assert [h.name for h in holding_service.holdings(Category.CASH)] == ["A", "C"]
        assert [h.name for h in holding_service.holdings_sorted_by_value()] == ["B", "C", "A"]
        assert [h.name for h in holding_service.holdings_sorted_by_date(ascending=True)] == ["A", "C", "B"]
        assert holding_service.total_value(Category.CASH) == Decimal("25")
        assert holding_service.total_net_worth() == Decimal("75")

    def test_get_unknown(self, holding_service):
        with pytest.raises(NotFoundError):
            holding_service.get_holding("missing")

    def test_category_growth_against_last_month(
        self, portfolio_store, quote_cache, valuation_engine, clock
    ):
        """
        GIVEN a May snapshot of 1,000 and a cash holding of 1,100 in June
        WHEN I ask for the growth of cash and of funds
        THEN cash grew 10% and funds (now empty) are down 100%
        """
        portfolio_store.save_snapshots(
            [PortfolioSnapshot(taken_at=local_datetime(2025, 5, 20), total_value=Decimal("1000"))]
        )
        service = HoldingService(
            store=portfolio_store,
            quote_cache=quote_cache,
            valuation_engine=valuation_engine,
            history_tracker=HistoryTracker(clock=clock),
            clock=clock,
        )
        service.add_holding(HoldingCreate(category=Category.CASH, name="Bank", value=Decimal("1100")))

        assert service.category_growth_rate(Category.CASH) == Decimal("10")
        assert service.category_growth_rate(Category.FUND) == Decimal("-100")

    def test_category_growth_without_baseline(self, holding_service):
        holding_service.add_holding(HoldingCreate(category=Category.CASH, name="Bank", value=Decimal("5")))

        assert holding_service.category_growth_rate(Category.CASH) == Decimal("0")


# =============================================================================
# QUOTE REFRESH TESTS
# =============================================================================


class TestQuoteRefresh:
    """Tests for background quote refreshes."""

    @pytest.mark.asyncio
    async def test_mutation_spawns_refresh(self, holding_service, quote_cache, events):
        """
        GIVEN a running event loop
        WHEN I add a 2330 holding of 200 shares
        THEN a refresh runs in the background and valuation becomes live
        """
        holding_service.add_holding(equity_create("2330", 200))
        # Snapshot is taken with the quotes known at mutation time
        assert holding_service.snapshots()[-1].total_value == Decimal("200")

        refreshed = await holding_service.wait_for_refresh()

        assert refreshed == {"2330.TW"}
        assert quote_cache.current_price("2330.TW") == Decimal("600")
        assert holding_service.total_net_worth() == Decimal("120000")
        assert events[-1].kind == ChangeKind.QUOTES_REFRESHED

    @pytest.mark.asyncio
    async def test_refresh_quotes_awaits_result(self, holding_service):
        holding_service.add_holding(equity_create("AMD", 10, Market.US))

        refreshed = await holding_service.refresh_quotes()

        assert refreshed == {"AMD"}

    def test_no_loop_skips_refresh(self, holding_service, stub_provider):
        holding_service.add_holding(equity_create("2330", 200))

        assert stub_provider.calls == []

    @pytest.mark.asyncio
    async def test_wait_without_refresh(self, holding_service):
        assert await holding_service.wait_for_refresh() == set()


# =============================================================================
# PERSISTENCE FAILURE TESTS
# =============================================================================


class TestPersistenceFailures:
    """Tests for storage errors surfaced as state, not exceptions."""

    def _service(self, store, quote_cache, valuation_engine, history_tracker, clock):
        return HoldingService(
            store=store,
            quote_cache=quote_cache,
            valuation_engine=valuation_engine,
            history_tracker=history_tracker,
            clock=clock,
        )

    def test_failed_save_sets_error_and_keeps_memory(
        self, quote_cache, valuation_engine, history_tracker, clock
    ):
        """
        GIVEN a store whose writes fail
        WHEN I add a holding
        THEN the holding stays in memory, error is set and an ERROR event is emitted
        """
        service = self._service(FailingPortfolioStore(), quote_cache, valuation_engine, history_tracker, clock)
        received = []
        service.subscribe(received.append)

        service.add_holding(HoldingCreate(category=Category.CASH, name="Bank", value=Decimal("1")))

        assert len(service.holdings()) == 1
        assert service.error == "Disk full"
        assert ChangeKind.ERROR in [e.kind for e in received]
        assert received[-1].kind == ChangeKind.HOLDING_ADDED

    def test_corrupt_store_loads_empty(self, quote_cache, valuation_engine, history_tracker, clock):
        service = self._service(
            FailingPortfolioStore(fail_loads=True), quote_cache, valuation_engine, history_tracker, clock
        )

        assert service.holdings() == []
        assert service.snapshots() == []
        assert service.error is not None

    def test_invalid_stored_holding_loads_empty(
        self, portfolio_store, test_session, quote_cache, valuation_engine, history_tracker, clock
    ):
        """
        GIVEN stored holdings that are valid JSON but hold a negative value
        WHEN the service is constructed
        THEN it starts with no holdings and reports the error
        """
        document = holding_to_dict(make_cash("1"))
        document["value"] = "-5"
        test_session.add(KeyValueBlobORM(key=HOLDINGS_KEY, payload=json.dumps([document])))
        test_session.commit()

        service = self._service(portfolio_store, quote_cache, valuation_engine, history_tracker, clock)

        assert service.holdings() == []
        assert "corrupt" in service.error

    def test_reload_restores_saved_state(self, holding_service, portfolio_store, quote_cache,
                                         valuation_engine, clock):
        holding_service.add_holding(HoldingCreate(category=Category.CASH, name="Bank", value=Decimal("9")))
        reloaded = self._service(portfolio_store, quote_cache, valuation_engine, HistoryTracker(clock=clock), clock)

        assert [h.name for h in reloaded.holdings()] == ["Bank"]
        assert len(reloaded.snapshots()) == 1
        assert reloaded.error is None


# =============================================================================
# SUBSCRIPTION TESTS
# =============================================================================


class TestSubscriptions:
    """Tests for subscribe/unsubscribe."""

    def test_unsubscribe_stops_events(self, holding_service):
        received = []
        unsubscribe = holding_service.subscribe(received.append)
        unsubscribe()

        holding_service.add_holding(HoldingCreate(category=Category.CASH, name="Bank"))

        assert received == []

    def test_failing_listener_does_not_break_mutation(self, holding_service, events):
        def broken(event):
            raise RuntimeError("boom")

        holding_service.subscribe(broken)

        holding_service.add_holding(HoldingCreate(category=Category.CASH, name="Bank"))

        assert len(holding_service.holdings()) == 1
        assert events[-1].kind == ChangeKind.HOLDING_ADDED


# =============================================================================
# TRANSFER TESTS
# =============================================================================


class TestTransfer:
    """Tests for CSV, backup/restore and reset."""

    def test_import_appends_and_snapshots_once(self, holding_service, sample_csv_content, events):
        holding_service.add_holding(HoldingCreate(category=Category.CASH, name="Existing", value=Decimal("1")))

        summary = holding_service.import_from_csv(sample_csv_content)

        assert summary.imported_count == 5
        assert len(holding_service.holdings()) == 6
        assert len(holding_service.snapshots()) == 2
        assert events[-1].kind == ChangeKind.IMPORTED

    def test_import_nothing_valid_does_not_mutate(self, holding_service, events):
        summary = holding_service.import_from_csv("類別,名稱,數量,建立於,備註\n???,x,1,2025/6/5,\n")

        assert summary.skipped_count == 1
        assert holding_service.snapshots() == []
        assert events == []

    def test_export(self, holding_service):
        holding_service.add_holding(HoldingCreate(category=Category.CASH, name="Bank", value=Decimal("30000")))

        text = holding_service.export_to_csv()

        assert "現金,Bank,30000," in text

    def test_backup_and_restore(self, holding_service, events):
        """
        GIVEN a backup of one holding
        WHEN I reset and restore the backup
        THEN the holding and snapshots are back
        """
        holding = holding_service.add_holding(
            HoldingCreate(category=Category.CASH, name="Chase", value=Decimal("100"), currency=Currency.USD)
        )
        backup = holding_service.create_backup()
        holding_service.reset_all()

        holding_service.restore_backup(backup)

        restored = holding_service.get_holding(holding.holding_id)
        assert restored.currency == Currency.USD
        assert len(holding_service.snapshots()) == 1
        assert events[-1].kind == ChangeKind.RESTORED

    def test_restore_invalid_backup(self, holding_service):
        with pytest.raises(ValidationError):
            holding_service.restore_backup({"version": 1})

    def test_reset_clears_everything(self, holding_service, portfolio_store, events):
        holding_service.add_holding(HoldingCreate(category=Category.CASH, name="Bank", value=Decimal("1")))

        holding_service.reset_all()

        assert holding_service.holdings() == []
        assert holding_service.snapshots() == []
        assert portfolio_store.load_holdings() == []
        assert portfolio_store.load_snapshots() == []
        assert events[-1].kind == ChangeKind.RESET

    @pytest.mark.asyncio
    async def test_reset_discards_inflight_quotes(self, portfolio_store, clock):
        """
        GIVEN an AMD holding whose background quote fetch is still in flight
        WHEN I reset everything and the feed then answers
        THEN the late price is not cached
        """
        provider = GatedQuoteProvider()
        cache = QuoteCache(provider=provider, retry_delay_seconds=0, clock=clock)
        service = HoldingService(
            store=portfolio_store,
            quote_cache=cache,
            valuation_engine=ValuationEngine(quote_cache=cache),
            history_tracker=HistoryTracker(clock=clock),
            clock=clock,
        )
        service.add_holding(equity_create("AMD", 120, Market.US))
        for _ in range(10):
            await asyncio.sleep(0)
        assert provider.pending("AMD") == 1

        service.reset_all()
        provider.release("AMD", Decimal("170"))
        for _ in range(10):
            await asyncio.sleep(0)

        assert service.holdings() == []
        assert provider.pending("AMD") == 0
        assert cache.current_price("AMD") is None

    def test_imported_usd_cash_valued_in_twd(self, holding_service):
        holding_service.import_from_csv(
            "類別,名稱,數量,建立於,備註\n現金,Chase,100,2025/6/5,USD\n"
        )

        assert holding_service.total_net_worth() == Decimal("3150")
