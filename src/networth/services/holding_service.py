"""Holding service: owns the holdings set and drives valuation, quotes and history."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Optional

from networth.core.exceptions import NotFoundError, PersistenceError, ValidationError
from networth.core.timezone import now_local
from networth.csv.exporter import CsvExporter
from networth.csv.importer import CsvImporter
from networth.domain.models import (
    Category,
    ChangeKind,
    Currency,
    ExtraValue,
    Holding,
    PortfolioSnapshot,
)
from networth.domain.views import (
    AllocationView,
    ChangeEvent,
    GrowthPoint,
    ImportSummary,
    PortfolioValuation,
)
from networth.repositories.protocols import PortfolioStore
from networth.repositories.serialization import (
    holding_from_dict,
    holding_to_dict,
    snapshot_from_dict,
    snapshot_to_dict,
)
from networth.services.history_tracker import HistoryTracker
from networth.services.quote_cache import QuoteCache
from networth.services.valuation_engine import ValuationEngine

logger = logging.getLogger(__name__)

ChangeListener = Callable[[ChangeEvent], None]

BACKUP_VERSION = 1


@dataclass
class HoldingCreate:
    """Input data for creating a holding."""

    category: Category
    name: str
    value: Decimal = Decimal("0")
    currency: Currency = Currency.TWD
    note: str = ""
    extras: Optional[dict[str, ExtraValue]] = None
    created_at: Optional[datetime] = None


@dataclass
class HoldingUpdate:
    """Partial update data for editing a holding."""

    name: Optional[str] = None
    value: Optional[Decimal] = None
    currency: Optional[Currency] = None
    note: Optional[str] = None
    extras: Optional[dict[str, ExtraValue]] = None


class HoldingService:
    """
    Single owner of the holdings set.

    Every mutation persists the holdings, spawns a background quote refresh
    (not awaited), appends a snapshot valued with the quotes cached at that
    moment, and notifies subscribers. Valuation right after a mutation may
    therefore still use stale quotes; subscribers get a QUOTES_REFRESHED
    event when the refresh lands.

    Persistence failures never raise out of a mutation: they are exposed via
    `error` and an ERROR event.
    """

    def __init__(
        self,
        store: PortfolioStore,
        quote_cache: QuoteCache,
        valuation_engine: ValuationEngine,
        history_tracker: HistoryTracker,
        csv_importer: Optional[CsvImporter] = None,
        csv_exporter: Optional[CsvExporter] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._quotes = quote_cache
        self._valuation = valuation_engine
        self._history = history_tracker
        self._importer = csv_importer or CsvImporter(clock=clock)
        self._exporter = csv_exporter or CsvExporter()
        self._clock = clock

        self._holdings: list[Holding] = []
        self._listeners: list[ChangeListener] = []
        self._refresh_task: Optional[asyncio.Task] = None
        self._background: set[asyncio.Task] = set()
        self._error: Optional[str] = None

        self.load()

    # State

    @property
    def error(self) -> Optional[str]:
        """Last persistence error, or None."""
        return self._error

    def load(self) -> None:
        """(Re)load holdings and snapshots. Falls back to empty on failure."""
        try:
            self._holdings = self._store.load_holdings()
        except PersistenceError as e:
            self._holdings = []
            self._fail(e.message)
        try:
            self._history.replace(self._store.load_snapshots())
        except PersistenceError as e:
            self._history.reset()
            self._fail(e.message)

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Queries

    def holdings(self, category: Optional[Category] = None) -> list[Holding]:
        if category is None:
            return list(self._holdings)
        return [h for h in self._holdings if h.category == category]

    def get_holding(self, holding_id: str) -> Holding:
        for holding in self._holdings:
            if holding.holding_id == holding_id:
                return holding
        raise NotFoundError("Holding", holding_id)

    def holdings_sorted_by_value(self, ascending: bool = False) -> list[Holding]:
        return sorted(self._holdings, key=lambda h: h.value, reverse=not ascending)

    def holdings_sorted_by_date(self, ascending: bool = False) -> list[Holding]:
        return sorted(self._holdings, key=lambda h: h.created_at, reverse=not ascending)

    def valuation(self) -> PortfolioValuation:
        return self._valuation.evaluate(self._holdings)

    def total_net_worth(self) -> Decimal:
        return self._valuation.total_net_worth(self._holdings)

    def total_by_category(self) -> dict[Category, Decimal]:
        return self._valuation.total_by_category(self._holdings)

    def total_value(self, category: Category) -> Decimal:
        return self._valuation.total_value(self._holdings, category)

    def allocation(self) -> AllocationView:
        return self._valuation.allocation(self._holdings)

    def monthly_growth_rate(self) -> Decimal:
        return self._history.monthly_growth_rate(self.total_net_worth())

    def category_growth_rate(self, category: Category) -> Decimal:
        """
        Growth of one category's gross total against last month's baseline.

        Snapshots only record portfolio totals, so the baseline is the same
        net-worth snapshot monthly_growth_rate() uses.
        """
        return self._history.monthly_growth_rate(self.total_value(category))

    def snapshots(self) -> list[PortfolioSnapshot]:
        return list(self._history.snapshots)

    def history_window(self, months: int) -> list[PortfolioSnapshot]:
        return self._history.history_window(months)

    def growth_series(self, months: int) -> list[GrowthPoint]:
        return self._history.growth_series(months)

    # Commands

    def add_holding(self, data: HoldingCreate) -> Holding:
        """Add a holding."""
        if not data.name.strip():
            raise ValidationError("Holding name is required")
        now = self._clock()
        holding = Holding(
            category=data.category,
            name=data.name.strip(),
            value=data.value,
            currency=data.currency,
            note=data.note,
            extras=dict(data.extras or {}),
            created_at=data.created_at or now,
            updated_at=now,
        )
        self._holdings.append(holding)
        self._after_mutation(ChangeKind.HOLDING_ADDED, holding.holding_id)
        return holding

    def update_holding(self, holding_id: str, data: HoldingUpdate) -> Holding:
        """Apply a partial update to a holding."""
        holding = self.get_holding(holding_id)

        if data.name is not None:
            if not data.name.strip():
                raise ValidationError("Holding name is required")
        if data.value is not None and data.value < 0:
            raise ValidationError(f"Holding value must not be negative: {data.value}")

        if data.name is not None:
            holding.name = data.name.strip()
        if data.value is not None:
            holding.value = data.value
        if data.currency is not None:
            holding.currency = data.currency
        if data.note is not None:
            holding.note = data.note
        if data.extras is not None:
            holding.extras = dict(data.extras)
        holding.updated_at = self._clock()

        self._after_mutation(ChangeKind.HOLDING_UPDATED, holding.holding_id)
        return holding

    def delete_holding(self, holding_id: str) -> None:
        holding = self.get_holding(holding_id)
        self._holdings.remove(holding)
        self._after_mutation(ChangeKind.HOLDING_DELETED, holding_id)

    def import_from_csv(self, text: str) -> ImportSummary:
        """Append every parseable row of a CSV document as a new holding."""
        imported, summary = self._importer.import_text(text)
        if imported:
            self._holdings.extend(imported)
            self._after_mutation(ChangeKind.IMPORTED)
        logger.info(
            "CSV import: %d imported, %d skipped",
            summary.imported_count, summary.skipped_count,
        )
        return summary

    def export_to_csv(self) -> str:
        return self._exporter.export_text(self._holdings)

    def reset_all(self) -> None:
        """Delete all holdings, snapshots and cached quotes."""
        self._error = None
        self.cancel_refresh()
        self._holdings = []
        self._history.reset()
        self._quotes.clear()
        try:
            self._store.clear_all()
        except PersistenceError as e:
            self._fail(e.message)
        self._emit(ChangeEvent(kind=ChangeKind.RESET))

    def create_backup(self) -> dict[str, Any]:
        """JSON-serialisable document of all holdings and snapshots."""
        return {
            "version": BACKUP_VERSION,
            "created_at": self._clock().isoformat(),
            "holdings": [holding_to_dict(h) for h in self._holdings],
            "snapshots": [snapshot_to_dict(s) for s in self._history.snapshots],
        }

    def restore_backup(self, payload: dict[str, Any]) -> None:
        """Replace all holdings and snapshots with the contents of a backup."""
        try:
            holdings = [holding_from_dict(d) for d in payload["holdings"]]
            snapshots = [snapshot_from_dict(d) for d in payload.get("snapshots", [])]
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise ValidationError(f"Invalid backup: {e}") from e

        self._error = None
        self._holdings = holdings
        self._history.replace(snapshots)
        self._save_holdings()
        self._save_snapshots()
        self.schedule_refresh()
        self._emit(ChangeEvent(kind=ChangeKind.RESTORED))

    # Quote refresh

    async def refresh_quotes(self) -> set[str]:
        """Refresh quotes for the current holdings and wait for the result."""
        task = self.schedule_refresh()
        if task is None:
            return set()
        return await self.wait_for_refresh()

    async def wait_for_refresh(self) -> set[str]:
        """Wait for the most recently spawned refresh. Returns refreshed symbols."""
        task = self._refresh_task
        if task is None:
            return set()
        await asyncio.wait({task})
        if task.cancelled():
            return set()
        return task.result()

    def schedule_refresh(self) -> Optional[asyncio.Task]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; quote refresh skipped")
            return None
        task = loop.create_task(self._refresh(list(self._holdings)))
        self._refresh_task = task
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _refresh(self, holdings: list[Holding]) -> set[str]:
        try:
            refreshed = await self._quotes.refresh_holdings(holdings)
        except Exception:
            logger.exception("Background quote refresh failed")
            return set()
        self._emit(ChangeEvent(kind=ChangeKind.QUOTES_REFRESHED))
        return refreshed

    def cancel_refresh(self) -> None:
        for task in list(self._background):
            task.cancel()
        self._refresh_task = None

    # Internals

    def _after_mutation(self, kind: ChangeKind, holding_id: Optional[str] = None) -> None:
        self._error = None
        self._save_holdings()
        self.schedule_refresh()
        self._history.record_snapshot(self.total_net_worth())
        self._save_snapshots()
        self._emit(ChangeEvent(kind=kind, holding_id=holding_id))

    def _save_holdings(self) -> None:
        try:
            self._store.save_holdings(self._holdings)
        except PersistenceError as e:
            self._fail(e.message)

    def _save_snapshots(self) -> None:
        try:
            self._store.save_snapshots(list(self._history.snapshots))
        except PersistenceError as e:
            self._fail(e.message)

    def _fail(self, message: str) -> None:
        logger.error("Persistence failure: %s", message)
        self._error = message
        self._emit(ChangeEvent(kind=ChangeKind.ERROR, error=message))

    def _emit(self, event: ChangeEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Change listener failed for %s", event.kind.value)
