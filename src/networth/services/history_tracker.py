"""History tracker: append-only valuation snapshots and growth rates."""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional

from dateutil.relativedelta import relativedelta

from networth.core.timezone import now_local, to_local
from networth.domain.models import PortfolioSnapshot
from networth.domain.views import GrowthPoint

ZERO = Decimal("0")


def growth_rate(current: Decimal, baseline: Decimal) -> Decimal:
    """Percentage change from baseline; 0 when the baseline is not positive."""
    if baseline <= 0:
        return ZERO
    return (current - baseline) / baseline * 100


class HistoryTracker:
    """
    Keeps the time-ordered snapshot list.

    Snapshots are only ever appended; reset() is the one way to remove them.
    Persistence is the caller's job (see HoldingService).
    """

    def __init__(
        self,
        snapshots: Optional[Iterable[PortfolioSnapshot]] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._snapshots: list[PortfolioSnapshot] = list(snapshots or [])
        self._clock = clock

    @property
    def snapshots(self) -> tuple[PortfolioSnapshot, ...]:
        return tuple(self._snapshots)

    def latest(self) -> Optional[PortfolioSnapshot]:
        return self._snapshots[-1] if self._snapshots else None

    def record_snapshot(self, total_value: Decimal) -> PortfolioSnapshot:
        """Append a snapshot of total_value taken now, with its monthly growth rate."""
        snapshot = PortfolioSnapshot(
            taken_at=self._clock(),
            total_value=total_value,
            growth_rate=self.monthly_growth_rate(total_value),
        )
        self._snapshots.append(snapshot)
        return snapshot

    def monthly_growth_rate(self, current_total: Decimal) -> Decimal:
        """
        Growth of current_total against last month's baseline.

        The baseline is the most recent snapshot taken in the calendar month
        one month before now. Returns 0 if there is none or it is not positive.
        """
        target = to_local(self._clock()) - relativedelta(months=1)
        in_month = [
            s for s in self._snapshots
            if (to_local(s.taken_at).year, to_local(s.taken_at).month) == (target.year, target.month)
        ]
        if not in_month:
            return ZERO
        baseline = max(in_month, key=lambda s: s.taken_at)
        return growth_rate(current_total, baseline.total_value)

    def history_window(self, months: int) -> list[PortfolioSnapshot]:
        """Snapshots taken at or after (now - months), oldest first."""
        cutoff = self._clock() - relativedelta(months=months)
        window = [s for s in self._snapshots if s.taken_at >= cutoff]
        return sorted(window, key=lambda s: s.taken_at)

    def growth_series(self, months: int) -> list[GrowthPoint]:
        """Period-over-period growth for each consecutive pair in the window."""
        window = self.history_window(months)
        return [
            GrowthPoint(
                taken_at=current.taken_at,
                total_value=current.total_value,
                growth_rate=growth_rate(current.total_value, previous.total_value),
            )
            for previous, current in zip(window, window[1:])
        ]

    def reset(self) -> None:
        self._snapshots.clear()

    def replace(self, snapshots: Iterable[PortfolioSnapshot]) -> None:
        """Swap in a whole snapshot list (backup restore)."""
        self._snapshots = list(snapshots)
