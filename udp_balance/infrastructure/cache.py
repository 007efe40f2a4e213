"""Caller-side memoization of dashboard reports keyed by snapshot content"""

import threading
from collections import OrderedDict
from dataclasses import replace
from datetime import datetime
from typing import Hashable, Tuple

from udp_balance.config import settings
from udp_balance.domain.dashboard import build_dashboard
from udp_balance.domain.models import DashboardReport, TimeWindow, TransactionSet
from udp_balance.domain.windowing import NAMED_RANGES
from udp_balance.infrastructure.observability.metrics import record_cache_lookup


class DashboardCache:
    """
    Bounded LRU cache in front of build_dashboard.

    Fixed windows ("all" and explicit bounds) key on (snapshot fingerprint,
    window, year/month of now); the month matters because card metrics report
    the current calendar month.

    Named ranges slide with now, so they key on the range label and the minute
    of now, plus how many transactions fall before the start and up to the end.
    For a given snapshot those two counts pin the window's membership exactly.
    A hit is returned with the freshly resolved window.
    """

    def __init__(self, maxsize: int | None = None):
        self.maxsize = maxsize if maxsize is not None else settings.dashboard_cache_size
        self._entries: "OrderedDict[Hashable, DashboardReport]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key_for(transaction_set: TransactionSet, window: TimeWindow, now: datetime) -> Tuple:
        if window.label not in NAMED_RANGES or window.label == "all":
            return (transaction_set.fingerprint, window, now.year, now.month)

        before = sum(1 for t in transaction_set if window.start is not None and t.timestamp < window.start)
        through = sum(1 for t in transaction_set if window.end is None or t.timestamp <= window.end)
        minute = now.replace(second=0, microsecond=0)
        return (transaction_set.fingerprint, window.label, minute, before, through)

    def get_or_build(
        self,
        transaction_set: TransactionSet,
        window: TimeWindow,
        now: datetime,
    ) -> Tuple[DashboardReport, bool]:
        """Return (report, cache_hit)"""
        key = self.key_for(transaction_set, window, now)

        with self._lock:
            report = self._entries.get(key)
            if report is not None:
                self._entries.move_to_end(key)
                self.hits += 1
                record_cache_lookup(hit=True)
                if report.window != window:
                    report = replace(report, window=window)
                return report, True

        # Built outside the lock; concurrent misses on one key just compute twice
        report = build_dashboard(transaction_set, window, now)

        with self._lock:
            self.misses += 1
            record_cache_lookup(hit=False)
            if self.maxsize > 0:
                self._entries[key] = report
                self._entries.move_to_end(key)
                while len(self._entries) > self.maxsize:
                    self._entries.popitem(last=False)
        return report, False

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)


dashboard_cache = DashboardCache()
