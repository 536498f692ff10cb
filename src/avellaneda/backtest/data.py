"""Historical market data sources for backtesting."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator

from avellaneda.domain.market_data import MarketTick


class HistoricalDataSource(ABC):
    """Cursor over an ordered sequence of market ticks.

    Ticks are yielded oldest first. Iterating a source consumes it;
    call reset() to replay from the beginning.
    """

    @abstractmethod
    def next_tick(self) -> MarketTick | None:
        """Return the next tick and advance, or None when exhausted."""

    @abstractmethod
    def peek_tick(self) -> MarketTick | None:
        """Return the next tick without advancing, or None when exhausted."""

    @abstractmethod
    def reset(self) -> None:
        """Rewind to the first tick."""

    @abstractmethod
    def __len__(self) -> int:
        """Return the total number of ticks."""

    @abstractmethod
    def remaining(self) -> int:
        """Return the number of ticks not yet consumed."""

    def is_empty(self) -> bool:
        """Return True if the source holds no ticks."""
        return len(self) == 0

    def __iter__(self) -> Iterator[MarketTick]:
        while (tick := self.next_tick()) is not None:
            yield tick


class VecDataSource(HistoricalDataSource):
    """In-memory data source backed by a list."""

    def __init__(self, ticks: Iterable[MarketTick] | None = None) -> None:
        self._ticks: list[MarketTick] = list(ticks) if ticks is not None else []
        self._index = 0

    @property
    def current_index(self) -> int:
        """Return the index of the next tick to be read."""
        return self._index

    @property
    def ticks(self) -> list[MarketTick]:
        """Return a copy of all ticks."""
        return list(self._ticks)

    def get(self, index: int) -> MarketTick | None:
        """Return the tick at index, or None if out of range."""
        if 0 <= index < len(self._ticks):
            return self._ticks[index]
        return None

    def push(self, tick: MarketTick) -> None:
        """Append a tick to the end of the source."""
        self._ticks.append(tick)

    def time_range(self) -> tuple[int, int] | None:
        """Return (first timestamp, last timestamp), or None when empty."""
        if not self._ticks:
            return None
        return self._ticks[0].timestamp, self._ticks[-1].timestamp

    def next_tick(self) -> MarketTick | None:
        if self._index >= len(self._ticks):
            return None
        tick = self._ticks[self._index]
        self._index += 1
        return tick

    def peek_tick(self) -> MarketTick | None:
        return self.get(self._index)

    def reset(self) -> None:
        self._index = 0

    def __len__(self) -> int:
        return len(self._ticks)

    def remaining(self) -> int:
        return len(self._ticks) - self._index
