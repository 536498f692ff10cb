"""Inventory position and PnL domain models.

Unlike the market data models these are mutable ledgers: the owning
quoting session is their single writer and serializes its own mutations.
No internal locking is provided.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic.dataclasses import dataclass

from avellaneda.domain.types import ONE, ZERO


@dataclass
class InventoryPosition:
    """Signed position with a weighted average entry price.

    Invariant after every update_fill: quantity == 0 if and only if
    avg_entry_price == 0. Positive quantity is long, negative is short.
    """

    quantity: Decimal = ZERO
    avg_entry_price: Decimal = ZERO
    last_update: int = 0

    def is_flat(self) -> bool:
        """Return True if there is no position."""
        return self.quantity == ZERO

    def is_long(self) -> bool:
        """Return True if the position is long."""
        return self.quantity > ZERO

    def is_short(self) -> bool:
        """Return True if the position is short."""
        return self.quantity < ZERO

    def update_fill(
        self,
        fill_quantity: Decimal,
        fill_price: Decimal,
        timestamp: int,
    ) -> None:
        """Apply a fill to the position.

        Cases, evaluated in order:
        1. Sign crossing (long to short or short to long): the cost basis
           resets to the fill price.
        2. Increasing (same direction or from flat): quantity-weighted
           average of the old basis and the fill.
        3. Reducing: average entry price unchanged.

        Realized PnL is not computed here. Callers that need it must use
        closing_pnl() before calling this method.

        Args:
            fill_quantity: Signed fill size (positive = buy, negative = sell)
            fill_price: Execution price
            timestamp: Fill time in milliseconds
        """
        new_quantity = self.quantity + fill_quantity

        crossed = (self.quantity > ZERO and new_quantity < ZERO) or (
            self.quantity < ZERO and new_quantity > ZERO
        )
        if crossed:
            self.avg_entry_price = fill_price
        elif abs(new_quantity) > abs(self.quantity):
            total_cost = self.quantity * self.avg_entry_price + fill_quantity * fill_price
            self.avg_entry_price = total_cost / new_quantity

        self.quantity = new_quantity
        self.last_update = timestamp

        if self.quantity == ZERO:
            self.avg_entry_price = ZERO

    def unrealized_pnl(self, current_price: Decimal) -> Decimal:
        """Mark the open position to current_price.

        Returns:
            quantity * (current_price - avg_entry_price), or 0 when flat
        """
        if self.is_flat():
            return ZERO
        return self.quantity * (current_price - self.avg_entry_price)


def closing_pnl(
    position: InventoryPosition,
    fill_quantity: Decimal,
    fill_price: Decimal,
) -> Decimal:
    """Realized PnL of the part of a fill that closes existing inventory.

    Must be called with the position as it was before the fill is applied,
    since it uses the pre-fill average entry price. Fills that open or add
    to a position realize nothing.

    Args:
        position: Position before the fill
        fill_quantity: Signed fill size
        fill_price: Execution price

    Returns:
        closing_qty * direction * (fill_price - avg_entry_price)
    """
    old_quantity = position.quantity
    reducing = (old_quantity > ZERO and fill_quantity < ZERO) or (
        old_quantity < ZERO and fill_quantity > ZERO
    )
    if not reducing:
        return ZERO

    closing_quantity = min(abs(old_quantity), abs(fill_quantity))
    direction = ONE if old_quantity > ZERO else -ONE
    return closing_quantity * direction * (fill_price - position.avg_entry_price)


@dataclass
class PnL:
    """Realized, unrealized and total profit/loss.

    Invariant after every mutation: total == realized + unrealized.
    """

    realized: Decimal = ZERO
    unrealized: Decimal = ZERO
    total: Decimal = ZERO

    def update(self, realized: Decimal, unrealized: Decimal) -> None:
        """Replace both components and recompute the total."""
        self.realized = realized
        self.unrealized = unrealized
        self.total = realized + unrealized

    def add_realized(self, amount: Decimal) -> None:
        """Accumulate a realized PnL delta."""
        self.realized += amount
        self.total = self.realized + self.unrealized

    def set_unrealized(self, amount: Decimal) -> None:
        """Overwrite the mark-to-market component."""
        self.unrealized = amount
        self.total = self.realized + self.unrealized
