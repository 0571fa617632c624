"""Inventory models for showcasing objmap behavior."""

import dataclasses
import enum
from typing import ClassVar
from typing import NamedTuple
from typing import final


class StockStatus(enum.Enum):
    """Stock level classification."""

    IN_STOCK = "in_stock"
    LOW = "low"
    OUT = "out"


class Dimensions(NamedTuple):
    """Package dimensions in centimetres."""

    width: float
    height: float
    depth: float


class Item:
    """Inventory item with a derived status property."""

    LOW_STOCK_THRESHOLD: ClassVar[int] = 5

    sku: str
    quantity: int
    _audit_note: str

    def __init__(self, sku: str, quantity: int) -> None:
        """Initialize an item.

        :param sku: Stock keeping unit.
        :param quantity: Units on hand.
        """
        self.sku = sku
        self.quantity = quantity
        self._audit_note = ""

    @property
    def status(self) -> StockStatus:
        """Return the stock status derived from ``quantity``.

        :returns: Stock status.
        """
        if self.quantity == 0:
            return StockStatus.OUT
        if self.quantity < self.LOW_STOCK_THRESHOLD:
            return StockStatus.LOW
        return StockStatus.IN_STOCK


class PerishableItem(Item):
    """Item that expires; status reports expired stock as out."""

    expires_on: str
    expired: bool

    def __init__(self, sku: str, quantity: int, expires_on: str, expired: bool = False) -> None:
        """Initialize a perishable item.

        :param sku: Stock keeping unit.
        :param quantity: Units on hand.
        :param expires_on: ISO date of expiry.
        :param expired: Whether the batch has expired.
        """
        super().__init__(sku, quantity)
        self.expires_on = expires_on
        self.expired = expired

    @property
    def status(self) -> StockStatus:
        if self.expired is True:
            return StockStatus.OUT
        return super().status


@final
@dataclasses.dataclass(frozen=True)
class Shipment:
    """Immutable shipment record."""

    shipment_id: str
    item: Item
    dimensions: Dimensions
