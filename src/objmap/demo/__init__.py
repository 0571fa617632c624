"""Demo models for showcasing objmap behavior."""

from objmap.demo.inventory import Dimensions
from objmap.demo.inventory import Item
from objmap.demo.inventory import PerishableItem
from objmap.demo.inventory import Shipment
from objmap.demo.inventory import StockStatus

__all__: list[str] = ["Dimensions", "Item", "PerishableItem", "Shipment", "StockStatus"]
