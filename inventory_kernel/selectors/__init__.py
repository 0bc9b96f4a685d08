"""Read-only selectors for the inventory kernel."""

from inventory_kernel.selectors.inventory_selector import InventoryFacade

__all__ = ["InventoryFacade"]
