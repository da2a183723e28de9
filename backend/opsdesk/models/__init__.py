from .tenancy import Workspace
from .inventory import Product, InventoryBalance, InventoryMovement
from .ledger import Sale, Expense

__all__ = [
    'Workspace',
    'Product', 'InventoryBalance', 'InventoryMovement',
    'Sale', 'Expense',
]
