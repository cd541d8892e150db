from storage.provider import StoreOperationError, WarehouseProvider, WideColumnProvider

__all__ = [
    "StoreOperationError",
    "WarehouseProvider",
    "WideColumnProvider"
]
