from __future__ import annotations


class AllocationInputError(ValueError):
    """Caller passed a quantity the allocator cannot interpret."""


class StaleSnapshotError(RuntimeError):
    def __init__(self, batch_id: str, quantity: int):
        super().__init__(f"batch {batch_id} no longer holds {quantity} units")
        self.batch_id = batch_id
        self.quantity = quantity


class StockConflictError(RuntimeError):
    pass


class InsufficientStockError(RuntimeError):
    def __init__(self, product_name: str, requested: int, available: int):
        super().__init__(
            f"insufficient stock for {product_name}: requested={requested}, available={available}"
        )
        self.product_name = product_name
        self.requested = requested
        self.available = available
