from lotstock.domain.batches.aggregates import LOW_STOCK_FALLBACK_REORDER_LEVEL, group_by_product
from lotstock.domain.batches.allocation import (
    allocate,
    find_by_name,
    format_expiry_fragment,
    would_use_multiple_batches,
)
from lotstock.domain.batches.expiry import is_expired, is_valid_batch, normalize_name, sort_by_expiry
from lotstock.domain.batches.models import Batch, BatchDeduction, DeductionPlan, GroupedProduct

__all__ = [
    "LOW_STOCK_FALLBACK_REORDER_LEVEL",
    "Batch",
    "BatchDeduction",
    "DeductionPlan",
    "GroupedProduct",
    "allocate",
    "find_by_name",
    "format_expiry_fragment",
    "group_by_product",
    "is_expired",
    "is_valid_batch",
    "normalize_name",
    "sort_by_expiry",
    "would_use_multiple_batches",
]
