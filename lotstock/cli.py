from __future__ import annotations

import argparse
import json
from datetime import date

from lotstock.api.utils import resolve_reference_date
from lotstock.core.config import get_settings
from lotstock.core.logging import configure_logging
from lotstock.domain.batches.aggregates import group_by_product
from lotstock.domain.batches.allocation import allocate, find_by_name
from lotstock.persistence.batches import load_snapshot
from lotstock.persistence.pg import init_db, session_scope


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lot-based stock allocation CLI")
    parser.add_argument("--log-level", default=None)
    top = parser.add_subparsers(dest="command", required=True)

    products = top.add_parser("products", help="Show grouped products with stock and expiry flags")
    products.add_argument("--pharmacy", required=True)
    products.add_argument("--as-of", type=date.fromisoformat, default=None)

    alloc = top.add_parser("allocate", help="Preview a FEFO deduction plan (no writes)")
    alloc.add_argument("--pharmacy", required=True)
    alloc.add_argument("--name", required=True)
    alloc.add_argument("--qty", type=int, required=True)
    alloc.add_argument("--as-of", type=date.fromisoformat, default=None)

    lookup = top.add_parser("lookup", help="List existing batches of a product name")
    lookup.add_argument("--pharmacy", required=True)
    lookup.add_argument("--name", required=True)

    top.add_parser("serve", help="Run the HTTP API")

    return parser


def _products(args: argparse.Namespace) -> dict | list:
    with session_scope() as session:
        snapshot = load_snapshot(session, args.pharmacy)
    groups = group_by_product(
        snapshot,
        resolve_reference_date(args.as_of),
        fallback_reorder_level=get_settings().low_stock_fallback_reorder_level,
    )
    return [
        {
            "name": group.name,
            "total_stock": group.total_stock,
            "display_price": str(group.display_price),
            "earliest_expiry": group.earliest_expiry.isoformat(),
            "batches": len(group.batches),
            "has_multiple_batches": group.has_multiple_batches,
            "has_expired_batch": group.has_expired_batch,
            "has_low_stock": group.has_low_stock,
        }
        for group in groups
    ]


def _allocate(args: argparse.Namespace) -> dict | list:
    with session_scope() as session:
        snapshot = load_snapshot(session, args.pharmacy)
    plan = allocate(snapshot, args.name, args.qty, resolve_reference_date(args.as_of))
    return {
        "pairs": plan.as_pairs(),
        "batch_expiry_info": plan.batch_expiry_info,
        "total_deducted": plan.total_deducted,
        "used_multiple_batches": plan.used_multiple_batches,
        "fingerprint": plan.fingerprint(),
    }


def _lookup(args: argparse.Namespace) -> dict | list:
    with session_scope() as session:
        snapshot = load_snapshot(session, args.pharmacy)
    return [batch.model_dump(mode="json") for batch in find_by_name(snapshot, args.name)]


COMMANDS = {
    "products": _products,
    "allocate": _allocate,
    "lookup": _lookup,
}


def _serve() -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run("lotstock.main:app", host=settings.api_host, port=settings.api_port)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    if args.command == "serve":
        return _serve()
    init_db()

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.error("unsupported command")
        return 2
    print(json.dumps(handler(args), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
