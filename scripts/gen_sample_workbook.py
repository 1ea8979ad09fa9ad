#!/usr/bin/env python3
"""Sample workbook generator.

Writes an .xlsx file with Products, Customers and Orders sheets in the fixed
column layout expected by salesbook:
- Row 1: Header row
- Row 2+: Data rows

Useful for trying the CLI and for manual testing with larger sheets.
"""
from __future__ import annotations

import argparse
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

PRODUCT_HEADER = ["Code", "Name", "Unit", "Price"]
CUSTOMER_HEADER = ["Code", "Organization", "Address", "Contact person"]
ORDER_HEADER = ["Code", "Product code", "Customer code", "Request number", "Quantity", "Order date"]

PRODUCT_NAMES = ["Bolt", "Nut", "Washer", "Screw", "Rivet", "Anchor", "Bracket", "Hinge"]
UNITS = ["pcs", "box", "kg"]
SURNAMES = ["Ivanov", "Petrova", "Sidorov", "Smirnova", "Kuznetsov", "Popova", "Volkov"]


def generate_tables(
    products: int, customers: int, orders: int, seed: int = 42, start: date = date(2023, 1, 1)
) -> dict[str, list[list[Any]]]:
    """Build header + data rows for the three sheets.

    Args:
        products: Number of product rows
        customers: Number of customer rows
        orders: Number of order rows
        seed: Random seed for reproducible data
        start: First possible order date (orders spread over one year)

    Returns:
        Sheet name -> list of rows (header first)
    """
    rng = np.random.default_rng(seed)

    product_rows = [PRODUCT_HEADER]
    for i in range(products):
        name = PRODUCT_NAMES[i % len(PRODUCT_NAMES)]
        if i >= len(PRODUCT_NAMES):
            name = f"{name} {i // len(PRODUCT_NAMES) + 1}"
        price = round(float(rng.uniform(0.5, 500.0)), 2)
        product_rows.append([f"P{i + 1}", name, UNITS[i % len(UNITS)], price])

    customer_rows = [CUSTOMER_HEADER]
    for i in range(customers):
        contact = f"{SURNAMES[i % len(SURNAMES)]} {chr(65 + i % 26)}.{chr(65 + (i * 7) % 26)}."
        customer_rows.append([f"C{i + 1}", f"Organization {i + 1}", f"Street {i + 1}", contact])

    order_rows = [ORDER_HEADER]
    for i in range(orders):
        product = int(rng.integers(1, products + 1))
        customer = int(rng.integers(1, customers + 1))
        order_date = start + timedelta(days=int(rng.integers(0, 365)))
        order_rows.append(
            [f"O{i + 1}", f"P{product}", f"C{customer}", i + 1, int(rng.integers(1, 100)), order_date]
        )

    return {"Products": product_rows, "Customers": customer_rows, "Orders": order_rows}


def create_workbook(output_path: Path, tables: dict[str, list[list[Any]]]) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        for sheet_name, rows in tables.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    print(f"Created workbook: {output_path}")
    for sheet_name, rows in tables.items():
        print(f"  {sheet_name}: {len(rows) - 1} rows")


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a sample salesbook workbook")
    parser.add_argument("output", type=Path, help="Output .xlsx path")
    parser.add_argument("--products", type=int, default=8, help="Number of products (default: 8)")
    parser.add_argument("--customers", type=int, default=10, help="Number of customers (default: 10)")
    parser.add_argument("--orders", type=int, default=200, help="Number of orders (default: 200)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if min(args.products, args.customers, args.orders) <= 0:
        print("Error: --products, --customers and --orders must be positive", file=sys.stderr)
        return 1

    try:
        create_workbook(
            args.output, generate_tables(args.products, args.customers, args.orders, args.seed)
        )
    except OSError as e:
        print(f"Error writing workbook: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
