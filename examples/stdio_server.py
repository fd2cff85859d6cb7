# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""A small catalogue server over stdio.

Registers one tool, one static resource, one templated resource and one
prompt on a :class:`CapabilityEngine`, then serves them from the reference
``mcp`` low-level server.

Pattern:
- decorators introspect each function once, at import
- ``attach`` installs the list/call/read/get handlers
- the server owns transport and lifecycle

Usage: uv run python examples/stdio_server.py
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass

import anyio
from mcp.server.lowlevel.server import Server
from mcp.server.stdio import stdio_server

from bridgemcp import CapabilityEngine
from bridgemcp.server import attach
from bridgemcp.utils import configure_logging

# Suppress SDK logs for clean demo output
logging.getLogger("mcp").setLevel(logging.CRITICAL)
configure_logging(logging.DEBUG)


class Sort(enum.Enum):
    PRICE = "price"
    NAME = "name"


@dataclass
class PriceRange:
    low: float = 0.0
    high: float | None = None


CATALOGUE = {
    "lamp": {"name": "Desk lamp", "price": 24.0},
    "chair": {"name": "Office chair", "price": 129.0},
    "mug": {"name": "Mug", "price": 8.5},
}

engine = CapabilityEngine()


@engine.tool()
def search(query: str = "", price: PriceRange | None = None, sort: Sort = Sort.NAME) -> list[dict]:
    """Search the catalogue.

    Args:
        query: Substring matched against product names
        price: Optional price bounds
        sort: Result ordering
    """
    price = price or PriceRange()
    hits = [
        {"sku": sku, **item}
        for sku, item in CATALOGUE.items()
        if query.lower() in item["name"].lower()
        and item["price"] >= price.low
        and (price.high is None or item["price"] <= price.high)
    ]
    return sorted(hits, key=lambda hit: hit[sort.value])


@engine.resource("catalogue://skus", mime_type="application/json")
def skus() -> str:
    """Every known SKU."""
    return json.dumps(sorted(CATALOGUE))


@engine.resource("catalogue://{sku}", mime_type="application/json")
def product(sku: str) -> str:
    """One product by SKU."""
    return json.dumps(CATALOGUE[sku])


@engine.prompt(description="Draft a product blurb")
def blurb(sku: str, tone: str = "friendly") -> list:
    item = CATALOGUE[sku]
    return [("user", f"Write a {tone} two-sentence blurb for {item['name']} (${item['price']:.2f}).")]


async def main() -> None:
    server = attach(Server("catalogue"), engine)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    anyio.run(main)
