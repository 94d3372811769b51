"""Formateo puro de productos para listados, tarjetas y dashboard."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from parametros import LOW_STOCK_THRESHOLD, PUBLIC_MEDIA_PREFIX, SERVER_URL
from shared.protocol import Product, Variant

STOCK_LEVEL_EMPTY = "empty"
STOCK_LEVEL_LOW = "low"
STOCK_LEVEL_OK = "ok"


@dataclass(frozen=True, slots=True)
class StockBadge:
    """Texto y nivel del indicador de stock."""

    label: str
    level: str


@dataclass(frozen=True, slots=True)
class DashboardSummary:
    """Totales del listado cacheado para las tarjetas del dashboard."""

    product_count: int
    total_stock: int
    out_of_stock_count: int
    low_stock_count: int


def stock_badge(stock: int | float | str) -> StockBadge:
    """Sin stock en cero, bajo por debajo del umbral, normal en otro caso."""
    quantity = int(float(stock or 0))
    if quantity <= 0:
        return StockBadge(label="Sin Stock", level=STOCK_LEVEL_EMPTY)
    if quantity < LOW_STOCK_THRESHOLD:
        return StockBadge(label=f"Bajo: {quantity}", level=STOCK_LEVEL_LOW)
    return StockBadge(label=f"Stock: {quantity}", level=STOCK_LEVEL_OK)


def format_price(value: float | int | str) -> str:
    """Formatea un precio al estilo es-AR: ``$12.500`` o ``$1.234,5``."""
    amount = float(value or 0)
    text = f"{amount:,.2f}"
    integer_part, decimal_part = text.split(".")
    integer_part = integer_part.replace(",", ".")
    decimal_part = decimal_part.rstrip("0")
    if decimal_part:
        return f"${integer_part},{decimal_part}"
    return f"${integer_part}"


def resolve_image_url(path: str | None, server_url: str = SERVER_URL) -> str:
    """URLs absolutas se respetan; rutas relativas van al prefijo publico."""
    if not path:
        return ""
    if path.startswith("http"):
        return path
    return f"{server_url}{PUBLIC_MEDIA_PREFIX}{path}"


def variant_label(variant: Variant) -> str:
    return f"{variant.size} • {variant.color}"


def build_dashboard_summary(products: Sequence[Product]) -> DashboardSummary:
    """Resume el listado; los totales son los que informo el servidor."""
    out_of_stock = 0
    low_stock = 0
    for product in products:
        level = stock_badge(product.total_stock).level
        if level == STOCK_LEVEL_EMPTY:
            out_of_stock += 1
        elif level == STOCK_LEVEL_LOW:
            low_stock += 1

    return DashboardSummary(
        product_count=len(products),
        total_stock=sum(product.total_stock for product in products),
        out_of_stock_count=out_of_stock,
        low_stock_count=low_stock,
    )
