"""DTOs del protocolo cliente-servidor."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from shared.catalog import BRANCHES


def parse_number(value: Any, default: float = 0.0) -> float:
    """Convierte numeros o strings decimales de la API a float."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError):
        return default


def parse_int(value: Any, default: int = 0) -> int:
    """Convierte numeros o strings enteros de la API a int."""
    return int(parse_number(value, float(default)))


@dataclass(slots=True)
class User:
    """Usuario autenticado segun la API."""

    id: int
    full_name: str
    role: str
    branch_id: int | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> User:
        branch_id = data.get("branch_id")
        return cls(
            id=parse_int(data.get("id")),
            full_name=str(data.get("full_name") or ""),
            role=str(data.get("role") or "seller"),
            branch_id=parse_int(branch_id) if branch_id is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "full_name": self.full_name,
            "role": self.role,
            "branch_id": self.branch_id,
        }

    @property
    def first_name(self) -> str:
        return self.full_name.split(" ", 1)[0] if self.full_name else ""


@dataclass(slots=True)
class LoginResponse:
    """Respuesta de POST /auth/login."""

    token: str
    user: User


@dataclass(slots=True)
class Variant:
    """Combinacion talle/color/SKU con stock independiente por sucursal."""

    id: int
    size: str
    color: str
    sku: str | None = None
    stock_by_branch: dict[int, int] = field(default_factory=dict)
    total_stock: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Variant:
        stock_by_branch: dict[int, int] = {}
        for detail in data.get("stock_detail") or []:
            branch_id = parse_int(detail.get("branch_id"))
            stock_by_branch[branch_id] = parse_int(detail.get("quantity"))

        raw_total = data.get("total_stock", data.get("stock"))
        if raw_total is None:
            total_stock = sum(stock_by_branch.values())
        else:
            total_stock = parse_int(raw_total)

        sku = data.get("sku")
        return cls(
            id=parse_int(data.get("id")),
            size=str(data.get("size") or ""),
            color=str(data.get("color") or ""),
            sku=str(sku) if sku else None,
            stock_by_branch=stock_by_branch,
            total_stock=total_stock,
        )

    def stock_for(self, branch_id: int) -> int:
        """Cantidad en una sucursal; 0 si la API no informa detalle."""
        return self.stock_by_branch.get(branch_id, 0)


@dataclass(slots=True)
class ProductImage:
    """Imagen ya almacenada en el servidor."""

    id: int
    url: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ProductImage:
        url = data.get("url") or data.get("path") or data.get("image_path") or ""
        return cls(id=parse_int(data.get("id")), url=str(url))


@dataclass(slots=True)
class Product:
    """Producto con variantes e imagenes, tal como lo devuelve la API."""

    id: int
    name: str
    type: str
    brand: str
    base_price: float
    cover_image: str | None
    total_stock: int
    cost_price: float = 0.0
    fabric: str = ""
    tags: str = ""
    description: str = ""
    variants: list[Variant] = field(default_factory=list)
    images: list[ProductImage] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Product:
        return cls(
            id=parse_int(data.get("id")),
            name=str(data.get("name") or ""),
            type=str(data.get("type") or ""),
            brand=str(data.get("brand") or ""),
            base_price=parse_number(data.get("base_price")),
            cover_image=data.get("cover_image") or None,
            total_stock=parse_int(data.get("total_stock")),
            cost_price=parse_number(data.get("cost_price")),
            fabric=str(data.get("fabric") or ""),
            tags=str(data.get("tags") or ""),
            description=str(data.get("description") or ""),
            variants=[Variant.from_api(item) for item in data.get("variants") or []],
            images=[ProductImage.from_api(item) for item in data.get("images") or []],
        )


@dataclass(slots=True)
class VariantDraft:
    """Fila de variante del formulario de producto."""

    size: str
    color: str
    sku: str = ""
    stock_by_branch: dict[int, int] = field(default_factory=dict)
    id: int | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serializa la variante con un campo de stock por sucursal.

        Un SKU vacio se envia como null para no pisar SKUs existentes.
        """
        payload: dict[str, Any] = {}
        if self.id is not None:
            payload["id"] = self.id
        payload["size"] = self.size.strip()
        payload["color"] = self.color.strip()
        payload["sku"] = self.sku.strip() or None
        for branch in BRANCHES:
            payload[branch.form_field] = self.stock_by_branch.get(branch.id, 0)
        return payload


@dataclass(slots=True)
class ProductDraft:
    """Valores del formulario de alta/edicion de producto."""

    name: str
    type: str
    brand: str
    base_price: float
    cost_price: float | None = None
    fabric: str = ""
    tags: str = ""
    description: str = ""
    variants: list[VariantDraft] = field(default_factory=list)

    @classmethod
    def from_product(cls, product: Product) -> ProductDraft:
        """Precarga el formulario de edicion desde un producto existente."""
        return cls(
            name=product.name,
            type=product.type,
            brand=product.brand,
            base_price=product.base_price,
            cost_price=product.cost_price,
            fabric=product.fabric,
            tags=product.tags,
            description=product.description,
            variants=[
                VariantDraft(
                    id=variant.id,
                    size=variant.size,
                    color=variant.color,
                    sku=variant.sku or "",
                    stock_by_branch={
                        branch.id: variant.stock_for(branch.id) for branch in BRANCHES
                    },
                )
                for variant in product.variants
            ],
        )


@dataclass(slots=True)
class ImageUpload:
    """Archivo de imagen local seleccionado para subir."""

    path: Path

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def content_type(self) -> str:
        guessed, _ = mimetypes.guess_type(self.path.name)
        return guessed or "application/octet-stream"
