"""Gateway de comunicacion cliente-servidor."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any, Protocol

from parametros import PRODUCTS_PAGE_LIMIT
from shared.catalog import normalize_tags
from shared.errors import ServiceError
from shared.protocol import (
    ImageUpload,
    LoginResponse,
    Product,
    ProductDraft,
    User,
)

from .api_client import ApiClient

LOGGER = logging.getLogger(__name__)

MultipartParts = list[tuple[str, tuple[Any, ...]]]


class ServerGateway(Protocol):
    """Interfaz de acceso del cliente a la API remota de productos."""

    def login(self, email: str, password: str) -> LoginResponse:
        """Autentica credenciales y retorna token y usuario."""

    def get_products(self, page: int = 1, search: str = "") -> list[Product]:
        """Lista productos filtrados por texto de busqueda."""

    def get_product(self, product_id: int) -> Product:
        """Obtiene un producto con variantes e imagenes."""

    def create_product(
        self,
        draft: ProductDraft,
        images: Sequence[ImageUpload],
    ) -> None:
        """Crea un producto con imagenes y variantes."""

    def update_product(
        self,
        product_id: int,
        draft: ProductDraft,
        new_images: Sequence[ImageUpload] = (),
        deleted_image_ids: Sequence[int] = (),
        deleted_variant_ids: Sequence[int] = (),
    ) -> None:
        """Actualiza un producto existente."""

    def delete_product(self, product_id: int) -> None:
        """Elimina un producto y todo su stock."""

    def get_product_types(self) -> list[str]:
        """Lista los tipos de prenda disponibles."""

    def update_variant_stock(self, variant_id: int, branch_id: int, quantity: int) -> None:
        """Fija la cantidad de una variante en una sucursal."""


class HttpServerGateway:
    """Implementacion del gateway sobre la API HTTP."""

    def __init__(self, api_client: ApiClient) -> None:
        self._api = api_client

    def login(self, email: str, password: str) -> LoginResponse:
        body = self._api.post("/auth/login", json={"email": email, "password": password})
        try:
            payload = body.get("data", body)
            token = str(payload["token"])
            user = User.from_api(payload["user"])
        except ServiceError:
            raise
        except Exception as exc:
            LOGGER.exception("Respuesta de login inesperada.")
            raise ServiceError("El servidor devolvio una respuesta de login invalida.") from exc

        if not token:
            raise ServiceError("El servidor no devolvio un token de acceso.")
        return LoginResponse(token=token, user=user)

    def get_products(self, page: int = 1, search: str = "") -> list[Product]:
        body = self._api.get(
            "/products",
            params={"page": page, "limit": PRODUCTS_PAGE_LIMIT, "search": search},
        )
        items = body.get("data", []) if isinstance(body, dict) else body or []
        try:
            return [Product.from_api(item) for item in items]
        except Exception as exc:
            LOGGER.exception("Listado de productos con formato inesperado.")
            raise ServiceError("No fue posible leer el listado de productos.") from exc

    def get_product(self, product_id: int) -> Product:
        body = self._api.get(f"/products/{product_id}")
        payload = body.get("data", body) if isinstance(body, dict) else body
        try:
            return Product.from_api(payload)
        except Exception as exc:
            LOGGER.exception("Producto %s con formato inesperado.", product_id)
            raise ServiceError("No fue posible leer el producto.") from exc

    def create_product(
        self,
        draft: ProductDraft,
        images: Sequence[ImageUpload],
    ) -> None:
        fields = self._build_product_fields(draft)
        fields["variants"] = json.dumps(
            [variant.to_payload() for variant in draft.variants],
            ensure_ascii=False,
        )
        parts = self._build_multipart(fields, "images[]", images)
        self._api.post("/products", files=parts)
        LOGGER.info("Producto creado: name=%s, imagenes=%s", draft.name, len(images))

    def update_product(
        self,
        product_id: int,
        draft: ProductDraft,
        new_images: Sequence[ImageUpload] = (),
        deleted_image_ids: Sequence[int] = (),
        deleted_variant_ids: Sequence[int] = (),
    ) -> None:
        fields = self._build_product_fields(draft)
        fields["deleted_images"] = json.dumps(list(deleted_image_ids))
        fields["variants"] = json.dumps(
            [variant.to_payload() for variant in draft.variants],
            ensure_ascii=False,
        )
        fields["deleted_variants"] = json.dumps(list(deleted_variant_ids))
        parts = self._build_multipart(fields, "new_images[]", new_images)
        self._api.post(f"/products/{product_id}", files=parts)
        LOGGER.info(
            "Producto actualizado: id=%s, imagenes_nuevas=%s, imagenes_borradas=%s, "
            "variantes_borradas=%s",
            product_id,
            len(new_images),
            len(deleted_image_ids),
            len(deleted_variant_ids),
        )

    def delete_product(self, product_id: int) -> None:
        self._api.delete(f"/products/{product_id}")
        LOGGER.info("Producto eliminado: id=%s", product_id)

    def get_product_types(self) -> list[str]:
        body = self._api.get("/product-types")
        items = body.get("data", []) if isinstance(body, dict) else body or []
        names: list[str] = []
        for item in items:
            name = item.get("name") if isinstance(item, dict) else item
            if name:
                names.append(str(name))
        return names

    def update_variant_stock(self, variant_id: int, branch_id: int, quantity: int) -> None:
        self._api.post(
            f"/variants/{variant_id}/stock",
            json={"branch_id": branch_id, "quantity": quantity},
        )
        LOGGER.debug(
            "Stock actualizado: variant_id=%s, branch_id=%s, quantity=%s",
            variant_id,
            branch_id,
            quantity,
        )

    @staticmethod
    def _build_product_fields(draft: ProductDraft) -> dict[str, str]:
        """Campos simples del formulario multipart."""
        cost_price = draft.cost_price if draft.cost_price is not None else 0
        return {
            "name": draft.name.strip(),
            "type": draft.type.strip(),
            "brand": draft.brand.strip(),
            "fabric": draft.fabric.strip(),
            "tags": normalize_tags(draft.tags),
            "description": draft.description.strip(),
            "base_price": _format_decimal(draft.base_price),
            "cost_price": _format_decimal(cost_price),
        }

    @staticmethod
    def _build_multipart(
        fields: dict[str, str],
        file_field: str,
        images: Sequence[ImageUpload],
    ) -> MultipartParts:
        """Arma las partes multipart: campos de texto y luego archivos.

        Los campos van como partes sin nombre de archivo para que el cuerpo
        sea multipart aun cuando no se suben imagenes.
        """
        parts: MultipartParts = [(name, (None, value)) for name, value in fields.items()]
        for image in images:
            try:
                content = image.path.read_bytes()
            except OSError as exc:
                LOGGER.exception("No se pudo leer la imagen: %s", image.path)
                raise ServiceError(f"No fue posible leer la imagen: {image.filename}") from exc
            parts.append((file_field, (image.filename, content, image.content_type)))
        return parts


def _format_decimal(value: float) -> str:
    """Formatea precios sin decimales sobrantes (1500.0 -> '1500')."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")
