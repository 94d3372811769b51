"""Validaciones para entradas del cliente."""

from __future__ import annotations

import re
from collections.abc import Sequence

from parametros import MAX_PRODUCT_IMAGES
from shared.catalog import BRANCHES
from shared.errors import ValidationError
from shared.protocol import ImageUpload, ProductDraft

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_MIN_PASSWORD_LENGTH = 6
_MIN_NAME_LENGTH = 3


def validate_login(email: str, password: str) -> None:
    """Valida credenciales antes de enviarlas a la API."""
    errors: list[str] = []

    email_clean = email.strip()
    if not email_clean:
        errors.append("El correo electrónico es obligatorio")
    elif not _EMAIL_PATTERN.fullmatch(email_clean):
        errors.append("Ingresa un correo electrónico válido")

    if not password:
        errors.append("La contraseña es obligatoria")
    elif len(password) < _MIN_PASSWORD_LENGTH:
        errors.append("La contraseña debe tener al menos 6 caracteres")

    _raise_if_errors(errors)


def validate_product_draft(draft: ProductDraft) -> None:
    """Valida campos del producto y de cada variante."""
    errors: list[str] = []

    if len(draft.name.strip()) < _MIN_NAME_LENGTH:
        errors.append("El nombre debe tener al menos 3 letras")
    if not draft.type.strip():
        errors.append("Selecciona el tipo de prenda")
    if not draft.brand.strip():
        errors.append("La marca es obligatoria")
    if draft.base_price <= 0:
        errors.append("El precio debe ser mayor a 0")
    if draft.cost_price is not None and draft.cost_price < 0:
        errors.append("El costo no puede ser negativo")

    if not draft.variants:
        errors.append("Debes cargar al menos una variante de stock")

    for index, variant in enumerate(draft.variants, start=1):
        if not variant.size.strip():
            errors.append(f"Variante {index}: el talle es obligatorio")
        if not variant.color.strip():
            errors.append(f"Variante {index}: el color es obligatorio")
        for branch in BRANCHES:
            if variant.stock_by_branch.get(branch.id, 0) < 0:
                errors.append(f"Variante {index}: stock {branch.name} mínimo 0")

    _raise_if_errors(errors)


def validate_new_product_images(images: Sequence[ImageUpload]) -> None:
    """Un producto nuevo necesita entre 1 y el maximo de imagenes."""
    if not images:
        raise ValidationError("Debes subir al menos una foto del producto.")
    if len(images) > MAX_PRODUCT_IMAGES:
        raise ValidationError(f"Máximo {MAX_PRODUCT_IMAGES} imágenes permitidas")


def validate_image_total(existing_count: int, new_count: int) -> None:
    """Imagenes existentes + nuevas no pueden superar el maximo."""
    if existing_count + new_count > MAX_PRODUCT_IMAGES:
        raise ValidationError(f"Máximo {MAX_PRODUCT_IMAGES} imágenes permitidas")


def _raise_if_errors(errors: list[str]) -> None:
    if errors:
        raise ValidationError("Completa los datos: " + "; ".join(errors) + ".")
