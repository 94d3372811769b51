"""Fuente unica de sucursales, tipos de prenda y helpers de etiquetas."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Branch:
    """Sucursal fisica donde se particiona el stock."""

    id: int
    name: str
    form_field: str


BRANCH_CENTRO = Branch(id=1, name="Centro", form_field="stock_centro")
BRANCH_YERBA_BUENA = Branch(id=2, name="Yerba Buena", form_field="stock_yb")

BRANCHES: tuple[Branch, ...] = (BRANCH_CENTRO, BRANCH_YERBA_BUENA)

DEFAULT_PRODUCT_TYPES: tuple[str, ...] = (
    "Pantalón",
    "Remera",
    "Vestido",
    "Abrigo",
    "Accesorio",
)


def get_branch(branch_id: int) -> Branch:
    """Retorna la sucursal con el id indicado."""
    for branch in BRANCHES:
        if branch.id == branch_id:
            return branch
    raise KeyError(f"Sucursal desconocida: {branch_id}")


def normalize_tags(value: str) -> str:
    """Normaliza etiquetas separadas por coma, sin duplicados y en orden."""
    normalized: list[str] = []
    seen: set[str] = set()

    for raw_tag in value.split(","):
        tag = raw_tag.strip()
        if not tag or tag.casefold() in seen:
            continue
        seen.add(tag.casefold())
        normalized.append(tag)

    return ", ".join(normalized)
