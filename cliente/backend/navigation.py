"""Rutas de la app y redireccion."""

from __future__ import annotations

import logging
from typing import Protocol

LOGGER = logging.getLogger(__name__)

ROUTE_LOGIN = "/login"
ROUTE_DASHBOARD = "/"
ROUTE_STOCK = "/stock"
ROUTE_STOCK_NEW = "/stock/new"
ROUTE_STOCK_EDIT = "/stock/edit"

PUBLIC_ROUTES: frozenset[str] = frozenset({ROUTE_LOGIN})


class Navigator(Protocol):
    """Interfaz para cambiar la pantalla visible."""

    def redirect(self, route: str) -> None:
        """Reemplaza la pantalla actual por la de ``route``."""


class RecordingNavigator:
    """Navigator sin UI que solo recuerda la ruta actual."""

    def __init__(self, initial_route: str = ROUTE_LOGIN) -> None:
        self.current_route = initial_route
        self.history: list[str] = []

    def redirect(self, route: str) -> None:
        LOGGER.info("Redireccion a %s", route)
        self.current_route = route
        self.history.append(route)
