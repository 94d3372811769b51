"""Notificaciones transitorias hacia el usuario."""

from __future__ import annotations

import logging
from typing import Protocol

LOGGER = logging.getLogger(__name__)


class Notifier(Protocol):
    """Interfaz de avisos breves (exito, error, advertencia)."""

    def success(self, title: str, description: str = "") -> None:
        """Informa una accion exitosa."""

    def error(self, title: str, description: str = "") -> None:
        """Informa un error sin bloquear la interaccion."""

    def warning(self, title: str, description: str = "") -> None:
        """Informa una advertencia."""


class LoggingNotifier:
    """Notifier sin UI: deja los avisos en el log."""

    def success(self, title: str, description: str = "") -> None:
        LOGGER.info("%s %s", title, description)

    def error(self, title: str, description: str = "") -> None:
        LOGGER.error("%s %s", title, description)

    def warning(self, title: str, description: str = "") -> None:
        LOGGER.warning("%s %s", title, description)
