"""Inicializacion de la aplicacion de cliente."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from PyQt6.QtGui import QIcon
from PyQt6.QtWidgets import QApplication

from cliente.backend.api_client import ApiClient
from cliente.backend.controller import AppController
from cliente.backend.gateway import HttpServerGateway
from cliente.backend.query_cache import QueryCache
from cliente.backend.session_store import AuthSessionStore
from cliente.backend.tasks import TaskRunner
from cliente.frontend.main_window import MainWindow
from cliente.frontend.qt_bridge import QtDispatcher, QtNotifier
from parametros import API_URL

LOGGER = logging.getLogger(__name__)


def main() -> int:
    """Ejecuta la aplicacion grafica."""
    app = QApplication(sys.argv)
    icon_path = Path(__file__).resolve().parent / "utilities" / "icono.ico"
    if icon_path.exists():
        app.setWindowIcon(QIcon(str(icon_path)))
    else:
        LOGGER.warning("No se encontro icono de aplicacion en: %s", icon_path)

    dispatcher = QtDispatcher()
    task_runner = TaskRunner(dispatch=dispatcher)
    session_store = AuthSessionStore()
    api_client = ApiClient(session_store=session_store, base_url=API_URL)
    notifier = QtNotifier(dispatcher)

    controller = AppController(
        gateway=HttpServerGateway(api_client),
        session_store=session_store,
        query_cache=QueryCache(),
        task_runner=task_runner,
        notifier=notifier,
    )
    api_client.set_unauthorized_handler(controller.handle_unauthorized)

    window = MainWindow(controller=controller, dispatcher=dispatcher)
    controller.set_navigator(window)
    notifier.attach(window)
    if not app.windowIcon().isNull():
        window.setWindowIcon(app.windowIcon())
    window.showMaximized()

    LOGGER.info("Aplicacion iniciada contra %s", API_URL)
    try:
        return app.exec()
    finally:
        task_runner.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
