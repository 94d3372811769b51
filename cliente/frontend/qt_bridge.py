"""Puentes entre el backend (hilos de trabajo) y el hilo de la UI Qt."""

from __future__ import annotations

from collections.abc import Callable

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot
from PyQt6.QtWidgets import QMainWindow, QWidget

from cliente.frontend.dialogs import show_error, show_warning

_STATUS_TIMEOUT_MS = 4000


class QtDispatcher(QObject):
    """Ejecuta callbacks en el hilo del objeto (el de la UI).

    Emitir la senal desde un hilo de trabajo encola la llamada en el loop
    de Qt; desde el hilo de UI se ejecuta directamente.
    """

    _call_requested = pyqtSignal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._call_requested.connect(self._run)

    def __call__(self, callback: Callable[[], None]) -> None:
        self._call_requested.emit(callback)

    @pyqtSlot(object)
    def _run(self, callback: Callable[[], None]) -> None:
        callback()


class QtNotifier:
    """Avisos: exitos en la barra de estado, errores y advertencias en dialogo."""

    def __init__(self, dispatcher: QtDispatcher) -> None:
        self._dispatcher = dispatcher
        self._window: QMainWindow | None = None

    def attach(self, window: QMainWindow) -> None:
        self._window = window

    def success(self, title: str, description: str = "") -> None:
        text = f"{title}. {description}" if description else title
        self._dispatcher(lambda: self._show_status(text))

    def error(self, title: str, description: str = "") -> None:
        self._dispatcher(lambda: show_error(self._parent(), title, description or title))

    def warning(self, title: str, description: str = "") -> None:
        self._dispatcher(lambda: show_warning(self._parent(), title, description or title))

    def _show_status(self, text: str) -> None:
        if self._window is not None:
            self._window.statusBar().showMessage(text, _STATUS_TIMEOUT_MS)

    def _parent(self) -> QWidget | None:
        return self._window
