"""Ejecucion de llamadas bloqueantes fuera del hilo de UI."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any

from parametros import API_WORKERS

LOGGER = logging.getLogger(__name__)

Dispatch = Callable[[Callable[[], None]], None]


def call_now(callback: Callable[[], None]) -> None:
    """Dispatch por defecto: ejecuta el callback en el hilo que resuelve."""
    callback()


class TaskRunner:
    """Envia trabajos a un pool y entrega el resultado via ``dispatch``.

    ``dispatch`` decide en que hilo corren los callbacks; la UI Qt lo
    reemplaza por una senal para volver al hilo principal.
    """

    def __init__(
        self,
        executor: Executor | None = None,
        dispatch: Dispatch = call_now,
    ) -> None:
        self._executor = executor or ThreadPoolExecutor(
            max_workers=API_WORKERS,
            thread_name_prefix="api",
        )
        self._dispatch = dispatch

    def set_dispatch(self, dispatch: Dispatch) -> None:
        self._dispatch = dispatch

    def submit(
        self,
        work: Callable[[], Any],
        on_success: Callable[[Any], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> Future:
        """Ejecuta ``work`` en el pool; los callbacks corren via dispatch."""
        future = self._executor.submit(work)

        def _on_done(done: Future) -> None:
            if done.cancelled():
                LOGGER.info("Tarea en segundo plano cancelada.")
                return

            error = done.exception()
            if error is None:
                if on_success is not None:
                    result = done.result()
                    self._dispatch(lambda: on_success(result))
                return

            if on_error is None or not isinstance(error, Exception):
                LOGGER.error("Tarea en segundo plano fallo sin manejador: %r", error)
                return
            exc: Exception = error
            self._dispatch(lambda: on_error(exc))

        future.add_done_callback(_on_done)
        return future

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)
