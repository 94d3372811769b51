"""Tests del TaskRunner: entrega de resultados, errores y cancelaciones."""

from __future__ import annotations

import unittest
from concurrent.futures import Executor, Future
from unittest import mock

from cliente.backend.tasks import TaskRunner


class PendingExecutor(Executor):
    """Executor que no ejecuta nada: el test resuelve cada futuro."""

    def __init__(self) -> None:
        self.futures: list[Future] = []

    def submit(self, fn, /, *args, **kwargs) -> Future:  # type: ignore[override]
        future: Future = Future()
        self.futures.append(future)
        return future


class TaskRunnerTests(unittest.TestCase):
    """Valida que los callbacks se entreguen solo cuando corresponde."""

    def setUp(self) -> None:
        self.executor = PendingExecutor()
        self.dispatch = mock.Mock(side_effect=lambda callback: callback())
        self.runner = TaskRunner(executor=self.executor, dispatch=self.dispatch)
        self.on_success = mock.Mock()
        self.on_error = mock.Mock()

    def _submit(self) -> Future:
        return self.runner.submit(
            mock.Mock(),
            on_success=self.on_success,
            on_error=self.on_error,
        )

    def test_result_is_dispatched_to_on_success(self) -> None:
        """El resultado llega a on_success via dispatch."""
        future = self._submit()

        future.set_result(["ok"])

        self.on_success.assert_called_once_with(["ok"])
        self.on_error.assert_not_called()
        self.dispatch.assert_called_once()

    def test_exception_is_dispatched_to_on_error(self) -> None:
        """Una excepcion de la tarea llega a on_error."""
        future = self._submit()
        error = RuntimeError("sin red")

        future.set_exception(error)

        self.on_error.assert_called_once_with(error)
        self.on_success.assert_not_called()

    def test_cancelled_task_calls_no_callback(self) -> None:
        """Una tarea cancelada no entrega resultado ni error."""
        future = self._submit()

        self.assertTrue(future.cancel())

        self.on_success.assert_not_called()
        self.on_error.assert_not_called()
        self.dispatch.assert_not_called()

    def test_base_exception_is_logged_not_dispatched(self) -> None:
        """Errores que no son Exception no llegan a on_error."""
        future = self._submit()

        with self.assertLogs("cliente.backend.tasks", level="ERROR"):
            future.set_exception(SystemExit(1))

        self.on_error.assert_not_called()
        self.dispatch.assert_not_called()


if __name__ == "__main__":
    unittest.main()
