"""Tests del controlador optimista de stock por sucursal."""

from __future__ import annotations

import unittest
from concurrent.futures import Executor, Future
from unittest import mock

from cliente.backend.query_cache import QueryCache
from cliente.backend.stock_mutations import StockMutationController
from cliente.backend.tasks import TaskRunner
from shared.errors import ServiceError, ValidationError
from shared.protocol import Variant


class DeferredExecutor(Executor):
    """Executor que retiene los trabajos hasta que el test los ejecuta."""

    def __init__(self) -> None:
        self.pending: list[tuple[object, Future]] = []

    def submit(self, fn, /, *args, **kwargs) -> Future:  # type: ignore[override]
        future: Future = Future()
        self.pending.append((lambda: fn(*args, **kwargs), future))
        return future

    def run_next(self) -> None:
        self._run(0)

    def run_last(self) -> None:
        self._run(-1)

    def _run(self, index: int) -> None:
        work, future = self.pending.pop(index)
        try:
            future.set_result(work())
        except Exception as exc:  # noqa: BLE001
            future.set_exception(exc)


class StockMutationControllerTests(unittest.TestCase):
    """Valida actualizacion inmediata, reversion e invalidacion del listado."""

    def setUp(self) -> None:
        self.executor = DeferredExecutor()
        self.gateway = mock.Mock()
        self.notifier = mock.Mock()
        self.cache = QueryCache()
        self.controller = StockMutationController(
            gateway=self.gateway,
            query_cache=self.cache,
            task_runner=TaskRunner(executor=self.executor),
            notifier=self.notifier,
        )
        self.controller.load_variants(
            [Variant(id=10, size="M", color="Azul", stock_by_branch={1: 3, 2: 1}, total_stock=4)]
        )

    def test_increment_updates_display_before_server_confirms(self) -> None:
        """El valor mostrado cambia antes de que la API responda."""
        self.controller.increment(10, 1)

        self.assertEqual(self.controller.quantity(10, 1), 4)
        self.assertTrue(self.controller.is_pending(10, 1))
        self.gateway.update_variant_stock.assert_not_called()

        self.executor.run_next()

        self.gateway.update_variant_stock.assert_called_once_with(10, 1, 4)
        self.assertFalse(self.controller.is_pending(10, 1))
        self.assertEqual(self.controller.quantity(10, 1), 4)

    def test_failure_reverts_to_confirmed_value_and_notifies(self) -> None:
        """Si la API falla se vuelve al valor previo y se avisa al usuario."""
        self.gateway.update_variant_stock.side_effect = ServiceError("sin conexion")

        self.controller.increment(10, 1)
        self.assertEqual(self.controller.quantity(10, 1), 4)
        self.executor.run_next()

        self.assertEqual(self.controller.quantity(10, 1), 3)
        self.notifier.error.assert_called_once_with("No se pudo actualizar el stock", "sin conexion")

    def test_settlement_invalidates_products_listing(self) -> None:
        """Exito o falla, el listado y el detalle de productos quedan vencidos."""
        self.cache.set_query_data(("products", ""), [])
        self.cache.set_query_data(("products", "jean"), [])
        self.cache.set_query_data(("product", 1), {})

        self.controller.increment(10, 2)
        self.assertFalse(self.cache.is_stale(("products", "")))
        self.executor.run_next()

        self.assertTrue(self.cache.is_stale(("products", "")))
        self.assertTrue(self.cache.is_stale(("products", "jean")))
        self.assertTrue(self.cache.is_stale(("product", 1)))

        self.cache.set_query_data(("products", ""), [])
        self.gateway.update_variant_stock.side_effect = ServiceError("error")
        self.controller.increment(10, 2)
        self.executor.run_next()

        self.assertTrue(self.cache.is_stale(("products", "")))

    def test_stale_failure_does_not_revert_newer_value(self) -> None:
        """Una falla antigua no pisa un valor optimista emitido despues."""
        self.gateway.update_variant_stock.side_effect = [ServiceError("error"), None]

        self.controller.increment(10, 1)
        self.controller.increment(10, 1)
        self.assertEqual(self.controller.quantity(10, 1), 5)

        self.executor.run_next()
        self.assertEqual(self.controller.quantity(10, 1), 5)
        self.assertTrue(self.controller.is_pending(10, 1))

        self.executor.run_next()
        self.assertEqual(self.controller.quantity(10, 1), 5)
        self.assertFalse(self.controller.is_pending(10, 1))

    def test_latest_failure_reverts_to_last_confirmed_value(self) -> None:
        """Si falla la ultima mutacion se vuelve al ultimo valor confirmado."""
        self.gateway.update_variant_stock.side_effect = [None, ServiceError("error")]

        self.controller.increment(10, 1)
        self.controller.increment(10, 1)
        self.executor.run_next()
        self.executor.run_next()

        self.assertEqual(self.controller.quantity(10, 1), 4)

    def test_out_of_order_success_after_newer_failure_shows_confirmed(self) -> None:
        """Si la mas nueva falla primero y la anterior se confirma, se muestra lo confirmado."""
        self.gateway.update_variant_stock.side_effect = [ServiceError("error"), None]

        self.controller.increment(10, 1)
        self.controller.increment(10, 1)

        self.executor.run_last()
        self.assertEqual(self.controller.quantity(10, 1), 3)
        self.assertTrue(self.controller.is_pending(10, 1))

        self.executor.run_next()
        self.assertFalse(self.controller.is_pending(10, 1))
        self.assertEqual(self.controller.quantity(10, 1), 4)
        self.gateway.update_variant_stock.assert_called_with(10, 1, 4)

    def test_branches_are_independent(self) -> None:
        """Cambiar una sucursal no afecta a la otra."""
        self.controller.decrement(10, 2)

        self.assertEqual(self.controller.quantity(10, 2), 0)
        self.assertEqual(self.controller.quantity(10, 1), 3)

    def test_decrement_at_zero_does_nothing(self) -> None:
        """En cero no se envia ninguna mutacion."""
        self.controller.decrement(10, 2)
        self.executor.run_next()
        self.gateway.update_variant_stock.reset_mock()

        self.assertIsNone(self.controller.decrement(10, 2))
        self.assertEqual(self.executor.pending, [])
        self.assertEqual(self.controller.quantity(10, 2), 0)

    def test_negative_quantity_is_rejected_without_changes(self) -> None:
        """Una cantidad negativa no cambia el valor ni llama a la API."""
        with self.assertRaises(ValidationError):
            self.controller.set_quantity(10, 1, -1)

        self.assertEqual(self.controller.quantity(10, 1), 3)
        self.assertEqual(self.executor.pending, [])

    def test_unknown_branch_is_rejected(self) -> None:
        """Solo se aceptan las sucursales conocidas."""
        with self.assertRaises(ValidationError):
            self.controller.set_quantity(10, 99, 1)

        self.assertEqual(self.executor.pending, [])

    def test_load_variants_keeps_pending_optimistic_value(self) -> None:
        """Datos del servidor no pisan un par con mutacion en vuelo."""
        self.controller.increment(10, 1)

        self.controller.load_variants(
            [Variant(id=10, size="M", color="Azul", stock_by_branch={1: 3, 2: 7}, total_stock=10)]
        )

        self.assertEqual(self.controller.quantity(10, 1), 4)
        self.assertEqual(self.controller.quantity(10, 2), 7)

    def test_listeners_receive_display_changes(self) -> None:
        """Los listeners reciben la clave y la cantidad nueva."""
        listener = mock.Mock()
        unsubscribe = self.controller.subscribe(listener)

        self.controller.increment(10, 1)
        listener.assert_called_once_with((10, 1), 4)

        unsubscribe()
        self.controller.increment(10, 1)
        listener.assert_called_once()


if __name__ == "__main__":
    unittest.main()
