"""Tests de frescura, invalidacion y recoleccion del cache de consultas."""

from __future__ import annotations

import unittest
from unittest import mock

from cliente.backend.query_cache import QueryCache, matches_prefix


class FakeClock:
    """Reloj manual para controlar el paso del tiempo."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class QueryCacheTests(unittest.TestCase):
    """Valida el ciclo de vida de las entradas cacheadas."""

    def setUp(self) -> None:
        self.clock = FakeClock()
        self.cache = QueryCache(default_stale_time=60.0, gc_time=300.0, clock=self.clock)

    def test_fetch_within_stale_time_does_not_call_fetcher_again(self) -> None:
        """Dentro de la ventana de frescura debe reutilizar el dato cacheado."""
        fetcher = mock.Mock(return_value=["a"])

        self.assertEqual(self.cache.fetch_query(("products", ""), fetcher), ["a"])
        self.clock.advance(59)
        self.assertEqual(self.cache.fetch_query(("products", ""), fetcher), ["a"])

        self.assertEqual(fetcher.call_count, 1)

    def test_fetch_after_stale_time_refetches(self) -> None:
        """Vencida la ventana debe volver a consultar."""
        fetcher = mock.Mock(side_effect=[["a"], ["b"]])

        self.cache.fetch_query(("products", ""), fetcher)
        self.clock.advance(60)

        self.assertEqual(self.cache.fetch_query(("products", ""), fetcher), ["b"])
        self.assertEqual(fetcher.call_count, 2)

    def test_per_query_stale_time_overrides_default(self) -> None:
        """Una ventana propia de la consulta reemplaza la de por defecto."""
        fetcher = mock.Mock(return_value=[])

        self.cache.fetch_query(("products", ""), fetcher, stale_time=300.0)
        self.clock.advance(120)
        self.cache.fetch_query(("products", ""), fetcher, stale_time=300.0)

        self.assertEqual(fetcher.call_count, 1)

    def test_invalidate_by_prefix_marks_matching_keys_only(self) -> None:
        """Invalidar ("products",) afecta todas las busquedas y nada mas."""
        self.cache.set_query_data(("products", ""), [])
        self.cache.set_query_data(("products", "jean"), [])
        self.cache.set_query_data(("product", 7), {"id": 7})

        invalidated = self.cache.invalidate_queries(("products",))

        self.assertEqual(invalidated, 2)
        self.assertTrue(self.cache.is_stale(("products", "")))
        self.assertTrue(self.cache.is_stale(("products", "jean")))
        self.assertFalse(self.cache.is_stale(("product", 7)))

    def test_invalidated_entry_is_refetched_on_next_read(self) -> None:
        """Tras invalidar, la siguiente lectura debe consultar aunque este fresca."""
        fetcher = mock.Mock(side_effect=[["viejo"], ["nuevo"]])

        self.cache.fetch_query(("products", ""), fetcher)
        self.cache.invalidate_queries(("products",))

        self.assertEqual(self.cache.fetch_query(("products", ""), fetcher), ["nuevo"])

    def test_invalidation_during_fetch_keeps_entry_stale(self) -> None:
        """Datos leidos antes de una invalidacion concurrente no quedan frescos."""
        self.cache.set_query_data(("products", ""), ["viejo"])
        self.cache.invalidate_queries(("products",))

        def fetch_while_stock_changes() -> list[str]:
            self.cache.invalidate_queries(("products",))
            return ["leido antes del cambio"]

        result = self.cache.fetch_query(("products", ""), fetch_while_stock_changes)

        self.assertEqual(result, ["leido antes del cambio"])
        self.assertTrue(self.cache.is_stale(("products", "")))
        fetcher = mock.Mock(return_value=["nuevo"])
        self.assertEqual(self.cache.fetch_query(("products", ""), fetcher), ["nuevo"])
        self.assertFalse(self.cache.is_stale(("products", "")))

    def test_invalidate_notifies_subscribers(self) -> None:
        """Los observadores de la clave deben enterarse de la invalidacion."""
        listener = mock.Mock()
        self.cache.set_query_data(("products", ""), [])
        self.cache.subscribe(("products", ""), listener)

        self.cache.invalidate_queries(("products",))

        listener.assert_called_once_with(("products", ""))

    def test_unsubscribe_stops_notifications(self) -> None:
        """Despues de anular la suscripcion no debe haber avisos."""
        listener = mock.Mock()
        unsubscribe = self.cache.subscribe(("products", ""), listener)

        unsubscribe()
        self.cache.invalidate_queries(("products",))

        listener.assert_not_called()

    def test_subscribe_to_missing_key_creates_stale_placeholder(self) -> None:
        """Observar una clave sin datos la deja vencida para forzar la consulta."""
        self.cache.subscribe(("products", "remera"), mock.Mock())

        self.assertIn(("products", "remera"), self.cache)
        self.assertIsNone(self.cache.get_query_data(("products", "remera")))
        self.assertTrue(self.cache.is_stale(("products", "remera")))

    def test_set_query_data_accepts_updater(self) -> None:
        """Un callable recibe el valor previo y su retorno se guarda."""
        self.cache.set_query_data(("counter",), 1)

        result = self.cache.set_query_data(("counter",), lambda previous: previous + 1)

        self.assertEqual(result, 2)
        self.assertEqual(self.cache.get_query_data(("counter",)), 2)

    def test_remove_queries_drops_entries(self) -> None:
        """Remover con prefijo vacio limpia todo el cache."""
        self.cache.set_query_data(("products", ""), [])
        self.cache.set_query_data(("product", 1), {})

        self.assertEqual(self.cache.remove_queries(()), 2)
        self.assertNotIn(("products", ""), self.cache)

    def test_garbage_collection_skips_observed_entries(self) -> None:
        """Solo se descartan entradas sin observadores ni lecturas recientes."""
        self.cache.set_query_data(("products", ""), [])
        self.cache.set_query_data(("product", 1), {})
        self.cache.subscribe(("products", ""), mock.Mock())

        self.clock.advance(301)

        self.assertEqual(self.cache.collect_garbage(), 1)
        self.assertIn(("products", ""), self.cache)
        self.assertNotIn(("product", 1), self.cache)

    def test_failed_fetch_is_not_cached(self) -> None:
        """Si el fetcher falla el error se propaga y no se guarda nada."""
        fetcher = mock.Mock(side_effect=RuntimeError("sin red"))

        with self.assertRaises(RuntimeError):
            self.cache.fetch_query(("products", ""), fetcher)

        self.assertNotIn(("products", ""), self.cache)

    def test_matches_prefix(self) -> None:
        """El prefijo debe coincidir elemento a elemento."""
        self.assertTrue(matches_prefix(("products", "jean"), ("products",)))
        self.assertTrue(matches_prefix(("products",), ()))
        self.assertFalse(matches_prefix(("product", 1), ("products",)))


if __name__ == "__main__":
    unittest.main()
