"""Cache de consultas a la API con ventana de frescura e invalidacion."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import Any

from parametros import CACHE_GC_TIME, DEFAULT_STALE_TIME

LOGGER = logging.getLogger(__name__)

QueryKey = tuple[Hashable, ...]
QueryListener = Callable[[QueryKey], None]


@dataclass(slots=True)
class _CacheEntry:
    data: Any
    updated_at: float
    last_accessed: float
    invalidated: bool = False
    invalidations: int = 0
    listeners: list[QueryListener] = field(default_factory=list)


def matches_prefix(key: QueryKey, prefix: QueryKey) -> bool:
    """True si ``key`` comienza con ``prefix`` (("products",) cubre ("products", "jean"))."""
    return key[: len(prefix)] == prefix


class QueryCache:
    """Mapea claves de consulta a datos cacheados y su marca de frescura.

    Una lectura dentro de la ventana de frescura no llama al fetcher. La
    invalidacion marca entradas como vencidas y notifica a sus suscriptores
    para que la vista visible vuelva a consultar. Las entradas sin
    suscriptores que no se leen durante ``gc_time`` se descartan.
    """

    def __init__(
        self,
        default_stale_time: float = DEFAULT_STALE_TIME,
        gc_time: float = CACHE_GC_TIME,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_stale_time = default_stale_time
        self._gc_time = gc_time
        self._clock = clock
        self._entries: dict[QueryKey, _CacheEntry] = {}
        self._lock = threading.RLock()

    def fetch_query(
        self,
        key: QueryKey,
        fetcher: Callable[[], Any],
        stale_time: float | None = None,
    ) -> Any:
        """Retorna datos frescos del cache o consulta y guarda el resultado."""
        self.collect_garbage()
        ttl = self._default_stale_time if stale_time is None else stale_time
        with self._lock:
            entry = self._entries.get(key)
            now = self._clock()
            if entry is not None and not self._entry_is_stale(entry, ttl, now):
                entry.last_accessed = now
                LOGGER.debug("Cache hit: %s", key)
                return entry.data
            invalidations = entry.invalidations if entry is not None else 0

        LOGGER.debug("Cache miss: %s", key)
        data = fetcher()
        self._store(key, data, fetched_after=invalidations)
        return data

    def get_query_data(self, key: QueryKey) -> Any:
        """Retorna datos cacheados (frescos o no) sin consultar; None si no hay."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            entry.last_accessed = self._clock()
            return entry.data

    def set_query_data(self, key: QueryKey, value: Any) -> Any:
        """Guarda datos para la clave; acepta un valor o un updater(previo)."""
        return self._store(key, value)

    def _store(self, key: QueryKey, value: Any, fetched_after: int | None = None) -> Any:
        """Guarda datos para la clave.

        Con ``fetched_after``, una invalidacion ocurrida durante la consulta
        deja la entrada vencida: los datos se leyeron antes de ella.
        """
        with self._lock:
            entry = self._entries.get(key)
            previous = entry.data if entry is not None else None
            data = value(previous) if callable(value) else value
            now = self._clock()
            if entry is None:
                entry = _CacheEntry(data=data, updated_at=now, last_accessed=now)
                self._entries[key] = entry
            else:
                entry.data = data
                entry.updated_at = now
                entry.last_accessed = now
                entry.invalidated = (
                    fetched_after is not None and entry.invalidations != fetched_after
                )
            listeners = list(entry.listeners)

        self._notify(key, listeners)
        return data

    def is_stale(self, key: QueryKey, stale_time: float | None = None) -> bool:
        ttl = self._default_stale_time if stale_time is None else stale_time
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return True
            return self._entry_is_stale(entry, ttl, self._clock())

    def invalidate_queries(self, prefix: QueryKey) -> int:
        """Marca como vencidas las entradas que coinciden con el prefijo."""
        to_notify: list[tuple[QueryKey, list[QueryListener]]] = []
        with self._lock:
            for key, entry in self._entries.items():
                if matches_prefix(key, prefix):
                    entry.invalidated = True
                    entry.invalidations += 1
                    to_notify.append((key, list(entry.listeners)))

        LOGGER.debug("Invalidadas %s entradas con prefijo %s", len(to_notify), prefix)
        for key, listeners in to_notify:
            self._notify(key, listeners)
        return len(to_notify)

    def remove_queries(self, prefix: QueryKey) -> int:
        """Elimina las entradas que coinciden con el prefijo."""
        with self._lock:
            keys = [key for key in self._entries if matches_prefix(key, prefix)]
            for key in keys:
                del self._entries[key]
        return len(keys)

    def subscribe(self, key: QueryKey, listener: QueryListener) -> Callable[[], None]:
        """Registra un observador de la clave; retorna la funcion para anularlo.

        Una clave observada no se descarta por recoleccion.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                now = self._clock()
                entry = _CacheEntry(
                    data=None,
                    updated_at=now,
                    last_accessed=now,
                    invalidated=True,
                )
                self._entries[key] = entry
            entry.listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                current = self._entries.get(key)
                if current is not None and listener in current.listeners:
                    current.listeners.remove(listener)
                    current.last_accessed = self._clock()

        return unsubscribe

    def collect_garbage(self) -> int:
        """Descarta entradas sin observadores y sin lecturas recientes."""
        with self._lock:
            now = self._clock()
            expired = [
                key
                for key, entry in self._entries.items()
                if not entry.listeners and now - entry.last_accessed >= self._gc_time
            ]
            for key in expired:
                del self._entries[key]

        if expired:
            LOGGER.debug("Recolectadas %s entradas sin uso", len(expired))
        return len(expired)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    @staticmethod
    def _entry_is_stale(entry: _CacheEntry, stale_time: float, now: float) -> bool:
        return entry.invalidated or now - entry.updated_at >= stale_time

    @staticmethod
    def _notify(key: QueryKey, listeners: list[QueryListener]) -> None:
        for listener in listeners:
            listener(key)
