"""Actualizacion optimista del stock por variante y sucursal."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Iterable
from concurrent.futures import Future

from shared.catalog import BRANCHES, get_branch
from shared.errors import ValidationError
from shared.protocol import Variant

from .gateway import ServerGateway
from .notifications import Notifier
from .query_cache import QueryCache, QueryKey
from .tasks import TaskRunner

LOGGER = logging.getLogger(__name__)

StockKey = tuple[int, int]
StockListener = Callable[[StockKey, int], None]

PRODUCTS_QUERY_PREFIX: QueryKey = ("products",)
PRODUCT_DETAIL_QUERY_PREFIX: QueryKey = ("product",)


class StockMutationController:
    """Aplica cantidades por (variante, sucursal) antes de que el servidor confirme.

    El valor mostrado cambia al instante. Si la API falla, se vuelve al
    ultimo valor confirmado por el servidor y se avisa al usuario. Al
    resolverse cada mutacion se invalidan el listado y el detalle de
    productos para que los totales y el stock por sucursal se resincronicen.
    Dos mutaciones sobre el mismo par se pisan localmente (gana la ultima
    emitida); una falla antigua no revierte un valor optimista mas nuevo, y
    al confirmarse la ultima pendiente se muestra el valor confirmado.

    El estado solo se toca desde el hilo de dispatch del ``TaskRunner``.
    """

    def __init__(
        self,
        gateway: ServerGateway,
        query_cache: QueryCache,
        task_runner: TaskRunner,
        notifier: Notifier,
        invalidate_prefixes: tuple[QueryKey, ...] = (
            PRODUCTS_QUERY_PREFIX,
            PRODUCT_DETAIL_QUERY_PREFIX,
        ),
    ) -> None:
        self._gateway = gateway
        self._query_cache = query_cache
        self._task_runner = task_runner
        self._notifier = notifier
        self._invalidate_prefixes = invalidate_prefixes
        self._displayed: dict[StockKey, int] = {}
        self._confirmed: dict[StockKey, int] = {}
        self._latest_generation: dict[StockKey, int] = {}
        self._in_flight: dict[StockKey, int] = {}
        self._generations = itertools.count(1)
        self._listeners: list[StockListener] = []

    def load_variants(self, variants: Iterable[Variant]) -> None:
        """Siembra cantidades desde datos del servidor.

        Los pares con una mutacion en vuelo conservan su valor optimista.
        """
        for variant in variants:
            for branch in BRANCHES:
                key = (variant.id, branch.id)
                if self.is_pending(variant.id, branch.id):
                    continue
                quantity = variant.stock_for(branch.id)
                self._confirmed[key] = quantity
                self._set_displayed(key, quantity)

    def quantity(self, variant_id: int, branch_id: int) -> int:
        key = (variant_id, branch_id)
        return self._displayed.get(key, self._confirmed.get(key, 0))

    def is_pending(self, variant_id: int, branch_id: int) -> bool:
        return self._in_flight.get((variant_id, branch_id), 0) > 0

    def subscribe(self, listener: StockListener) -> Callable[[], None]:
        """Registra un listener de cambios de cantidad mostrada."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def increment(self, variant_id: int, branch_id: int, step: int = 1) -> Future:
        return self.set_quantity(variant_id, branch_id, self.quantity(variant_id, branch_id) + step)

    def decrement(self, variant_id: int, branch_id: int, step: int = 1) -> Future | None:
        """Resta ``step``; en cero no hace nada y retorna None."""
        target = self.quantity(variant_id, branch_id) - step
        if target < 0:
            return None
        return self.set_quantity(variant_id, branch_id, target)

    def set_quantity(self, variant_id: int, branch_id: int, quantity: int) -> Future:
        """Muestra ``quantity`` de inmediato y la envia a la API."""
        if quantity < 0:
            raise ValidationError("La cantidad de stock no puede ser negativa.")
        try:
            branch = get_branch(branch_id)
        except KeyError as exc:
            raise ValidationError(f"Sucursal desconocida: {branch_id}") from exc

        key = (variant_id, branch_id)
        self._confirmed.setdefault(key, self.quantity(variant_id, branch_id))
        generation = next(self._generations)
        self._latest_generation[key] = generation
        self._in_flight[key] = self._in_flight.get(key, 0) + 1
        self._set_displayed(key, quantity)
        LOGGER.info(
            "Stock optimista: variant_id=%s, sucursal=%s, quantity=%s",
            variant_id,
            branch.name,
            quantity,
        )

        return self._task_runner.submit(
            lambda: self._gateway.update_variant_stock(variant_id, branch_id, quantity),
            on_success=lambda _result: self._settle(key, generation, quantity, None),
            on_error=lambda exc: self._settle(key, generation, quantity, exc),
        )

    def _settle(
        self,
        key: StockKey,
        generation: int,
        quantity: int,
        error: Exception | None,
    ) -> None:
        remaining = self._in_flight.get(key, 1) - 1
        if remaining > 0:
            self._in_flight[key] = remaining
        else:
            self._in_flight.pop(key, None)

        is_latest = self._latest_generation.get(key) == generation
        try:
            if error is None:
                self._confirmed[key] = quantity
                # Sin mutaciones pendientes el valor mostrado es el confirmado.
                if not self.is_pending(*key):
                    self._set_displayed(key, quantity)
                return

            LOGGER.warning(
                "Fallo actualizacion de stock: variant_id=%s, branch_id=%s, error=%s",
                key[0],
                key[1],
                error,
            )
            if is_latest:
                self._set_displayed(key, self._confirmed.get(key, 0))
            self._notifier.error("No se pudo actualizar el stock", str(error))
        finally:
            for prefix in self._invalidate_prefixes:
                self._query_cache.invalidate_queries(prefix)

    def _set_displayed(self, key: StockKey, quantity: int) -> None:
        if self._displayed.get(key) == quantity:
            return
        self._displayed[key] = quantity
        for listener in list(self._listeners):
            listener(key, quantity)
