"""Controlador principal del cliente."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from parametros import MAX_PRODUCT_IMAGES, PRODUCTS_STALE_TIME
from shared.catalog import DEFAULT_PRODUCT_TYPES
from shared.errors import ApiError, ServiceError, UnauthorizedError
from shared.protocol import ImageUpload, Product, ProductDraft

from .gateway import ServerGateway
from .navigation import (
    PUBLIC_ROUTES,
    ROUTE_DASHBOARD,
    ROUTE_LOGIN,
    ROUTE_STOCK,
    Navigator,
    RecordingNavigator,
)
from .notifications import LoggingNotifier, Notifier
from .product_formatter import DashboardSummary, build_dashboard_summary
from .query_cache import QueryCache, QueryKey
from .session_store import AuthSessionStore
from .stock_mutations import (
    PRODUCT_DETAIL_QUERY_PREFIX,
    PRODUCTS_QUERY_PREFIX,
    StockMutationController,
)
from .tasks import TaskRunner
from .validators import (
    validate_image_total,
    validate_login,
    validate_new_product_images,
    validate_product_draft,
)

LOGGER = logging.getLogger(__name__)

PRODUCT_TYPES_QUERY_KEY: QueryKey = ("product-types",)


def products_query_key(search: str = "") -> QueryKey:
    return (*PRODUCTS_QUERY_PREFIX, search.strip())


def product_query_key(product_id: int) -> QueryKey:
    return (*PRODUCT_DETAIL_QUERY_PREFIX, product_id)


class AppController:
    """Coordina acciones de UI, cache de consultas y servicios remotos."""

    def __init__(
        self,
        gateway: ServerGateway,
        session_store: AuthSessionStore,
        query_cache: QueryCache | None = None,
        task_runner: TaskRunner | None = None,
        notifier: Notifier | None = None,
        navigator: Navigator | None = None,
        stock_controller: StockMutationController | None = None,
    ) -> None:
        self._gateway = gateway
        self._session_store = session_store
        self._query_cache = query_cache or QueryCache()
        self._task_runner = task_runner or TaskRunner()
        self._notifier: Notifier = notifier or LoggingNotifier()
        self._navigator: Navigator = navigator or RecordingNavigator()
        self._stock = stock_controller or StockMutationController(
            gateway=gateway,
            query_cache=self._query_cache,
            task_runner=self._task_runner,
            notifier=self._notifier,
        )

    @property
    def session(self) -> AuthSessionStore:
        return self._session_store

    @property
    def query_cache(self) -> QueryCache:
        return self._query_cache

    @property
    def tasks(self) -> TaskRunner:
        return self._task_runner

    @property
    def stock(self) -> StockMutationController:
        return self._stock

    def set_navigator(self, navigator: Navigator) -> None:
        self._navigator = navigator

    def run_in_background(
        self,
        work: Callable[[], object],
        on_success: Callable[[object], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        """Ejecuta una accion del controller sin bloquear la UI."""
        self._task_runner.submit(work, on_success=on_success, on_error=on_error)

    # --- Sesion -----------------------------------------------------------------

    def login(self, email: str, password: str) -> bool:
        """Valida, autentica y guarda la sesion; redirige al dashboard."""
        validate_login(email, password)
        try:
            response = self._gateway.login(email.strip(), password)
        except UnauthorizedError:
            self._notifier.error("Error de acceso", "Credenciales inválidas.")
            return False
        except ServiceError as exc:
            self._notifier.error("Error de acceso", _describe_error(exc))
            return False

        self._session_store.set_auth(response.user, response.token)
        self._notifier.success(
            f"¡Bienvenida, {response.user.first_name}!",
            "Has ingresado al sistema correctamente.",
        )
        self._navigator.redirect(ROUTE_DASHBOARD)
        return True

    def logout(self) -> None:
        """Cierra sesion, descarta datos cacheados y vuelve al login."""
        self._session_store.logout()
        self._query_cache.remove_queries(())
        self._navigator.redirect(ROUTE_LOGIN)
        LOGGER.info("Accion ejecutada: logout")

    def handle_unauthorized(self) -> None:
        """La API rechazo el token: la sesion ya fue limpiada por el cliente HTTP."""
        self._query_cache.remove_queries(())
        self._notifier.warning("Sesión expirada", "Ingresa nuevamente.")
        self._navigator.redirect(ROUTE_LOGIN)

    def guard(self, route: str) -> bool:
        """Permite rutas publicas o con sesion; si no, redirige al login."""
        if route in PUBLIC_ROUTES or self._session_store.is_authenticated:
            return True
        self._navigator.redirect(ROUTE_LOGIN)
        return False

    def navigate(self, route: str) -> None:
        if self.guard(route):
            self._navigator.redirect(route)

    def welcome_message(self) -> str:
        user = self._session_store.user
        if user is None or not user.first_name:
            return "Bienvenida"
        return f"Bienvenida, {user.first_name}"

    # --- Consultas --------------------------------------------------------------

    def list_products(self, search: str = "") -> list[Product]:
        """Listado cacheado por texto de busqueda."""
        search_clean = search.strip()
        return self._query_cache.fetch_query(
            products_query_key(search_clean),
            lambda: self._gateway.get_products(page=1, search=search_clean),
            stale_time=PRODUCTS_STALE_TIME,
        )

    def get_product(self, product_id: int) -> Product:
        return self._query_cache.fetch_query(
            product_query_key(product_id),
            lambda: self._gateway.get_product(product_id),
        )

    def list_product_types(self) -> list[str]:
        types = self._query_cache.fetch_query(
            PRODUCT_TYPES_QUERY_KEY,
            self._gateway.get_product_types,
        )
        return list(types) if types else list(DEFAULT_PRODUCT_TYPES)

    def dashboard_summary(self) -> DashboardSummary:
        return build_dashboard_summary(self.list_products(""))

    def seed_stock(self, product: Product) -> None:
        """Carga cantidades por sucursal del producto en los contadores."""
        self._stock.load_variants(product.variants)

    # --- Mutaciones -------------------------------------------------------------

    def create_product(self, draft: ProductDraft, images: Sequence[ImageUpload]) -> bool:
        """Crea un producto; sin imagenes se rechaza antes de llamar a la API."""
        validate_product_draft(draft)
        validate_new_product_images(images)

        try:
            self._gateway.create_product(draft, images)
        except ServiceError as exc:
            self._notifier.error("Error al guardar", _describe_error(exc))
            return False

        self._notifier.success("Producto creado", "Ya está disponible para la venta.")
        self._query_cache.invalidate_queries(PRODUCTS_QUERY_PREFIX)
        self._navigator.redirect(ROUTE_STOCK)
        return True

    def update_product(
        self,
        product: Product,
        draft: ProductDraft,
        new_images: Sequence[ImageUpload] = (),
        deleted_image_ids: Sequence[int] = (),
        deleted_variant_ids: Sequence[int] = (),
    ) -> bool:
        """Actualiza un producto existente con altas y bajas de imagenes/variantes."""
        validate_product_draft(draft)
        deleted_ids = set(deleted_image_ids)
        remaining_images = [image for image in product.images if image.id not in deleted_ids]
        validate_image_total(len(remaining_images), len(new_images))

        try:
            self._gateway.update_product(
                product.id,
                draft,
                new_images=new_images,
                deleted_image_ids=deleted_image_ids,
                deleted_variant_ids=deleted_variant_ids,
            )
        except ServiceError as exc:
            self._notifier.error("Error al actualizar", _describe_error(exc))
            return False

        self._notifier.success("Producto actualizado")
        self._query_cache.invalidate_queries(PRODUCTS_QUERY_PREFIX)
        self._query_cache.invalidate_queries(product_query_key(product.id))
        self._navigator.redirect(ROUTE_STOCK)
        return True

    def delete_product(self, product_id: int) -> bool:
        """Elimina un producto; el listado se vuelve a pedir tras invalidar."""
        try:
            self._gateway.delete_product(product_id)
        except ServiceError:
            LOGGER.warning("No se pudo borrar el producto %s", product_id)
            self._notifier.error("Error", "No se pudo borrar el producto.")
            return False

        self._notifier.success("Producto eliminado")
        self._query_cache.remove_queries(product_query_key(product_id))
        self._query_cache.invalidate_queries(PRODUCTS_QUERY_PREFIX)
        return True

    def add_images_for_new_product(
        self,
        selected: Sequence[ImageUpload],
        added: Sequence[ImageUpload],
    ) -> list[ImageUpload]:
        """Agrega imagenes al alta; lo que excede el maximo se descarta."""
        return [*selected, *added][:MAX_PRODUCT_IMAGES]

    def add_images_for_edit(
        self,
        existing_count: int,
        selected: Sequence[ImageUpload],
        added: Sequence[ImageUpload],
    ) -> list[ImageUpload]:
        """Agrega imagenes en edicion; si se excede el maximo se avisa y no se agrega."""
        if existing_count + len(selected) + len(added) > MAX_PRODUCT_IMAGES:
            self._notifier.warning(f"Máximo {MAX_PRODUCT_IMAGES} imágenes permitidas")
            return list(selected)
        return [*selected, *added]


def _describe_error(exc: ServiceError) -> str:
    if isinstance(exc, ApiError):
        return exc.message
    return str(exc) or "Ocurrió un error."
