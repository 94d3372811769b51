"""Pagina de inventario: busqueda, listado y acciones por producto."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from cliente.backend.controller import products_query_key
from cliente.backend.navigation import ROUTE_STOCK_NEW
from cliente.backend.product_formatter import format_price, stock_badge
from cliente.frontend.dialogs import confirm, show_error
from cliente.frontend.variant_stock_dialog import VariantStockDialog
from shared.protocol import Product

if TYPE_CHECKING:
    from cliente.backend.controller import AppController
    from cliente.frontend.qt_bridge import QtDispatcher

_SEARCH_DEBOUNCE_MS = 300
_HEADERS = ("Producto", "Marca / Tipo", "Precio", "Stock Total", "Acciones")


class StockPage(QWidget):
    """Listado de productos observando la clave de cache de la busqueda actual.

    Cuando la clave se invalida (alta, edicion, borrado o cambio de stock)
    el listado vuelve a pedirse.
    """

    def __init__(
        self,
        controller: AppController,
        dispatcher: QtDispatcher,
        on_edit: Callable[[int], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._dispatcher = dispatcher
        self._on_edit = on_edit
        self._search = ""
        self._unsubscribe: Callable[[], None] | None = None

        self._search_timer = QTimer(self)
        self._search_timer.setSingleShot(True)
        self._search_timer.setInterval(_SEARCH_DEBOUNCE_MS)
        self._search_timer.timeout.connect(self._apply_search)

        self._build_ui()

    def _build_ui(self) -> None:
        root_layout = QVBoxLayout(self)
        root_layout.setContentsMargins(32, 32, 32, 32)
        root_layout.setSpacing(14)

        header_layout = QHBoxLayout()
        title_label = QLabel("Inventario", self)
        title_label.setObjectName("pageTitle")
        new_button = QPushButton("Nuevo Producto", self)
        new_button.setCursor(Qt.CursorShape.PointingHandCursor)
        new_button.clicked.connect(lambda _checked=False: self._controller.navigate(ROUTE_STOCK_NEW))
        header_layout.addWidget(title_label)
        header_layout.addStretch(1)
        header_layout.addWidget(new_button)

        self._search_input = QLineEdit(self)
        self._search_input.setPlaceholderText("Buscar jean, remera, marca...")
        self._search_input.textChanged.connect(lambda _text: self._search_timer.start())

        self._table = QTableWidget(0, len(_HEADERS), self)
        self._table.setHorizontalHeaderLabels(_HEADERS)
        self._table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self._table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self._table.verticalHeader().setVisible(False)
        self._table.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)

        self._empty_label = QLabel(
            "No se encontraron productos. Prueba con otra búsqueda o agrega uno nuevo.",
            self,
        )
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._empty_label.hide()

        root_layout.addLayout(header_layout)
        root_layout.addWidget(self._search_input)
        root_layout.addWidget(self._table, 1)
        root_layout.addWidget(self._empty_label)

    def refresh(self) -> None:
        """Observa la clave de la busqueda actual y carga el listado."""
        if self._unsubscribe is not None:
            self._unsubscribe()
        key = products_query_key(self._search)
        self._unsubscribe = self._controller.query_cache.subscribe(
            key,
            lambda _key: self._dispatcher(self._reload_if_stale),
        )
        self._load()

    def _apply_search(self) -> None:
        self._search = self._search_input.text().strip()
        self.refresh()

    def _reload_if_stale(self) -> None:
        if self._controller.query_cache.is_stale(products_query_key(self._search)):
            self._load()

    def _load(self) -> None:
        search = self._search
        self._controller.run_in_background(
            lambda: self._controller.list_products(search),
            on_success=lambda products: self._render(search, products),
            on_error=lambda exc: show_error(self, "Error al cargar productos", str(exc)),
        )

    def _render(self, search: str, products: list[Product]) -> None:
        if search != self._search:
            return

        self._table.setRowCount(len(products))
        for row, product in enumerate(products):
            self._table.setItem(row, 0, QTableWidgetItem(product.name))
            self._table.setItem(row, 1, QTableWidgetItem(f"{product.brand}\n{product.type}"))
            self._table.setItem(row, 2, QTableWidgetItem(format_price(product.base_price)))
            badge_item = QTableWidgetItem(stock_badge(product.total_stock).label)
            badge_item.setTextAlignment(Qt.AlignmentFlag.AlignCenter)
            self._table.setItem(row, 3, badge_item)
            self._table.setCellWidget(row, 4, self._build_actions(product))
        self._table.resizeRowsToContents()
        self._empty_label.setVisible(not products)

    def _build_actions(self, product: Product) -> QWidget:
        actions = QWidget(self._table)
        layout = QHBoxLayout(actions)
        layout.setContentsMargins(4, 2, 4, 2)

        stock_button = QPushButton("Stock", actions)
        edit_button = QPushButton("Editar", actions)
        delete_button = QPushButton("Borrar", actions)
        delete_button.setObjectName("dangerButton")

        stock_button.clicked.connect(lambda _checked=False: self._open_variant_stock(product.id))
        edit_button.clicked.connect(lambda _checked=False: self._on_edit(product.id))
        delete_button.clicked.connect(lambda _checked=False: self._delete(product))

        layout.addWidget(stock_button)
        layout.addWidget(edit_button)
        layout.addWidget(delete_button)
        return actions

    def _open_variant_stock(self, product_id: int) -> None:
        dialog = VariantStockDialog(self._controller, product_id, parent=self)
        dialog.exec()

    def _delete(self, product: Product) -> None:
        if not confirm(
            self,
            "Borrar producto",
            f"¿Estás segura de borrar \"{product.name}\"? Se borrará todo su stock.",
        ):
            return
        self._controller.run_in_background(lambda: self._controller.delete_product(product.id))
