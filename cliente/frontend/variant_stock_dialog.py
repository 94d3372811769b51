"""Dialogo de stock por variante y sucursal."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QDialog,
    QGridLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from cliente.backend.product_formatter import stock_badge, variant_label
from cliente.frontend.dialogs import show_error
from cliente.frontend.widgets.stock_counter import StockCounter
from shared.catalog import BRANCHES
from shared.protocol import Product

if TYPE_CHECKING:
    from cliente.backend.controller import AppController


class VariantStockDialog(QDialog):
    """Lista las variantes de un producto con un contador por sucursal."""

    def __init__(
        self,
        controller: AppController,
        product_id: int,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._product_id = product_id

        self.setWindowTitle("Stock por sucursal")
        self.setModal(True)
        self.setMinimumSize(520, 320)

        self._root_layout = QVBoxLayout(self)
        self._root_layout.setContentsMargins(18, 18, 18, 18)
        self._root_layout.setSpacing(12)

        self._title_label = QLabel("Cargando variantes…", self)
        self._title_label.setObjectName("titleLabel")
        self._grid = QGridLayout()
        self._grid.setHorizontalSpacing(16)
        self._grid.setVerticalSpacing(10)

        close_button = QPushButton("Cerrar", self)
        close_button.clicked.connect(self.accept)

        self._root_layout.addWidget(self._title_label)
        self._root_layout.addLayout(self._grid)
        self._root_layout.addStretch(1)
        self._root_layout.addWidget(close_button, alignment=Qt.AlignmentFlag.AlignRight)
        self._apply_styles()

        self._controller.run_in_background(
            lambda: self._controller.get_product(product_id),
            on_success=self._on_product_loaded,
            on_error=self._on_load_failed,
        )

    def _on_product_loaded(self, product: Product) -> None:
        """Siembra contadores y arma una fila por variante."""
        self._controller.seed_stock(product)
        self._title_label.setText(product.name)

        headers = ["Talle", "Color", *(branch.name for branch in BRANCHES), "Total"]
        for column, header in enumerate(headers):
            label = QLabel(header, self)
            label.setObjectName("headerLabel")
            self._grid.addWidget(label, 0, column)

        if not product.variants:
            self._grid.addWidget(QLabel("Sin variantes cargadas.", self), 1, 0, 1, len(headers))
            return

        for row, variant in enumerate(product.variants, start=1):
            size_label = QLabel(variant.size, self)
            size_label.setToolTip(variant.sku or variant_label(variant))
            self._grid.addWidget(size_label, row, 0)
            self._grid.addWidget(QLabel(variant.color, self), row, 1)
            for offset, branch in enumerate(BRANCHES):
                counter = StockCounter(
                    stock_controller=self._controller.stock,
                    variant_id=variant.id,
                    branch_id=branch.id,
                    parent=self,
                )
                self._grid.addWidget(counter, row, 2 + offset)
            badge = QLabel(stock_badge(variant.total_stock).label, self)
            badge.setToolTip("Total informado por el servidor")
            self._grid.addWidget(badge, row, 2 + len(BRANCHES))

    def _on_load_failed(self, error: Exception) -> None:
        show_error(self, "Error al cargar producto", str(error))
        self.reject()

    def _apply_styles(self) -> None:
        self.setStyleSheet(
            """
            QDialog {
                background-color: #ffffff;
            }
            QLabel#titleLabel {
                color: #20232a;
                font-family: "Segoe UI";
                font-size: 18px;
                font-weight: 700;
            }
            QLabel#headerLabel {
                color: #64748b;
                font-family: "Segoe UI";
                font-size: 12px;
                font-weight: 600;
            }
            QLabel#counterValue {
                font-family: "Segoe UI";
                font-size: 14px;
                font-weight: 700;
            }
            QPushButton {
                background-color: #7c3aed;
                border: none;
                border-radius: 8px;
                color: #ffffff;
                font-family: "Segoe UI";
                font-weight: 600;
                min-height: 30px;
                padding: 4px 12px;
            }
            QPushButton#counterButton {
                min-width: 30px;
                padding: 2px;
            }
            QPushButton:disabled {
                background-color: #ddd6fe;
            }
            """
        )
