"""Pagina de inicio con totales del inventario."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PyQt6.QtWidgets import QFrame, QGridLayout, QLabel, QVBoxLayout, QWidget

from cliente.backend.product_formatter import DashboardSummary

if TYPE_CHECKING:
    from cliente.backend.controller import AppController


class DashboardPage(QWidget):
    """Tarjetas de resumen calculadas desde el listado cacheado."""

    def __init__(self, controller: AppController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._controller = controller

        root_layout = QVBoxLayout(self)
        root_layout.setContentsMargins(32, 32, 32, 32)
        root_layout.setSpacing(20)

        self._welcome_label = QLabel(self)
        self._welcome_label.setObjectName("pageTitle")
        root_layout.addWidget(self._welcome_label)

        cards_layout = QGridLayout()
        cards_layout.setSpacing(16)
        self._products_value = self._add_card(cards_layout, 0, "Productos", "En el catálogo")
        self._stock_value = self._add_card(cards_layout, 1, "Stock Total", "Prendas en ambos locales")
        self._empty_value = self._add_card(cards_layout, 2, "Sin Stock", "Productos agotados")
        self._low_value = self._add_card(cards_layout, 3, "Stock Bajo", "Menos de 5 unidades")
        root_layout.addLayout(cards_layout)
        root_layout.addStretch(1)

    def refresh(self) -> None:
        self._welcome_label.setText(self._controller.welcome_message())
        self._controller.run_in_background(
            self._controller.dashboard_summary,
            on_success=self._render,
        )

    def _render(self, summary: DashboardSummary) -> None:
        self._products_value.setText(str(summary.product_count))
        self._stock_value.setText(f"{summary.total_stock:,}".replace(",", "."))
        self._empty_value.setText(str(summary.out_of_stock_count))
        self._low_value.setText(str(summary.low_stock_count))

    def _add_card(self, layout: QGridLayout, column: int, title: str, caption: str) -> QLabel:
        card = QFrame(self)
        card.setObjectName("summaryCard")
        card_layout = QVBoxLayout(card)
        card_layout.setContentsMargins(18, 18, 18, 18)

        title_label = QLabel(title, card)
        title_label.setObjectName("cardTitle")
        value_label = QLabel("–", card)
        value_label.setObjectName("cardValue")
        caption_label = QLabel(caption, card)
        caption_label.setObjectName("cardCaption")

        card_layout.addWidget(title_label)
        card_layout.addWidget(value_label)
        card_layout.addWidget(caption_label)
        layout.addWidget(card, 0, column)
        return value_label
