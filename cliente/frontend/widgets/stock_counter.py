"""Contador +/- de stock para una variante en una sucursal."""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QWidget

from cliente.backend.stock_mutations import StockKey, StockMutationController


class StockCounter(QWidget):
    """Muestra la cantidad optimista y dispara mutaciones al pulsar +/-.

    Se suscribe a los cambios del controller, por lo que una reversion por
    falla de la API se refleja sin intervencion del widget.
    """

    def __init__(
        self,
        stock_controller: StockMutationController,
        variant_id: int,
        branch_id: int,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._stock = stock_controller
        self._key: StockKey = (variant_id, branch_id)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)

        self._minus_button = QPushButton("−", self)
        self._minus_button.setObjectName("counterButton")
        self._minus_button.setCursor(Qt.CursorShape.PointingHandCursor)
        self._value_label = QLabel(self)
        self._value_label.setObjectName("counterValue")
        self._value_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._value_label.setMinimumWidth(36)
        self._plus_button = QPushButton("+", self)
        self._plus_button.setObjectName("counterButton")
        self._plus_button.setCursor(Qt.CursorShape.PointingHandCursor)

        layout.addWidget(self._minus_button)
        layout.addWidget(self._value_label)
        layout.addWidget(self._plus_button)

        self._minus_button.clicked.connect(self._on_minus_clicked)
        self._plus_button.clicked.connect(self._on_plus_clicked)
        unsubscribe = self._stock.subscribe(self._on_quantity_changed)
        self.destroyed.connect(lambda _obj=None: unsubscribe())

        self._render(self._stock.quantity(variant_id, branch_id))

    def _on_minus_clicked(self, _checked: bool = False) -> None:
        self._stock.decrement(*self._key)

    def _on_plus_clicked(self, _checked: bool = False) -> None:
        self._stock.increment(*self._key)

    def _on_quantity_changed(self, key: StockKey, quantity: int) -> None:
        if key == self._key:
            self._render(quantity)

    def _render(self, quantity: int) -> None:
        self._value_label.setText(str(quantity))
        self._minus_button.setEnabled(quantity > 0)
