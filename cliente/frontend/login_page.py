"""Pagina de ingreso al sistema."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QFrame,
    QGraphicsDropShadowEffect,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from cliente.backend.validators import validate_login
from cliente.frontend.dialogs import show_error
from shared.errors import ValidationError

if TYPE_CHECKING:
    from cliente.backend.controller import AppController


class LoginPage(QWidget):
    """Formulario de email y contrasena."""

    def __init__(self, controller: AppController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self._build_ui()

    def _build_ui(self) -> None:
        root_layout = QVBoxLayout(self)
        root_layout.setContentsMargins(40, 40, 40, 40)
        root_layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        card = QFrame(self)
        card.setObjectName("mainCard")
        card_layout = QVBoxLayout(card)
        card_layout.setContentsMargins(40, 40, 40, 40)
        card_layout.setSpacing(12)

        title_label = QLabel("AMADAMIA", card)
        title_label.setObjectName("titleLabel")
        title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        subtitle_label = QLabel("Gestiona tu moda, simplifica tu negocio.", card)
        subtitle_label.setObjectName("subtitleLabel")
        subtitle_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._email_input = QLineEdit(card)
        self._email_input.setPlaceholderText("tu@correo.com")
        self._password_input = QLineEdit(card)
        self._password_input.setPlaceholderText("Contraseña")
        self._password_input.setEchoMode(QLineEdit.EchoMode.Password)

        self._submit_button = QPushButton("Ingresar", card)
        self._submit_button.setCursor(Qt.CursorShape.PointingHandCursor)
        self._submit_button.clicked.connect(self._on_submit)
        self._password_input.returnPressed.connect(self._on_submit)

        card_layout.addWidget(title_label)
        card_layout.addWidget(subtitle_label)
        card_layout.addSpacing(12)
        card_layout.addWidget(QLabel("Correo electrónico", card))
        card_layout.addWidget(self._email_input)
        card_layout.addWidget(QLabel("Contraseña", card))
        card_layout.addWidget(self._password_input)
        card_layout.addSpacing(8)
        card_layout.addWidget(self._submit_button)

        shadow = QGraphicsDropShadowEffect(card)
        shadow.setBlurRadius(38)
        shadow.setOffset(0, 8)
        shadow.setColor(QColor(0, 0, 0, 38))
        card.setGraphicsEffect(shadow)

        root_layout.addWidget(card)

    def reset(self) -> None:
        self._password_input.clear()
        self._submit_button.setEnabled(True)
        self._submit_button.setText("Ingresar")

    def _on_submit(self, _checked: bool = False) -> None:
        email = self._email_input.text()
        password = self._password_input.text()
        # Solo valida aca; la llamada de red va en segundo plano.
        try:
            validate_login(email, password)
        except ValidationError as exc:
            show_error(self, "Datos incompletos", str(exc))
            return

        self._submit_button.setEnabled(False)
        self._submit_button.setText("Ingresando…")
        self._controller.run_in_background(
            lambda: self._controller.login(email, password),
            on_success=lambda _ok: self.reset(),
            on_error=self._on_login_error,
        )

    def _on_login_error(self, error: Exception) -> None:
        self.reset()
        show_error(self, "Error de acceso", str(error))
