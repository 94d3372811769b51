"""Ventana principal del sistema de gestion."""

from __future__ import annotations

import logging

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QGuiApplication
from PyQt6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from cliente.backend.controller import AppController
from cliente.backend.navigation import (
    ROUTE_DASHBOARD,
    ROUTE_LOGIN,
    ROUTE_STOCK,
    ROUTE_STOCK_EDIT,
    ROUTE_STOCK_NEW,
)
from cliente.frontend.dashboard_page import DashboardPage
from cliente.frontend.login_page import LoginPage
from cliente.frontend.product_form_page import ProductFormPage
from cliente.frontend.qt_bridge import QtDispatcher
from cliente.frontend.stock_page import StockPage

LOGGER = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Barra lateral y paginas apiladas; actua como Navigator de la app."""

    def __init__(self, controller: AppController, dispatcher: QtDispatcher) -> None:
        super().__init__()
        self._controller = controller
        self._dispatcher = dispatcher

        self.setWindowTitle("AMADAMIA - Gestión")
        screen = QGuiApplication.primaryScreen()
        geo = screen.availableGeometry()  # tamaño usable (sin taskbar/dock)
        w = int(geo.width() * 0.75)
        h = int(geo.height() * 0.85)
        self.resize(w, h)
        self.setMinimumSize(int(w * 0.70), int(h * 0.70))
        self._build_ui()
        self._apply_styles()

    def redirect(self, route: str) -> None:
        """Navigator: puede llamarse desde hilos de trabajo."""
        self._dispatcher(lambda: self._show_route(route))

    def _build_ui(self) -> None:
        self._stack = QStackedWidget(self)
        self._login_page = LoginPage(controller=self._controller, parent=self)
        self._dashboard_page = DashboardPage(controller=self._controller, parent=self)
        self._stock_page = StockPage(
            controller=self._controller,
            dispatcher=self._dispatcher,
            on_edit=self._on_edit_product,
            parent=self,
        )
        self._form_page = ProductFormPage(controller=self._controller, parent=self)
        for page in (self._login_page, self._dashboard_page, self._stock_page, self._form_page):
            self._stack.addWidget(page)

        self._sidebar = self._build_sidebar()

        central = QWidget(self)
        layout = QHBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(self._sidebar)
        layout.addWidget(self._stack, 1)
        self.setCentralWidget(central)

        initial_route = ROUTE_DASHBOARD if self._controller.session.is_authenticated else ROUTE_LOGIN
        self._show_route(initial_route)

    def _build_sidebar(self) -> QFrame:
        sidebar = QFrame(self)
        sidebar.setObjectName("sidebar")
        sidebar.setFixedWidth(220)
        layout = QVBoxLayout(sidebar)
        layout.setContentsMargins(16, 24, 16, 24)
        layout.setSpacing(8)

        brand_label = QLabel("AMADAMIA", sidebar)
        brand_label.setObjectName("brandLabel")
        layout.addWidget(brand_label)
        layout.addSpacing(16)

        for text, route in (("Dashboard", ROUTE_DASHBOARD), ("Productos & Stock", ROUTE_STOCK)):
            button = self._build_button(text)
            button.clicked.connect(lambda _checked=False, r=route: self._controller.navigate(r))
            layout.addWidget(button)

        layout.addStretch(1)
        logout_button = self._build_button("Cerrar sesión")
        logout_button.setObjectName("logoutButton")
        logout_button.clicked.connect(lambda _checked=False: self._controller.logout())
        layout.addWidget(logout_button)
        return sidebar

    def _show_route(self, route: str) -> None:
        """Muestra la pagina de la ruta; sin sesion solo se permite el login."""
        if not self._controller.guard(route):
            return

        LOGGER.info("Pantalla: %s", route)
        self._sidebar.setVisible(route != ROUTE_LOGIN)
        if route == ROUTE_LOGIN:
            self._login_page.reset()
            self._stack.setCurrentWidget(self._login_page)
        elif route == ROUTE_STOCK:
            self._stock_page.refresh()
            self._stack.setCurrentWidget(self._stock_page)
        elif route == ROUTE_STOCK_NEW:
            self._form_page.start_create()
            self._stack.setCurrentWidget(self._form_page)
        elif route == ROUTE_STOCK_EDIT:
            self._stack.setCurrentWidget(self._form_page)
        else:
            self._dashboard_page.refresh()
            self._stack.setCurrentWidget(self._dashboard_page)

    def _on_edit_product(self, product_id: int) -> None:
        self._form_page.start_edit(product_id)
        self._controller.navigate(ROUTE_STOCK_EDIT)

    def _apply_styles(self) -> None:
        """Aplica estilos QSS de la interfaz."""
        self.setStyleSheet(
            """
            QMainWindow {
                background-color: #f8fafc;
            }
            QFrame#sidebar {
                background-color: #ffffff;
                border-right: 1px solid #e2e8f0;
            }
            QLabel#brandLabel, QLabel#titleLabel {
                color: #111827;
                font-family: "Segoe UI";
                font-size: 22px;
                font-weight: 700;
            }
            QLabel#pageTitle {
                color: #0f172a;
                font-family: "Segoe UI";
                font-size: 24px;
                font-weight: 700;
            }
            QFrame#mainCard, QFrame#summaryCard {
                background-color: #ffffff;
                border: 1px solid #e2e8f0;
                border-radius: 14px;
            }
            QFrame#mainCard {
                min-width: 380px;
                max-width: 440px;
            }
            QLabel#cardTitle, QLabel#cardCaption, QLabel#subtitleLabel {
                color: #64748b;
                font-family: "Segoe UI";
                font-size: 12px;
            }
            QLabel#cardValue {
                color: #0f172a;
                font-family: "Segoe UI";
                font-size: 26px;
                font-weight: 700;
            }
            QLineEdit, QTextEdit, QComboBox, QDoubleSpinBox, QSpinBox {
                background-color: #ffffff;
                border: 1px solid #d1d5db;
                border-radius: 8px;
                font-family: "Segoe UI";
                font-size: 13px;
                padding: 6px;
            }
            QPushButton {
                background-color: #7c3aed;
                border: none;
                border-radius: 10px;
                color: #ffffff;
                font-family: "Segoe UI";
                font-size: 13px;
                font-weight: 600;
                min-height: 34px;
                padding: 6px 14px;
            }
            QPushButton:hover {
                background-color: #6d28d9;
            }
            QPushButton:disabled {
                background-color: #ddd6fe;
            }
            QPushButton#secondaryButton, QPushButton#logoutButton {
                background-color: #e5e7eb;
                color: #1f2937;
            }
            QPushButton#dangerButton {
                background-color: #fee2e2;
                color: #b91c1c;
            }
            """
        )

    @staticmethod
    def _build_button(text: str) -> QPushButton:
        """Construye un boton estandar de la barra lateral."""
        button = QPushButton(text)
        button.setCursor(Qt.CursorShape.PointingHandCursor)
        return button
