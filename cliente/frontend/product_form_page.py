"""Pagina de alta y edicion de productos con variantes e imagenes."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QAbstractSpinBox,
    QComboBox,
    QDoubleSpinBox,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QSpinBox,
    QTableWidget,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from cliente.backend.navigation import ROUTE_STOCK
from cliente.backend.product_formatter import resolve_image_url
from cliente.frontend.dialogs import show_error
from shared.catalog import BRANCHES, DEFAULT_PRODUCT_TYPES
from shared.errors import ValidationError
from shared.protocol import ImageUpload, Product, ProductDraft, VariantDraft

if TYPE_CHECKING:
    from cliente.backend.controller import AppController

_VARIANT_HEADERS = ("Talle", "Color", "SKU", *(f"Stk. {b.name}" for b in BRANCHES), "")
_ITEM_DATA_ROLE = Qt.ItemDataRole.UserRole
_IMAGE_FILTER = "Imágenes (*.png *.jpg *.jpeg *.webp)"


class ProductFormPage(QWidget):
    """Formulario reutilizado para crear (sin producto) o editar (con producto)."""

    def __init__(self, controller: AppController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self._product: Product | None = None
        self._new_images: list[ImageUpload] = []
        self._deleted_image_ids: list[int] = []
        self._deleted_variant_ids: list[int] = []
        self._variant_ids: list[int | None] = []

        self._build_ui()

    # --- Construccion -------------------------------------------------------------

    def _build_ui(self) -> None:
        root_layout = QVBoxLayout(self)
        root_layout.setContentsMargins(32, 24, 32, 24)
        root_layout.setSpacing(14)

        header_layout = QHBoxLayout()
        back_button = QPushButton("Volver", self)
        back_button.setObjectName("secondaryButton")
        back_button.clicked.connect(lambda _checked=False: self._controller.navigate(ROUTE_STOCK))
        self._title_label = QLabel("Nuevo Producto", self)
        self._title_label.setObjectName("pageTitle")
        header_layout.addWidget(back_button)
        header_layout.addWidget(self._title_label)
        header_layout.addStretch(1)

        columns_layout = QHBoxLayout()
        columns_layout.setSpacing(24)
        columns_layout.addLayout(self._build_info_form(), 1)
        columns_layout.addLayout(self._build_media_and_variants(), 1)

        self._save_button = QPushButton("Guardar Producto", self)
        self._save_button.setCursor(Qt.CursorShape.PointingHandCursor)
        self._save_button.clicked.connect(self._on_save_clicked)

        root_layout.addLayout(header_layout)
        root_layout.addLayout(columns_layout, 1)
        root_layout.addWidget(self._save_button, alignment=Qt.AlignmentFlag.AlignRight)

    def _build_info_form(self) -> QFormLayout:
        form = QFormLayout()
        form.setVerticalSpacing(10)

        self._name_input = QLineEdit(self)
        self._name_input.setPlaceholderText("Ej: Jean Mom Fit Rígido")
        self._type_input = QComboBox(self)
        self._type_input.setEditable(True)
        self._type_input.addItems(DEFAULT_PRODUCT_TYPES)
        self._brand_input = QLineEdit(self)
        self._brand_input.setPlaceholderText("Ej: Las Locas")
        self._fabric_input = QLineEdit(self)
        self._fabric_input.setPlaceholderText("Ej: Algodón / Jean")
        self._tags_input = QLineEdit(self)
        self._tags_input.setPlaceholderText("verano, nuevo, oferta...")
        self._description_input = QTextEdit(self)
        self._description_input.setPlaceholderText("Detalles de calce, cuidados...")
        self._description_input.setFixedHeight(80)
        self._base_price_input = self._build_price_input()
        self._cost_price_input = self._build_price_input()
        self._cost_price_input.setToolTip("Solo visible por la dueña")

        form.addRow("Nombre del Producto", self._name_input)
        form.addRow("Tipo", self._type_input)
        form.addRow("Marca", self._brand_input)
        form.addRow("Tela", self._fabric_input)
        form.addRow("Etiquetas (separadas por coma)", self._tags_input)
        form.addRow("Descripción", self._description_input)
        form.addRow("Precio Venta ($)", self._base_price_input)
        form.addRow("Precio Costo ($)", self._cost_price_input)
        return form

    def _build_media_and_variants(self) -> QVBoxLayout:
        layout = QVBoxLayout()
        layout.setSpacing(10)

        layout.addWidget(QLabel("Imágenes (Max 4, la primera es portada)", self))
        self._images_list = QListWidget(self)
        self._images_list.setMaximumHeight(110)
        images_buttons = QHBoxLayout()
        add_image_button = QPushButton("Subir Foto", self)
        remove_image_button = QPushButton("Quitar", self)
        remove_image_button.setObjectName("secondaryButton")
        add_image_button.clicked.connect(self._on_add_images)
        remove_image_button.clicked.connect(self._on_remove_image)
        images_buttons.addWidget(add_image_button)
        images_buttons.addWidget(remove_image_button)
        images_buttons.addStretch(1)

        layout.addWidget(self._images_list)
        layout.addLayout(images_buttons)

        layout.addWidget(QLabel("Variantes y Stock: talles, colores y cantidad por local.", self))
        self._variants_table = QTableWidget(0, len(_VARIANT_HEADERS), self)
        self._variants_table.setHorizontalHeaderLabels(_VARIANT_HEADERS)
        self._variants_table.verticalHeader().setVisible(False)
        add_variant_button = QPushButton("Agregar otra variante", self)
        add_variant_button.setObjectName("secondaryButton")
        add_variant_button.clicked.connect(lambda _checked=False: self._append_variant_row(None))

        layout.addWidget(self._variants_table, 1)
        layout.addWidget(add_variant_button)
        return layout

    def _build_price_input(self) -> QDoubleSpinBox:
        spin = QDoubleSpinBox(self)
        spin.setRange(0.0, 1_000_000_000.0)
        spin.setDecimals(2)
        spin.setButtonSymbols(QAbstractSpinBox.ButtonSymbols.NoButtons)
        return spin

    # --- Carga ----------------------------------------------------------------------

    def start_create(self) -> None:
        """Limpia el formulario para un alta con una variante vacia."""
        self._product = None
        self._title_label.setText("Nuevo Producto")
        self._reset_state()
        self._fill_form(ProductDraft(name="", type="", brand="", base_price=0, cost_price=0))
        self._append_variant_row(None)
        self._load_product_types()

    def start_edit(self, product_id: int) -> None:
        """Pide el producto y precarga el formulario."""
        self._title_label.setText("Editar Producto")
        self._reset_state()
        self._product = None
        self._save_button.setEnabled(False)
        self._load_product_types()
        self._controller.run_in_background(
            lambda: self._controller.get_product(product_id),
            on_success=self._on_product_loaded,
            on_error=self._on_product_load_failed,
        )

    def _on_product_loaded(self, product: Product) -> None:
        self._product = product
        self._save_button.setEnabled(True)
        self._fill_form(ProductDraft.from_product(product))
        for image in product.images:
            item = QListWidgetItem(Path(image.url).name or f"Imagen {image.id}")
            item.setData(_ITEM_DATA_ROLE, ("existing", image.id))
            item.setToolTip(resolve_image_url(image.url))
            self._images_list.addItem(item)

    def _on_product_load_failed(self, error: Exception) -> None:
        show_error(self, "Error al cargar producto", str(error))
        self._controller.navigate(ROUTE_STOCK)

    def _load_product_types(self) -> None:
        self._controller.run_in_background(
            self._controller.list_product_types,
            on_success=self._set_product_types,
        )

    def _set_product_types(self, types: list[str]) -> None:
        current = self._type_input.currentText()
        self._type_input.clear()
        self._type_input.addItems(types)
        self._type_input.setCurrentText(current)

    def _reset_state(self) -> None:
        self._new_images = []
        self._deleted_image_ids = []
        self._deleted_variant_ids = []
        self._variant_ids = []
        self._images_list.clear()
        self._variants_table.setRowCount(0)
        self._save_button.setEnabled(True)

    def _fill_form(self, draft: ProductDraft) -> None:
        self._name_input.setText(draft.name)
        self._type_input.setCurrentText(draft.type)
        self._brand_input.setText(draft.brand)
        self._fabric_input.setText(draft.fabric)
        self._tags_input.setText(draft.tags)
        self._description_input.setPlainText(draft.description)
        self._base_price_input.setValue(draft.base_price)
        self._cost_price_input.setValue(draft.cost_price or 0)
        for variant in draft.variants:
            self._append_variant_row(variant)

    # --- Variantes ------------------------------------------------------------------

    def _append_variant_row(self, variant: VariantDraft | None) -> None:
        row = self._variants_table.rowCount()
        self._variants_table.insertRow(row)
        self._variant_ids.append(variant.id if variant else None)

        for column, value in enumerate(
            (variant.size, variant.color, variant.sku) if variant else ("", "", "")
        ):
            line_edit = QLineEdit(value, self._variants_table)
            self._variants_table.setCellWidget(row, column, line_edit)

        for offset, branch in enumerate(BRANCHES):
            spin = QSpinBox(self._variants_table)
            spin.setRange(0, 1_000_000)
            spin.setButtonSymbols(QAbstractSpinBox.ButtonSymbols.NoButtons)
            spin.setValue(variant.stock_by_branch.get(branch.id, 0) if variant else 0)
            self._variants_table.setCellWidget(row, 3 + offset, spin)

        remove_button = QPushButton("Quitar", self._variants_table)
        remove_button.setObjectName("dangerButton")
        remove_button.clicked.connect(lambda _checked=False, b=remove_button: self._remove_variant_row(b))
        self._variants_table.setCellWidget(row, len(_VARIANT_HEADERS) - 1, remove_button)

    def _remove_variant_row(self, button: QPushButton) -> None:
        if self._variants_table.rowCount() == 1:
            return
        for row in range(self._variants_table.rowCount()):
            if self._variants_table.cellWidget(row, len(_VARIANT_HEADERS) - 1) is button:
                variant_id = self._variant_ids.pop(row)
                if variant_id is not None:
                    self._deleted_variant_ids.append(variant_id)
                self._variants_table.removeRow(row)
                return

    def _collect_variants(self) -> list[VariantDraft]:
        variants: list[VariantDraft] = []
        for row in range(self._variants_table.rowCount()):
            size, color, sku = (
                self._variants_table.cellWidget(row, column).text() for column in range(3)
            )
            stock_by_branch = {
                branch.id: self._variants_table.cellWidget(row, 3 + offset).value()
                for offset, branch in enumerate(BRANCHES)
            }
            variants.append(
                VariantDraft(
                    id=self._variant_ids[row],
                    size=size,
                    color=color,
                    sku=sku,
                    stock_by_branch=stock_by_branch,
                )
            )
        return variants

    # --- Imagenes -------------------------------------------------------------------

    def _on_add_images(self, _checked: bool = False) -> None:
        paths, _ = QFileDialog.getOpenFileNames(self, "Subir Foto", "", _IMAGE_FILTER)
        if not paths:
            return

        added = [ImageUpload(path=Path(path)) for path in paths]
        if self._product is None:
            self._new_images = self._controller.add_images_for_new_product(self._new_images, added)
        else:
            existing_count = len(self._product.images) - len(self._deleted_image_ids)
            self._new_images = self._controller.add_images_for_edit(
                existing_count,
                self._new_images,
                added,
            )
        self._render_new_images()

    def _on_remove_image(self, _checked: bool = False) -> None:
        item = self._images_list.currentItem()
        if item is None:
            return

        kind, value = item.data(_ITEM_DATA_ROLE)
        if kind == "existing":
            self._deleted_image_ids.append(value)
        else:
            self._new_images = [image for image in self._new_images if image.path != value]
        self._images_list.takeItem(self._images_list.row(item))

    def _render_new_images(self) -> None:
        for row in reversed(range(self._images_list.count())):
            kind, _value = self._images_list.item(row).data(_ITEM_DATA_ROLE)
            if kind == "new":
                self._images_list.takeItem(row)
        for image in self._new_images:
            item = QListWidgetItem(image.filename)
            item.setData(_ITEM_DATA_ROLE, ("new", image.path))
            self._images_list.addItem(item)

    # --- Guardado -------------------------------------------------------------------

    def _collect_draft(self) -> ProductDraft:
        return ProductDraft(
            name=self._name_input.text(),
            type=self._type_input.currentText(),
            brand=self._brand_input.text(),
            base_price=self._base_price_input.value(),
            cost_price=self._cost_price_input.value(),
            fabric=self._fabric_input.text(),
            tags=self._tags_input.text(),
            description=self._description_input.toPlainText(),
            variants=self._collect_variants(),
        )

    def _on_save_clicked(self, _checked: bool = False) -> None:
        draft = self._collect_draft()
        product = self._product
        new_images = list(self._new_images)
        deleted_image_ids = list(self._deleted_image_ids)
        deleted_variant_ids = list(self._deleted_variant_ids)

        def work() -> bool:
            if product is None:
                return self._controller.create_product(draft, new_images)
            return self._controller.update_product(
                product,
                draft,
                new_images=new_images,
                deleted_image_ids=deleted_image_ids,
                deleted_variant_ids=deleted_variant_ids,
            )

        self._save_button.setEnabled(False)
        self._save_button.setText("Guardando...")
        self._controller.run_in_background(
            work,
            on_success=lambda _saved: self._on_save_finished(),
            on_error=self._on_save_failed,
        )

    def _on_save_finished(self) -> None:
        self._save_button.setEnabled(True)
        self._save_button.setText("Guardar Producto")

    def _on_save_failed(self, error: Exception) -> None:
        self._on_save_finished()
        title = "Faltan completar datos" if isinstance(error, ValidationError) else "Error"
        show_error(self, title, str(error))
