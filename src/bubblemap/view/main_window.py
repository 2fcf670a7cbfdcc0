"""
Main Application Window
=======================
The host of the map viewport: a toolbar to switch between the map and a
plain list of bubbles, the views themselves, and a side panel describing the
focused bubble.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects the map's selection signal and the menu actions to
   the shared ViewStateStore, and keeps the map's lifecycle (activate /
   deactivate / refit) in step with what is on screen.
"""
import logging
import os
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QActionGroup, QCloseEvent
from PySide6.QtWidgets import (
    QFileDialog, QLabel, QListWidget, QListWidgetItem, QMainWindow, QMessageBox,
    QSplitter, QStackedWidget, QVBoxLayout, QWidget
)

from bubblemap.app.state import ViewMode, ViewState, ViewStateStore
from bubblemap.model.io import BubbleDataError, BubbleLoader
from bubblemap.model.records import BubbleRecord, find_record
from bubblemap.model.tags import ensure_tags
from bubblemap.view.widgets.map_view import Map2DWidget

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "Bubble Map"


class BubbleDetailPanel(QWidget):
    """Read-only description of the focused bubble."""
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)

        self.title_label = QLabel()
        self.title_label.setStyleSheet("font-size: 18px; font-weight: bold;")
        self.tags_label = QLabel()
        self.tags_label.setWordWrap(True)
        self.note_label = QLabel()
        self.note_label.setWordWrap(True)

        layout.addWidget(self.title_label)
        layout.addWidget(self.tags_label)
        layout.addWidget(self.note_label)
        layout.addStretch(1)
        self.show_bubble(None)

    def show_bubble(self, bubble: Optional[BubbleRecord]) -> None:
        if bubble is None:
            self.title_label.setText(self.tr("No bubble selected"))
            self.tags_label.clear()
            self.note_label.setText(self.tr("Tap a bubble on the map to focus it."))
            return
        tags = bubble.seed_tags or ensure_tags(bubble.note, bubble.title)
        self.title_label.setText(bubble.title)
        self.tags_label.setText("  ".join(tags))
        self.note_label.setText(bubble.note or self.tr("Level {0}").format(bubble.level))


class MainWindow(QMainWindow):
    def __init__(self, bubbles: list[BubbleRecord], filepath: Optional[str] = None) -> None:
        super().__init__()
        self.filepath = filepath
        self.bubbles: list[BubbleRecord] = list(bubbles)
        self.store = ViewStateStore.create(self)

        self.update_window_title()
        self.resize(1200, 800)

        # --- CONTENT ---
        splitter = QSplitter(Qt.Orientation.Horizontal)
        self.setCentralWidget(splitter)

        self.views = QStackedWidget()
        self.map_view = Map2DWidget()
        self.list_view = QListWidget()
        self.views.addWidget(self.map_view)   # Index 0
        self.views.addWidget(self.list_view)  # Index 1
        splitter.addWidget(self.views)

        self.detail_panel = BubbleDetailPanel()
        splitter.addWidget(self.detail_panel)
        splitter.setSizes([900, 300])

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()

        self.set_bubbles(self.bubbles)

        # --- SIGNAL CONNECTIONS ---
        self.map_view.bubble_focused.connect(self.store.set_current_bubble)
        self.list_view.itemClicked.connect(self.on_list_item_clicked)
        self._unsubscribe = self.store.subscribe(self.on_state_changed)

    def _create_actions(self) -> None:
        self.act_open = QAction(self.tr("Open..."), self)
        self.act_open.setShortcut("Ctrl+O")
        self.act_open.triggered.connect(self.on_file_open)

        self.act_exit = QAction(self.tr("Quit"), self)
        self.act_exit.triggered.connect(self.close)

        self.act_refit = QAction(self.tr("Fit to Content"), self)
        self.act_refit.setShortcut("Ctrl+0")
        self.act_refit.triggered.connect(lambda: self.map_view.refit())

        self.act_map = QAction(self.tr("Map"), self, checkable=True)
        self.act_map.triggered.connect(lambda: self.store.set_view_mode(ViewMode.MAP))
        self.act_list = QAction(self.tr("List"), self, checkable=True)
        self.act_list.triggered.connect(lambda: self.store.set_view_mode(ViewMode.LIST))

        group = QActionGroup(self)
        group.addAction(self.act_map)
        group.addAction(self.act_list)
        self.act_map.setChecked(True)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu(self.tr("&File"))
        file_menu.addAction(self.act_open)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

        view_menu = menu_bar.addMenu(self.tr("&View"))
        view_menu.addAction(self.act_map)
        view_menu.addAction(self.act_list)
        view_menu.addSeparator()
        view_menu.addAction(self.act_refit)

        toolbar = self.addToolBar(self.tr("View"))
        toolbar.addAction(self.act_map)
        toolbar.addAction(self.act_list)
        toolbar.addAction(self.act_refit)

    # --- HELPER METHODS ---
    def update_window_title(self) -> None:
        filename = os.path.basename(self.filepath) if self.filepath else "built-in"
        self.setWindowTitle(f"{VISIBLE_APP_NAME} - [{filename}]")

    def set_bubbles(self, bubbles: list[BubbleRecord]) -> None:
        self.bubbles = list(bubbles)
        self.list_view.clear()
        for bubble in self.bubbles:
            item = QListWidgetItem(bubble.title)
            item.setData(Qt.ItemDataRole.UserRole, bubble.id)
            self.list_view.addItem(item)

        self.store.set_current_bubble(None)
        self.map_view.set_bubbles(self.bubbles)
        if self.store.state.view_mode == ViewMode.MAP:
            self.map_view.activate()

    # --- SLOTS ---
    def on_state_changed(self, state: ViewState) -> None:
        self.act_map.setChecked(state.view_mode == ViewMode.MAP)
        self.act_list.setChecked(state.view_mode == ViewMode.LIST)
        if state.view_mode == ViewMode.MAP:
            self.views.setCurrentWidget(self.map_view)
            if not self.map_view.is_active and self.bubbles:
                self.map_view.activate()
        else:
            self.views.setCurrentWidget(self.list_view)
            self.map_view.deactivate()

        bubble = state.current_bubble
        self.map_view.set_focused(bubble.id if bubble else None)
        self.detail_panel.show_bubble(bubble)

    def on_list_item_clicked(self, item: QListWidgetItem) -> None:
        bubble = find_record(self.bubbles, item.data(Qt.ItemDataRole.UserRole))
        self.store.set_current_bubble(bubble)

    def on_file_open(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, self.tr("Open Bubble Network"), "", self.tr("Bubble files (*.json)")
        )
        if not path:
            return
        try:
            bubbles = BubbleLoader.load_bubbles(path)
        except BubbleDataError as e:
            logger.error(f"Failed to open '{path}': {e}")
            QMessageBox.critical(self, self.tr("Open failed"), str(e))
            return
        self.filepath = path
        self.update_window_title()
        self.set_bubbles(bubbles)

    def showEvent(self, event) -> None:
        super().showEvent(event)
        # The map gets its real size only once shown
        self.map_view.refit()

    def closeEvent(self, event: QCloseEvent) -> None:
        self.map_view.deactivate()
        self._unsubscribe()
        self.store.dispose()
        super().closeEvent(event)
