"""Desktop shell: image, video and settings tabs over one session worker."""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

from PyQt5 import QtCore, QtWidgets
from pydantic.alias_generators import to_camel

from mediadesk.config.client_config import ClientConfig
from mediadesk.core.forms import ImageForm, VideoForm
from mediadesk.favorites import order_options
from mediadesk.models import LogoCorner, SupportedCapabilities, VideoSettings
from mediadesk.validation import DEFAULT_VIDEO_FORMATS

from .progress_widget import ProgressWidget
from .sections import build_section_header, wrap_in_card
from .session_worker import SessionWorker
from .theme import apply_app_palette, app_stylesheet

LOGGER = logging.getLogger("mediadesk.ui")

_LABELS = {
    "input_directory": "Input directory",
    "output_directory": "Output directory",
    "search_child_folders": "Search child folders",
    "keep_child_folders_structure_in_output_directory": "Keep folder structure in output",
    "min_pixel_count": "Minimum pixel count",
    "add_logo": "Add logo",
    "logo_path": "Logo file",
    "logo_scale": "Logo scale (%)",
    "logo_x_offset_scale": "Logo X offset (%)",
    "logo_y_offset_scale": "Logo Y offset (%)",
    "logo_corner": "Logo corner",
    "should_convert_format": "Convert format",
    "format": "Format",
    "codec": "Codec",
    "should_convert_codec": "Convert codec",
    "clear_files_input_directory": "Clear input directory afterwards",
    "clear_files_output_directory": "Clear output directory first",
    "overwrite_existing_files_output_directory": "Overwrite existing files",
}

_INT_RANGES = {
    "min_pixel_count": (0, 100_000),
    "logo_scale": (0, 200),
    "logo_x_offset_scale": (0, 200),
    "logo_y_offset_scale": (0, 200),
}


class MediaTab(QtWidgets.QWidget):
    """Form widgets for one job kind; every edit is forwarded to the worker."""

    def __init__(self, kind: str, worker: SessionWorker, parent: Optional[QtWidgets.QWidget] = None):
        super().__init__(parent)
        self.kind = kind
        self.worker = worker
        self._editors: dict[str, QtWidgets.QWidget] = {}
        self._errors: dict[str, QtWidgets.QLabel] = {}
        self._loading = False
        self._form_cls = ImageForm if kind == "image" else VideoForm
        self._favorites: list[str] = []
        self._codec_favorites: list[str] = []
        self._formats: tuple[str, ...] = ()
        self._codecs: tuple[str, ...] = ()

        outer = QtWidgets.QVBoxLayout(self)
        title = "Image processing" if kind == "image" else "Video processing"
        outer.addWidget(build_section_header(title, "Settings are kept by the backend and reused next time."))

        form_host = QtWidgets.QWidget()
        form_layout = QtWidgets.QFormLayout(form_host)
        for name in self._form_cls.field_names():
            editor = self._build_editor(name)
            error = QtWidgets.QLabel("")
            error.setObjectName("FieldError")
            error.setVisible(False)
            cell = QtWidgets.QWidget()
            cell_layout = QtWidgets.QVBoxLayout(cell)
            cell_layout.setContentsMargins(0, 0, 0, 0)
            cell_layout.addWidget(editor)
            cell_layout.addWidget(error)
            form_layout.addRow(_LABELS.get(name, name), cell)
            self._errors[to_camel(name)] = error

        scroll = QtWidgets.QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(form_host)
        outer.addWidget(wrap_in_card(scroll), 1)

        buttons = QtWidgets.QHBoxLayout()
        self.process_btn = QtWidgets.QPushButton("Process")
        self.process_btn.setObjectName("Primary")
        self.process_btn.clicked.connect(self._on_process)
        self.cancel_btn = QtWidgets.QPushButton("Cancel")
        self.cancel_btn.setObjectName("Danger")
        self.cancel_btn.clicked.connect(lambda: self.worker.cancel(self.kind))
        self.cancel_btn.setVisible(False)
        buttons.addStretch(1)
        buttons.addWidget(self.cancel_btn)
        buttons.addWidget(self.process_btn)
        outer.addLayout(buttons)

        self.progress = ProgressWidget()
        outer.addWidget(self.progress)

        self.setEnabled(False)

    # -- editors ---------------------------------------------------------

    def _build_editor(self, name: str) -> QtWidgets.QWidget:
        default = self._form_cls.__dataclass_fields__[name].default
        if name in ("format", "codec"):
            editor = QtWidgets.QComboBox()
            editor.currentTextChanged.connect(lambda text, n=name: self._emit(n, text))
        elif name == "logo_corner":
            editor = QtWidgets.QComboBox()
            for corner in LogoCorner:
                editor.addItem(corner.value, corner)
            editor.currentIndexChanged.connect(
                lambda idx, e=editor: self._emit("logo_corner", e.itemData(idx))
            )
        elif isinstance(default, bool):
            editor = QtWidgets.QCheckBox()
            editor.toggled.connect(lambda checked, n=name: self._emit(n, checked))
        elif name in _INT_RANGES:
            editor = QtWidgets.QSpinBox()
            editor.setRange(*_INT_RANGES[name])
            editor.valueChanged.connect(lambda value, n=name: self._emit(n, value))
        else:
            editor = self._path_editor(name)
        self._editors[name] = editor
        return editor

    def _path_editor(self, name: str) -> QtWidgets.QWidget:
        host = QtWidgets.QWidget()
        layout = QtWidgets.QHBoxLayout(host)
        layout.setContentsMargins(0, 0, 0, 0)
        line = QtWidgets.QLineEdit()
        line.textChanged.connect(lambda text, n=name: self._emit(n, text or None if n == "logo_path" else text))
        browse = QtWidgets.QPushButton("Browse…")
        browse.clicked.connect(lambda _=False, n=name, le=line: self._browse(n, le))
        layout.addWidget(line, 1)
        layout.addWidget(browse)
        host.line_edit = line
        return host

    def _browse(self, name: str, line: QtWidgets.QLineEdit) -> None:
        if name == "logo_path":
            path, _ = QtWidgets.QFileDialog.getOpenFileName(self, "Select logo", line.text())
        else:
            path = QtWidgets.QFileDialog.getExistingDirectory(self, _LABELS[name], line.text())
        if path:
            line.setText(path)

    def _emit(self, name: str, value: Any) -> None:
        if self._loading:
            return
        error = self._errors.get(to_camel(name))
        if error is not None:
            error.setVisible(False)
        self.worker.set_field(self.kind, name, value)

    # -- worker signals --------------------------------------------------

    def apply_seed(self, values: dict[str, Any], caps: SupportedCapabilities) -> None:
        self._formats = caps.image_formats if self.kind == "image" else (caps.video_formats or DEFAULT_VIDEO_FORMATS)
        self._codecs = caps.video_codecs
        self._loading = True
        try:
            self._fill_combo("format", values.get("format") or "")
            if "codec" in self._editors:
                self._fill_combo("codec", values.get("codec") or "")
            for name, value in values.items():
                editor = self._editors.get(name)
                if editor is None or name in ("format", "codec"):
                    continue
                if isinstance(editor, QtWidgets.QCheckBox):
                    editor.setChecked(bool(value))
                elif isinstance(editor, QtWidgets.QSpinBox):
                    editor.setValue(int(value))
                elif name == "logo_corner":
                    editor.setCurrentIndex(max(0, editor.findText(LogoCorner.parse(value).value)))
                else:
                    editor.line_edit.setText(value or "")
        finally:
            self._loading = False
        self.setEnabled(True)

    def apply_favorites(self, settings: Optional[VideoSettings]) -> None:
        if self.kind != "video" or settings is None:
            return
        self._favorites = list(settings.format_favorite_list)
        self._codec_favorites = list(settings.codec_favorite_list)
        self._loading = True
        try:
            self._fill_combo("format", self._editors["format"].currentText())
            self._fill_combo("codec", self._editors["codec"].currentText())
        finally:
            self._loading = False

    def _fill_combo(self, name: str, current: str) -> None:
        combo = self._editors[name]
        combo.clear()
        if name == "codec":
            options = order_options(self._codecs, self._codec_favorites)
        else:
            options = order_options(self._formats, self._favorites)
        if current and current not in options:
            options.append(current)
        combo.addItems(options)
        combo.setCurrentText(current)

    def show_errors(self, errors: dict[str, str]) -> None:
        for field, label in self._errors.items():
            message = errors.get(field)
            label.setText(message or "")
            label.setVisible(bool(message))

    def set_processing(self, processing: bool) -> None:
        self.process_btn.setEnabled(not processing)
        self.cancel_btn.setVisible(processing)

    def _on_process(self) -> None:
        self.show_errors({})
        self.worker.submit(self.kind)


class SettingsTab(QtWidgets.QWidget):
    def __init__(self, worker: SessionWorker, parent: Optional[QtWidgets.QWidget] = None):
        super().__init__(parent)
        self.worker = worker
        self._caps = SupportedCapabilities()
        layout = QtWidgets.QVBoxLayout(self)
        layout.addWidget(build_section_header("Settings", "Locations and favorite video options."))

        folders = QtWidgets.QHBoxLayout()
        for label, what in (("Show config folder", "config"), ("Show log folder", "logs")):
            btn = QtWidgets.QPushButton(label)
            btn.clicked.connect(lambda _=False, w=what: self.worker.reveal(w))
            folders.addWidget(btn)
        reload_btn = QtWidgets.QPushButton("Reload settings")
        reload_btn.clicked.connect(self.worker.reload)
        folders.addWidget(reload_btn)
        folders.addStretch(1)
        layout.addLayout(folders)

        lists = QtWidgets.QHBoxLayout()
        self.format_list = self._favorite_list("format")
        self.codec_list = self._favorite_list("codec")
        lists.addWidget(wrap_in_card(QtWidgets.QLabel("Favorite formats"), self.format_list))
        lists.addWidget(wrap_in_card(QtWidgets.QLabel("Favorite codecs"), self.codec_list))
        layout.addLayout(lists, 1)

    def _favorite_list(self, what: str) -> QtWidgets.QListWidget:
        widget = QtWidgets.QListWidget()
        widget.itemChanged.connect(lambda item, w=what: self.worker.toggle_favorite(w, item.text()))
        return widget

    def set_capabilities(self, caps: SupportedCapabilities) -> None:
        self._caps = caps

    def apply_video_settings(self, settings: Optional[VideoSettings]) -> None:
        if settings is None:
            return
        self._fill(self.format_list, self._caps.video_formats or DEFAULT_VIDEO_FORMATS, settings.format_favorite_list)
        self._fill(self.codec_list, self._caps.video_codecs, settings.codec_favorite_list)

    @staticmethod
    def _fill(widget: QtWidgets.QListWidget, options, favorites) -> None:
        widget.blockSignals(True)
        try:
            widget.clear()
            for option in order_options(options, favorites):
                item = QtWidgets.QListWidgetItem(option)
                item.setFlags(item.flags() | QtCore.Qt.ItemIsUserCheckable)
                item.setCheckState(QtCore.Qt.Checked if option in favorites else QtCore.Qt.Unchecked)
                widget.addItem(item)
        finally:
            widget.blockSignals(False)


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, config: ClientConfig):
        super().__init__()
        self.setWindowTitle("MediaDesk")
        self.resize(880, 760)
        self.worker = SessionWorker(config)
        self.tabs: dict[str, MediaTab] = {
            "image": MediaTab("image", self.worker),
            "video": MediaTab("video", self.worker),
        }
        self.settings_tab = SettingsTab(self.worker)

        notebook = QtWidgets.QTabWidget()
        notebook.addTab(self.tabs["image"], "Images")
        notebook.addTab(self.tabs["video"], "Videos")
        notebook.addTab(self.settings_tab, "Settings")
        self.setCentralWidget(notebook)
        self.statusBar().showMessage("Connecting…")

        self.worker.status_changed.connect(self._on_status)
        self.worker.form_seeded.connect(self._on_seeded)
        self.worker.video_settings_changed.connect(self._on_video_settings)
        self.worker.progress_changed.connect(lambda kind, view: self.tabs[kind].progress.apply_view(view))
        self.worker.processing_changed.connect(lambda kind, value: self.tabs[kind].set_processing(value))
        self.worker.validation_failed.connect(lambda kind, errors: self.tabs[kind].show_errors(errors))
        self.worker.error_occurred.connect(self._on_error)
        self.worker.start()

    def _on_status(self, status: str) -> None:
        self.statusBar().showMessage(f"Backend: {status}")

    def _on_seeded(self, kind: str, values: dict, caps: SupportedCapabilities) -> None:
        self.settings_tab.set_capabilities(caps)
        self.tabs[kind].apply_seed(values, caps)

    def _on_video_settings(self, settings: Optional[VideoSettings]) -> None:
        self.tabs["video"].apply_favorites(settings)
        self.settings_tab.apply_video_settings(settings)

    def _on_error(self, message: str) -> None:
        self.statusBar().showMessage(message, 10_000)

    def closeEvent(self, event) -> None:  # noqa: N802 - Qt override
        self.worker.request_stop()
        self.worker.wait(3000)
        super().closeEvent(event)


def launch_gui(config: ClientConfig) -> int:  # pragma: no cover - interactive GUI
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv)
    apply_app_palette(app)
    app.setStyleSheet(app_stylesheet())
    win = MainWindow(config)
    win.show()
    return app.exec_()
