"""Progress panel shown under each processing form."""

from __future__ import annotations

from typing import Optional

from PyQt5.QtWidgets import QLabel, QProgressBar, QVBoxLayout, QWidget

from mediadesk.core.progress_monitor import ProgressView
from mediadesk.formatting import describe_progress


class ProgressWidget(QWidget):
    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setSpacing(6)
        layout.setContentsMargins(0, 4, 0, 0)

        self.detail_label = QLabel("")
        self.detail_label.setObjectName("SectionSubtitle")
        layout.addWidget(self.detail_label)

        # tenths of a percent
        self.bar = QProgressBar()
        self.bar.setRange(0, 1000)
        self.bar.setTextVisible(False)
        self.bar.setStyleSheet("""
            QProgressBar {
                border: 1px solid #d5d9e0;
                border-radius: 6px;
                background-color: #ecf0f1;
                min-height: 12px;
            }
            QProgressBar::chunk {
                background-color: #2563eb;
                border-radius: 5px;
            }
        """)
        layout.addWidget(self.bar)
        self.setVisible(False)

    def apply_view(self, view: ProgressView) -> None:
        if not (view.visible and view.snapshot is not None):
            self.setVisible(False)
            return
        info = view.snapshot
        self.detail_label.setText(describe_progress(info))
        self.bar.setValue(int(round(min(info.percentage, 100.0) * 10)))
        self.setVisible(True)
