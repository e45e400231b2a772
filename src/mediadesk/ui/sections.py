"""Layout helpers for headers and cards."""

from __future__ import annotations

from typing import Optional

from PyQt5.QtWidgets import QLabel, QVBoxLayout, QWidget


def build_section_header(title: str, subtitle: Optional[str] = None) -> QWidget:
    wrapper = QWidget()
    layout = QVBoxLayout(wrapper)
    layout.setContentsMargins(0, 0, 0, 4)
    layout.setSpacing(2)

    title_label = QLabel(title)
    title_label.setObjectName("SectionTitle")
    layout.addWidget(title_label)

    if subtitle:
        subtitle_label = QLabel(subtitle)
        subtitle_label.setObjectName("SectionSubtitle")
        subtitle_label.setWordWrap(True)
        layout.addWidget(subtitle_label)
    return wrapper


def wrap_in_card(*widgets: QWidget) -> QWidget:
    card = QWidget()
    card.setObjectName("Card")
    layout = QVBoxLayout(card)
    layout.setContentsMargins(16, 16, 16, 16)
    for widget in widgets:
        layout.addWidget(widget)
    return card
