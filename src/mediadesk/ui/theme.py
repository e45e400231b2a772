"""Palette and stylesheet for the desktop shell."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PyQt5 import QtGui


@dataclass(frozen=True)
class AppPalette:
    window: str = "#f4f6fa"
    base: str = "#ffffff"
    text: str = "#111827"
    subtle_text: str = "#6b7280"
    accent: str = "#2563eb"
    border: str = "#d5d9e0"
    danger: str = "#dc2626"


def _color(value: str) -> QtGui.QColor:
    col = QtGui.QColor()
    col.setNamedColor(value)
    return col


def apply_app_palette(app, palette: Optional[AppPalette] = None) -> None:
    palette = palette or AppPalette()
    qt_palette = QtGui.QPalette()
    qt_palette.setColor(QtGui.QPalette.Window, _color(palette.window))
    qt_palette.setColor(QtGui.QPalette.Base, _color(palette.base))
    qt_palette.setColor(QtGui.QPalette.Text, _color(palette.text))
    qt_palette.setColor(QtGui.QPalette.ButtonText, _color(palette.text))
    app.setPalette(qt_palette)


def app_stylesheet(palette: Optional[AppPalette] = None) -> str:
    """Cards, section titles and the primary/danger buttons."""
    palette = palette or AppPalette()
    return (
        "QWidget#Card {"
        f"background-color: {palette.base};"
        f"border: 1px solid {palette.border};"
        "border-radius: 10px;"
        "}"
        "QLabel#SectionTitle { font-size: 16px; font-weight: 600; }"
        f"QLabel#SectionSubtitle {{ font-size: 12px; color: {palette.subtle_text}; }}"
        f"QLabel#FieldError {{ font-size: 11px; color: {palette.danger}; }}"
        "QPushButton#Primary {"
        "border-radius: 6px;"
        f"background-color: {palette.accent};"
        "color: #ffffff;"
        "padding: 6px 14px;"
        "}"
        "QPushButton#Danger {"
        "border-radius: 6px;"
        f"background-color: {palette.danger};"
        "color: #ffffff;"
        "padding: 6px 14px;"
        "}"
        "QPushButton:disabled { background-color: #e5e7eb; color: #9ca3af; }"
    )
