"""PyQt5 desktop shell."""

from .main_window import MainWindow, launch_gui
from .progress_widget import ProgressWidget
from .session_worker import SessionWorker

__all__ = ["MainWindow", "ProgressWidget", "SessionWorker", "launch_gui"]
