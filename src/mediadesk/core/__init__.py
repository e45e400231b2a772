"""Client-side synchronisation core: settings cache, form sync, jobs, progress."""

from .form_sync import FormSyncAdapter  # noqa: F401
from .forms import ImageForm, VideoForm  # noqa: F401
from .job_controller import JobKind, JobSubmissionController  # noqa: F401
from .progress_monitor import MonitorState, ProgressMonitor, ProgressView  # noqa: F401
from .scheduler import AsyncioScheduler, Scheduler  # noqa: F401
from .session import AppSession, MediaView  # noqa: F401
from .settings_store import SettingsStore  # noqa: F401

__all__ = [
    "AppSession",
    "AsyncioScheduler",
    "FormSyncAdapter",
    "ImageForm",
    "JobKind",
    "JobSubmissionController",
    "MediaView",
    "MonitorState",
    "ProgressMonitor",
    "ProgressView",
    "Scheduler",
    "SettingsStore",
    "VideoForm",
]
