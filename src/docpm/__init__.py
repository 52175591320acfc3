"""docpm: markdown-backed work item tracking for documentation-driven development."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("docpm")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from docpm.config import Config, load_config
from docpm.models import Task, WorkItem
from docpm.service import WorkItemService

__all__ = ["Config", "Task", "WorkItem", "WorkItemService", "__version__", "load_config"]
