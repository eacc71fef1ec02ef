"""Source checks for job queue declarations."""

from queue_slo.lint.baseline import Baseline
from queue_slo.lint.checker import QueueNamingChecker, display_path, iter_python_files
from queue_slo.lint.extractor import match_adapter_queue, match_options_queue

__all__ = [
    "Baseline",
    "QueueNamingChecker",
    "display_path",
    "iter_python_files",
    "match_adapter_queue",
    "match_options_queue",
]
