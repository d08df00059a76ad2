"""
pipepub - Publish build outputs to a pipeline job and report its result.

Validates configured outputs against the pipeline job, transfers artifacts
when the build succeeded, and always reports a terminal result and cleans
up the build's job state.
"""

__version__ = "0.1.0"
__author__ = "Local Pipeline Team"


__all__ = [
    "PublishOrchestrator",
    "perform_publish",
    "PublisherConfig",
    "load_config",
    "get_pipepub_home",
]

from .config import PublisherConfig, load_config, get_pipepub_home
from .publisher import PublishOrchestrator, perform_publish
