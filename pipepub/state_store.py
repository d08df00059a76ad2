"""
JobStateStore - Per-build storage of JobStateModels.

The store maps a build's state key to its JobStateModel:
- The source integration registers a model before the build step runs
- The publisher reads it while publishing
- The publisher removes it once the result has been reported

Builds run concurrently on their own threads. Each build only touches its
own key, so the models need no locking; the mapping itself does.

Storage backends:
- In-memory (default, process-wide)
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

from pipepub.schemas import JobStateModel

logger = logging.getLogger(__name__)


class JobStateStore(ABC):
    """
    Abstract base class for job state storage.

    Implementations must be safe under concurrent use by unrelated builds.
    """

    @abstractmethod
    def put_model(self, key: str, model: JobStateModel) -> None:
        """
        Register the model for a build, replacing any stale entry.

        Args:
            key: The build's state key
            model: Job state for the build
        """
        pass

    @abstractmethod
    def get_model(self, key: str) -> Optional[JobStateModel]:
        """
        Retrieve the model for a build.

        Args:
            key: The build's state key

        Returns:
            The JobStateModel if registered, None otherwise
        """
        pass

    @abstractmethod
    def remove_model(self, key: str) -> None:
        """
        Remove the model for a build. Removing a missing key is a no-op.

        Args:
            key: The build's state key
        """
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get_model(key) is not None


class InMemoryJobStateStore(JobStateStore):
    """
    In-memory implementation of JobStateStore.

    One instance is shared by every build in the process.
    """

    def __init__(self) -> None:
        self._models: dict[str, JobStateModel] = {}
        self._lock = threading.Lock()

    def put_model(self, key: str, model: JobStateModel) -> None:
        with self._lock:
            if key in self._models:
                logger.warning(f"Replacing stale job state for build {key}")
            self._models[key] = model

    def get_model(self, key: str) -> Optional[JobStateModel]:
        with self._lock:
            return self._models.get(key)

    def remove_model(self, key: str) -> None:
        with self._lock:
            self._models.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._models)
