"""
Artifact transfer workers.

A transfer worker packages one configured build output and moves it to the
artifact location the pipeline job expects for it. Workers are called once
per output, in order, by the publisher.

Workers signal failure either by returning TransferOutcome.failed(reason)
or by raising (OSError, InterruptedError, ValueError, TransferError). The
publisher treats both the same way.
"""

import logging
import shutil
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pipepub.errors import TransferInterrupted
from pipepub.schemas import (
    CompressionType,
    Credentials,
    OutputArtifact,
    OutputDeclaration,
    TransferOutcome,
)

logger = logging.getLogger(__name__)

# shutil.make_archive format names
ARCHIVE_FORMATS = {
    CompressionType.NONE: "zip",
    CompressionType.ZIP: "zip",
    CompressionType.TAR: "tar",
    CompressionType.TAR_GZ: "gztar",
}


class ArtifactTransferWorker(ABC):
    """Abstract base class for artifact transfer."""

    @abstractmethod
    def transfer(
        self,
        build_name: str,
        output: OutputDeclaration,
        destination: OutputArtifact,
        credentials: Credentials,
        compression: CompressionType = CompressionType.NONE,
        workspace: Optional[Path] = None,
    ) -> TransferOutcome:
        """
        Package and upload one output.

        Args:
            build_name: Name of the build project
            output: The configured output to transfer
            destination: Artifact descriptor from the pipeline job
            credentials: Credentials for the artifact store
            compression: Archive format for the output
            workspace: Directory the output path is relative to

        Returns:
            TransferOutcome for this output

        Raises:
            OSError: On I/O failure (InterruptedError when the build is aborted)
            ValueError: On an invalid output or destination
        """
        pass


class NoOpTransferWorker(ArtifactTransferWorker):
    """
    No-op worker for testing and dry-run mode.

    Reports every output as transferred without touching anything.
    """

    def __init__(self) -> None:
        self.transferred: list[tuple[str, str]] = []

    def transfer(
        self,
        build_name: str,
        output: OutputDeclaration,
        destination: OutputArtifact,
        credentials: Credentials,
        compression: CompressionType = CompressionType.NONE,
        workspace: Optional[Path] = None,
    ) -> TransferOutcome:
        self.transferred.append((output.output, destination.name))
        return TransferOutcome.transferred(location=f"noop://{destination.bucket}/{destination.object_key}")


class ArchiveTransferWorker(ArtifactTransferWorker):
    """
    Local worker that archives outputs into an artifact directory.

    The artifact for a destination is written to
    ``<artifact_root>/<bucket>/<object_key>``. Directories are always archived;
    single files are copied unchanged when compression is None.

    Setting ``abort_event`` (for example when the build is aborted) makes the
    next transfer raise TransferInterrupted.
    """

    def __init__(self, artifact_root: Path, abort_event: Optional[threading.Event] = None):
        self._artifact_root = Path(artifact_root)
        self._abort_event = abort_event

    def transfer(
        self,
        build_name: str,
        output: OutputDeclaration,
        destination: OutputArtifact,
        credentials: Credentials,
        compression: CompressionType = CompressionType.NONE,
        workspace: Optional[Path] = None,
    ) -> TransferOutcome:
        if self._abort_event is not None and self._abort_event.is_set():
            raise TransferInterrupted(
                f"Build {build_name} aborted while transferring {output.output}"
            )

        if not destination.bucket:
            raise ValueError(f"Output artifact '{destination.name}' has no bucket")

        source = Path(workspace or ".") / output.output
        if not source.exists():
            return TransferOutcome.failed(f"Output path does not exist: {source}")

        target = self._target_for(destination)
        target.parent.mkdir(parents=True, exist_ok=True)

        if source.is_file() and compression == CompressionType.NONE:
            shutil.copyfile(source, target)
        else:
            self._archive(build_name, source, target, compression)

        logger.info(f"Transferred {source} -> {target}")
        return TransferOutcome.transferred(location=str(target))

    def _target_for(self, destination: OutputArtifact) -> Path:
        """
        Raises:
            ValueError: If bucket or object key point outside the artifact root
        """
        root = self._artifact_root.resolve()
        target = (root / destination.bucket / (destination.object_key or destination.name)).resolve()
        if target == root or not target.is_relative_to(root):
            raise ValueError(
                f"Output artifact '{destination.name}' resolves outside the artifact root: "
                f"{destination.bucket}/{destination.object_key}"
            )
        return target

    def _archive(self, build_name: str, source: Path, target: Path, compression: CompressionType) -> None:
        archive_format = ARCHIVE_FORMATS[compression]
        with tempfile.TemporaryDirectory(prefix="pipepub-") as tmp:
            base_name = str(Path(tmp) / build_name)
            if source.is_dir():
                archive = shutil.make_archive(base_name, archive_format, root_dir=source)
            else:
                archive = shutil.make_archive(
                    base_name, archive_format, root_dir=source.parent, base_dir=source.name
                )
            shutil.copyfile(archive, target)
