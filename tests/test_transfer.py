"""Tests for artifact transfer workers."""

import tarfile
import threading
import zipfile

import pytest

from pipepub.errors import TransferInterrupted
from pipepub.schemas import CompressionType, Credentials, OutputArtifact, OutputDeclaration
from pipepub.transfer import ArchiveTransferWorker, NoOpTransferWorker


@pytest.fixture
def workspace(tmp_path):
    ws = tmp_path / "ws"
    (ws / "dist").mkdir(parents=True)
    (ws / "dist" / "app.js").write_text("console.log('hi')")
    (ws / "report.xml").write_text("<testsuite/>")
    return ws


@pytest.fixture
def artifact():
    return OutputArtifact(name="BuildOutput", bucket="artifacts", object_key="web/out")


def test_noop_worker_records(artifact):
    worker = NoOpTransferWorker()
    outcome = worker.transfer("web", OutputDeclaration("dist"), artifact, Credentials())
    assert outcome.ok
    assert worker.transferred == [("dist", "BuildOutput")]


def test_directory_is_zipped_by_default(tmp_path, workspace, artifact):
    worker = ArchiveTransferWorker(tmp_path / "store")

    outcome = worker.transfer("web", OutputDeclaration("dist"), artifact, Credentials(), workspace=workspace)

    target = tmp_path / "store" / "artifacts" / "web" / "out"
    assert outcome.ok
    assert outcome.location == str(target.resolve())
    with zipfile.ZipFile(target) as zf:
        assert "app.js" in zf.namelist()


def test_directory_tar_gz(tmp_path, workspace, artifact):
    worker = ArchiveTransferWorker(tmp_path / "store")

    worker.transfer("web", OutputDeclaration("dist"), artifact, Credentials(),
                    compression=CompressionType.TAR_GZ, workspace=workspace)

    target = tmp_path / "store" / "artifacts" / "web" / "out"
    with tarfile.open(target, "r:gz") as tf:
        assert any(name.endswith("app.js") for name in tf.getnames())


def test_single_file_copied_without_compression(tmp_path, workspace, artifact):
    worker = ArchiveTransferWorker(tmp_path / "store")

    worker.transfer("web", OutputDeclaration("report.xml"), artifact, Credentials(), workspace=workspace)

    assert (tmp_path / "store" / "artifacts" / "web" / "out").read_text() == "<testsuite/>"


def test_missing_output_fails(tmp_path, workspace, artifact):
    worker = ArchiveTransferWorker(tmp_path / "store")

    outcome = worker.transfer("web", OutputDeclaration("missing"), artifact, Credentials(), workspace=workspace)

    assert outcome.ok is False
    assert "does not exist" in outcome.reason


def test_missing_bucket_is_argument_error(tmp_path, workspace):
    worker = ArchiveTransferWorker(tmp_path / "store")
    with pytest.raises(ValueError, match="has no bucket"):
        worker.transfer("web", OutputDeclaration("dist"), OutputArtifact(name="Out"), Credentials(),
                        workspace=workspace)


def test_abort_event_interrupts(tmp_path, workspace, artifact):
    abort = threading.Event()
    abort.set()
    worker = ArchiveTransferWorker(tmp_path / "store", abort_event=abort)

    with pytest.raises(TransferInterrupted, match="aborted"):
        worker.transfer("web", OutputDeclaration("dist"), artifact, Credentials(), workspace=workspace)


@pytest.mark.parametrize("bucket,object_key", [
    ("b", "../../escaped.txt"),
    ("..", "escaped.txt"),
    ("b", "ABSOLUTE"),
])
def test_destination_outside_artifact_root_rejected(tmp_path, workspace, bucket, object_key):
    outside = tmp_path / "escaped.txt"
    if object_key == "ABSOLUTE":
        object_key = str(outside)
    worker = ArchiveTransferWorker(tmp_path / "store")

    with pytest.raises(ValueError, match="outside the artifact root"):
        worker.transfer("web", OutputDeclaration("report.xml"),
                        OutputArtifact(name="A", bucket=bucket, object_key=object_key),
                        Credentials(), workspace=workspace)

    assert not outside.exists()
