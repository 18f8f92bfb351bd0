import os
import logging
import tempfile

import h5py

from hekeys.core.errors import (
    ArtifactIOError,
    ArtifactMissing,
    ArtifactUnreadable,
    MalformedArtifact,
)

logger = logging.getLogger(__name__)


class DirectoryStore:
    """One text file per artifact under a root directory."""

    def __init__(self, root):
        self.root = os.path.abspath(root)

    def location(self, artifact_id):
        return os.path.join(self.root, artifact_id)

    def exists(self, artifact_id):
        return os.path.isfile(self.location(artifact_id))

    def read(self, artifact_id):
        path = self.location(artifact_id)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            raise ArtifactMissing(
                artifact_id, f"no artifact at {path}") from None
        except UnicodeDecodeError as e:
            raise MalformedArtifact(
                artifact_id, f"{path} is not a text artifact: {e}") from e
        except OSError as e:
            raise ArtifactUnreadable(
                artifact_id, f"cannot read {path}: {e}") from e

    def write(self, artifact_id, text):
        path = self.location(artifact_id)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            # Write next to the target and move it into place so that readers
            # never observe a partially written artifact.
            fd, tmp_path = tempfile.mkstemp(
                dir=os.path.dirname(path), prefix=".tmp-", suffix=".part")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(text)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, path)
                logger.debug("Wrote artifact %s", path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except OSError as e:
            raise ArtifactIOError(
                artifact_id, f"cannot write {path}: {e}") from e

    def remove(self, artifact_id):
        path = self.location(artifact_id)
        try:
            os.remove(path)
        except FileNotFoundError:
            raise ArtifactMissing(
                artifact_id, f"no artifact at {path}") from None
        except OSError as e:
            raise ArtifactIOError(
                artifact_id, f"cannot remove {path}: {e}") from e
        logger.debug("Removed artifact %s", path)

    def __repr__(self):
        return f"DirectoryStore({self.root!r})"


class H5Store:
    """All artifacts as string datasets of a single HDF5 keys file."""

    def __init__(self, path):
        self.path = os.path.abspath(path)

    def location(self, artifact_id):
        return f"{self.path}:{artifact_id}"

    def exists(self, artifact_id):
        if not os.path.isfile(self.path):
            return False
        with h5py.File(self.path, "r") as f:
            return artifact_id in f

    def read(self, artifact_id):
        if not os.path.isfile(self.path):
            raise ArtifactMissing(artifact_id, f"no keys file at {self.path}")

        try:
            with h5py.File(self.path, "r") as f:
                data = f[artifact_id][()] if artifact_id in f else None
        except OSError as e:
            raise ArtifactUnreadable(
                artifact_id, f"cannot read {self.path}: {e}") from e

        if data is None:
            raise ArtifactMissing(artifact_id, f"no dataset in {self.path}")
        if isinstance(data, bytes):
            try:
                data = data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedArtifact(
                    artifact_id, f"dataset in {self.path} is not text: {e}") from e
        return data

    def write(self, artifact_id, text):
        try:
            os.makedirs(os.path.dirname(self.path), exist_ok=True)
            with h5py.File(self.path, "a") as f:
                if artifact_id in f:
                    del f[artifact_id]
                f.create_dataset(
                    artifact_id, data=text, dtype=h5py.string_dtype("utf-8"))
                f.flush()
            logger.debug("Wrote artifact %s", self.location(artifact_id))
        except OSError as e:
            raise ArtifactIOError(
                artifact_id, f"cannot write {self.location(artifact_id)}: {e}") from e

    def remove(self, artifact_id):
        if not os.path.isfile(self.path):
            raise ArtifactMissing(artifact_id, f"no keys file at {self.path}")

        try:
            with h5py.File(self.path, "a") as f:
                found = artifact_id in f
                if found:
                    del f[artifact_id]
        except OSError as e:
            raise ArtifactIOError(
                artifact_id, f"cannot remove {self.location(artifact_id)}: {e}") from e

        if not found:
            raise ArtifactMissing(artifact_id, f"no dataset in {self.path}")
        logger.debug("Removed artifact %s", self.location(artifact_id))

    def __repr__(self):
        return f"H5Store({self.path!r})"


def new_store(kind, path):
    if kind == "h5":
        return H5Store(path)
    return DirectoryStore(path)
