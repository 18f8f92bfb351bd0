class HEKeysError(Exception):
    """Base class for every error raised by hekeys."""


class InvalidParameters(HEKeysError, ValueError):
    """A parameter descriptor was rejected, either by validation or by the
    library while building a context from it."""


class GenerationFailure(HEKeysError, RuntimeError):
    """Key generation failed. The custody sequence must start over."""


class BackendError(HEKeysError, RuntimeError):
    """The cryptographic library reported a failure. Callers translate this
    into one of the more specific errors below."""


class LifecycleError(HEKeysError, RuntimeError):
    """An operation was attempted from a lifecycle state that forbids it."""


class MissingEvaluationKeys(HEKeysError, RuntimeError):
    """The context holds no evaluation keys for the requested operation."""


class ArtifactIOError(HEKeysError, OSError):
    """An artifact could not be read or written."""

    def __init__(self, artifact_id, message):
        super().__init__(f"{artifact_id}: {message}")
        self.artifact_id = artifact_id


class ArtifactMissing(ArtifactIOError, FileNotFoundError):
    pass


class ArtifactUnreadable(ArtifactIOError):
    pass


class CodecError(HEKeysError, ValueError):
    """An artifact exists but cannot be turned back into key material."""

    def __init__(self, artifact_id, message):
        super().__init__(f"{artifact_id}: {message}")
        self.artifact_id = artifact_id


class MalformedArtifact(CodecError):
    pass


class WrongKeyKind(CodecError):
    def __init__(self, artifact_id, expected, found):
        super().__init__(
            artifact_id, f"expected a '{expected}' artifact, found '{found}'")
        self.expected = expected
        self.found = found


class IncompatibleParameters(CodecError):
    """Evaluation keys were generated under a different descriptor than the
    one the target context was built from."""

    def __init__(self, artifact_id, fields):
        super().__init__(
            artifact_id,
            "evaluation keys were generated under different scheme "
            f"parameters (mismatched: {', '.join(fields)})")
        self.fields = list(fields)


class LoadError(HEKeysError, RuntimeError):
    """Aggregate failure of a load sequence. The underlying error is
    available as ``__cause__``."""

    def __init__(self, artifact_id, stage, cause):
        super().__init__(f"failed to load {stage} from {artifact_id}: {cause}")
        self.artifact_id = artifact_id
        self.stage = stage
        self.cause = cause
