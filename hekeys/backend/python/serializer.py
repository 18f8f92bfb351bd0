"""
Text artifacts for key material.

Every artifact is a small YAML header followed by the library's own JSON
serialization of the key object:

    format: hekeys-artifact
    version: 1
    kind: evaluation_keys
    scheme: BGVRNS
    backend: openfhe
    generation: 3f2a...
    params: {...}
    fingerprint: 9c41...
    degrees: [2, 3]
    ...
    <payload>

The header tells a reader what it is looking at before the payload is handed
to the library, so missing, corrupt and wrong-kind artifacts each surface as
their own error instead of a generic decode failure.
"""
import logging

import yaml

from hekeys.core.errors import (
    ArtifactIOError,
    BackendError,
    IncompatibleParameters,
    InvalidParameters,
    MalformedArtifact,
    MissingEvaluationKeys,
    WrongKeyKind,
)
from .keys import KEY_TYPES
from .parameters import BGVParameters

logger = logging.getLogger(__name__)

ARTIFACT_FORMAT = "hekeys-artifact"
ARTIFACT_VERSION = 1
SCHEME = "BGVRNS"

EVALUATION_KEYS = "evaluation_keys"
PARAMETERS = "parameters"
ARTIFACT_KINDS = (*KEY_TYPES, EVALUATION_KEYS, PARAMETERS)

_HEADER_END = "\n...\n"


def dump_artifact(header, payload=""):
    header = {
        "format": ARTIFACT_FORMAT,
        "version": ARTIFACT_VERSION,
        "scheme": SCHEME,
        **header,
    }
    return yaml.safe_dump(header, sort_keys=False, explicit_end=True) + payload


def parse_artifact(artifact_id, text):
    head, sep, payload = text.partition(_HEADER_END)
    if not sep:
        raise MalformedArtifact(artifact_id, "no artifact header found")

    try:
        header = yaml.safe_load(head)
    except yaml.YAMLError as e:
        raise MalformedArtifact(artifact_id, f"unreadable header: {e}") from e

    if not isinstance(header, dict) or header.get("format") != ARTIFACT_FORMAT:
        raise MalformedArtifact(artifact_id, "not a hekeys artifact")
    if header.get("version") != ARTIFACT_VERSION:
        raise MalformedArtifact(
            artifact_id,
            f"unsupported artifact version {header.get('version')!r} "
            f"(expected {ARTIFACT_VERSION})")
    if header.get("scheme") != SCHEME:
        raise MalformedArtifact(
            artifact_id, f"unsupported scheme {header.get('scheme')!r}")
    if header.get("kind") not in ARTIFACT_KINDS:
        raise MalformedArtifact(
            artifact_id, f"unknown artifact kind {header.get('kind')!r}")

    return header, payload


def _recorded_params(artifact_id, header):
    try:
        params = BGVParameters.from_dict(header["params"])
    except (KeyError, TypeError, AttributeError, InvalidParameters) as e:
        raise MalformedArtifact(
            artifact_id, f"invalid parameter record: {e}") from e

    if header.get("fingerprint") != params.fingerprint():
        raise MalformedArtifact(
            artifact_id, "parameter fingerprint does not match its record")
    return params


class NewSerializer:
    def __init__(self, store, backend):
        self.store = store
        self.backend = backend

    def _read(self, artifact_id, expected_kind):
        text = self.store.read(artifact_id)
        header, payload = parse_artifact(artifact_id, text)
        if header["kind"] != expected_kind:
            raise WrongKeyKind(artifact_id, expected_kind, header["kind"])
        if expected_kind != PARAMETERS and header.get("backend") != self.backend.name:
            raise MalformedArtifact(
                artifact_id,
                f"written by the {header.get('backend')!r} backend, "
                f"cannot be read by {self.backend.name!r}")

        logger.debug("Read %s from %s", expected_kind, self.store.location(artifact_id))
        return header, payload

    def write_key(self, artifact_id, key):
        try:
            payload = self.backend.SerializeKey(key.handle)
        except BackendError as e:
            raise ArtifactIOError(
                artifact_id, f"could not serialize the {key.kind}: {e}") from e

        header = {
            "kind": key.kind,
            "backend": self.backend.name,
            "generation": key.generation,
        }
        self.store.write(artifact_id, dump_artifact(header, payload))

    def read_key(self, artifact_id, kind=None):
        """Reads a secret or public key. Without ``kind`` the artifact's own
        header decides which of the two it is."""
        if kind is None:
            header, _ = parse_artifact(artifact_id, self.store.read(artifact_id))
            if header["kind"] not in KEY_TYPES:
                raise WrongKeyKind(
                    artifact_id, " or ".join(KEY_TYPES), header["kind"])
            kind = header["kind"]

        header, payload = self._read(artifact_id, kind)
        try:
            handle = self.backend.DeserializeKey(payload, kind)
        except BackendError as e:
            raise MalformedArtifact(
                artifact_id, f"payload is not a valid {kind}: {e}") from e

        return KEY_TYPES[kind](handle, header.get("generation"))

    def read_secret_key(self, artifact_id):
        return self.read_key(artifact_id, "secret_key")

    def read_public_key(self, artifact_id):
        return self.read_key(artifact_id, "public_key")

    def write_evaluation_keys(self, artifact_id, context):
        collection = context.evaluation_keys
        if collection.is_empty:
            raise MissingEvaluationKeys(
                f"Cannot write {artifact_id}: the context holds no evaluation keys.")

        generations = collection.generations
        try:
            payload = self.backend.SerializeEvalMultKeys(context.handle)
        except BackendError as e:
            raise ArtifactIOError(
                artifact_id, f"could not serialize the evaluation keys: {e}") from e

        header = {
            "kind": EVALUATION_KEYS,
            "backend": self.backend.name,
            "generation": generations.pop() if len(generations) == 1 else None,
            "params": context.params.to_dict(),
            "fingerprint": context.params.fingerprint(),
            "degrees": collection.degrees,
        }
        self.store.write(artifact_id, dump_artifact(header, payload))

    def read_evaluation_keys(self, artifact_id, context):
        header, payload = self._read(artifact_id, EVALUATION_KEYS)
        recorded = _recorded_params(artifact_id, header)

        # Keys generated under other parameters may still decode cleanly and
        # only produce garbage once used, so the mismatch is caught here.
        mismatched = context.params.diff(recorded)
        if mismatched:
            raise IncompatibleParameters(artifact_id, mismatched)

        degrees = header.get("degrees")
        if not isinstance(degrees, list) or not degrees or \
                not all(isinstance(d, int) for d in degrees):
            raise MalformedArtifact(artifact_id, "invalid degree record")

        try:
            self.backend.DeserializeEvalMultKeys(context.handle, payload)
        except BackendError as e:
            raise MalformedArtifact(
                artifact_id, f"payload is not a valid evaluation key set: {e}") from e

        context.evaluation_keys.install(degrees, header.get("generation"))
        return header.get("generation")

    def write_parameters(self, artifact_id, params):
        header = {
            "kind": PARAMETERS,
            "params": params.to_dict(),
            "fingerprint": params.fingerprint(),
        }
        self.store.write(artifact_id, dump_artifact(header))

    def read_parameters(self, artifact_id):
        header, _ = self._read(artifact_id, PARAMETERS)
        return _recorded_params(artifact_id, header)
