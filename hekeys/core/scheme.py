import os
import logging

import yaml

from hekeys.backend import load_backend
from hekeys.backend.python.artifacts import new_store
from hekeys.backend.python.context import build_context, parse_capabilities
from hekeys.backend.python.encoder import NewEncoder
from hekeys.backend.python.encryptor import NewEncryptor
from hekeys.backend.python.evaluator import NewEvaluator
from hekeys.backend.python.key_generator import NewKeyGenerator
from hekeys.backend.python.key_loader import NewKeyLoader
from hekeys.backend.python.parameters import NewParameters
from hekeys.backend.python.serializer import NewSerializer

from .errors import (
    ArtifactMissing,
    HEKeysError,
    IncompatibleParameters,
    InvalidParameters,
    LifecycleError,
    LoadError,
    MissingEvaluationKeys,
)
from .lifecycle import KeyLifecycle, KeyState

logger = logging.getLogger(__name__)


class Scheme:
    """
    One process' view of the key custody lifecycle: a context built from the
    configured descriptor, the keys it currently holds, and the components
    that generate, publish, purge and load them.
    """
    def __init__(self, config, backend=None, store=None):
        self.params = NewParameters(config)
        self.backend = backend or load_backend(self.params.get_backend())
        self.store = store or new_store(
            self.params.get_store(), self.params.get_keys_path())
        self.capabilities = parse_capabilities(self.params.get_capabilities())
        self.artifact_ids = self.params.get_artifact_ids()

        self.lifecycle = KeyLifecycle()
        self.key_pair = None
        self.context = build_context(
            self.params.bgv_params, self.capabilities, self.backend)

        self.serializer = NewSerializer(self.store, self.backend)
        self.key_generator = NewKeyGenerator(self.backend)
        self.key_loader = NewKeyLoader(self.serializer)
        self.encoder = NewEncoder(self)
        self.encryptor = NewEncryptor(self)
        self.evaluator = NewEvaluator(self)

        logger.debug("%s", self.params)

    @property
    def state(self):
        return self.lifecycle.state

    # Custodian side

    def generate_keys(self):
        self.key_pair = self.lifecycle.step(
            "generate", self.key_generator.generate, self.context)
        return self.key_pair

    def publish_keys(self):
        self.lifecycle.step(
            "publish", self.key_generator.publish,
            self.serializer, self.context, self.key_pair, self.artifact_ids)

    def purge_keys(self):
        self.lifecycle.step(
            "purge", self.key_generator.purge_evaluation_keys, self.context)
        logger.info("Evaluation keys purged from the generation context")

    # Consumer side

    def rebuild_context(self):
        """Replaces the context with a fresh one built from an independently
        constructed descriptor, and drops the keys held in memory. This is
        the cold start a separate consumer process would make."""
        if self.state not in (KeyState.UNINITIALIZED, KeyState.PURGED):
            raise LifecycleError(
                f"Cannot rebuild the context in state {self.state.name}; "
                f"purge the evaluation keys first.")

        self.key_pair = None
        self.context = build_context(
            self.params.new_descriptor(), self.capabilities, self.backend)
        logger.info("Context rebuilt from a fresh descriptor (%s)",
                    self.context.params.fingerprint()[:16])
        return self.context

    def check_parameters_artifact(self):
        params_id = self.artifact_ids["params"]
        if not params_id:
            return
        try:
            recorded = self.serializer.read_parameters(params_id)
        except ArtifactMissing:
            logger.info("No parameters artifact at %s, relying on the "
                        "evaluation key check", self.store.location(params_id))
            return
        except HEKeysError as e:
            raise LoadError(params_id, "parameters", e) from e

        mismatched = self.context.params.diff(recorded)
        if mismatched:
            cause = IncompatibleParameters(params_id, mismatched)
            raise LoadError(params_id, "parameters", cause) from cause

    def load_keys(self):
        self.lifecycle.check("load")
        self.check_parameters_artifact()
        self.key_pair = self.lifecycle.step(
            "load", self.key_loader.load, self.context,
            self.artifact_ids["secret_key"],
            self.artifact_ids["public_key"],
            self.artifact_ids["eval_keys"])
        return self.key_pair

    def activate(self):
        self.lifecycle.check("activate")
        if self.key_pair is None:
            raise LifecycleError("No key pair is available to activate.")
        if self.context.evaluation_keys.is_empty:
            raise MissingEvaluationKeys(
                "The context holds no evaluation keys, refusing to activate.")
        self.lifecycle.advance("activate")

    # Homomorphic pipeline

    def _require_ready(self):
        if not self.lifecycle.ready:
            raise LifecycleError(
                f"Keys are not ready (state {self.state.name}); the "
                "homomorphic pipeline cannot run.")

    def encrypt(self, values):
        self._require_ready()
        return self.encryptor.encrypt(self.encoder.encode(values))

    def multiply(self, ciphertext1, ciphertext2):
        self._require_ready()
        return self.evaluator.multiply(ciphertext1, ciphertext2)

    def decrypt(self, ciphertext):
        self._require_ready()
        return self.encryptor.decrypt(ciphertext)


def load_config(config):
    if isinstance(config, dict):
        return config
    path = os.fspath(config)
    try:
        with open(path) as f:
            return yaml.safe_load(f)
    except OSError as e:
        raise InvalidParameters(f"Cannot read configuration {path}: {e}") from e
    except yaml.YAMLError as e:
        raise InvalidParameters(f"Invalid YAML in {path}: {e}") from e


def init_scheme(config, backend=None, store=None):
    return Scheme(load_config(config), backend=backend, store=store)
