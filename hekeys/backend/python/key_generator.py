import uuid
import logging

from hekeys.core.errors import BackendError, GenerationFailure, LifecycleError
from .keys import KeyPair, PublicKey, SecretKey

logger = logging.getLogger(__name__)


class NewKeyGenerator:
    def __init__(self, backend):
        self.backend = backend

    def generate(self, context):
        if context.keys_generated:
            raise LifecycleError(
                "Keys were already generated for this context. Build a new "
                "context to generate another key set.")
        if not context.evaluation_keys.is_empty:
            raise LifecycleError(
                "The context already holds evaluation keys "
                f"{context.evaluation_keys.degrees}; purge them before "
                "generating a fresh key set.")

        generation = uuid.uuid4().hex
        logger.info(
            "Generating keys (public, secret and evaluation keys) for %s",
            context.params.fingerprint()[:16])

        try:
            pk, sk = self.backend.KeyGen(context.handle)
        except BackendError as e:
            raise GenerationFailure(f"Key generation failed: {e}") from e

        key_pair = KeyPair(SecretKey(sk, generation), PublicKey(pk, generation))
        self.generate_evaluation_keys(context, key_pair.secret_key)
        context.keys_generated = True
        return key_pair

    def generate_evaluation_keys(self, context, secret_key):
        # One relinearization key per power of s up to max_relin_sk_deg,
        # stored on the context rather than returned.
        try:
            self.backend.EvalMultKeysGen(context.handle, secret_key.handle)
        except BackendError as e:
            self.purge_evaluation_keys(context)
            raise GenerationFailure(
                f"Evaluation key generation failed: {e}") from e

        degrees = context.params.relin_degrees()
        context.evaluation_keys.install(degrees, secret_key.generation)
        logger.debug("Installed evaluation keys for degrees %s", degrees)

    def purge_evaluation_keys(self, context):
        self.backend.ClearEvalMultKeys(context.handle)
        context.evaluation_keys.clear()

    def publish(self, serializer, context, key_pair, artifact_ids):
        """Writes the parameters (when an id is given), secret key, public
        key and evaluation key artifacts, in that order. Each artifact is
        written completely or not at all, but a failure part way through
        leaves the earlier ones in place: rerun the whole custody sequence."""
        if artifact_ids.get("params"):
            serializer.write_parameters(artifact_ids["params"], context.params)
        serializer.write_key(artifact_ids["secret_key"], key_pair.secret_key)
        serializer.write_key(artifact_ids["public_key"], key_pair.public_key)
        serializer.write_evaluation_keys(artifact_ids["eval_keys"], context)

        logger.info(
            "Keys serialized to %s",
            ", ".join(serializer.store.location(artifact_ids[k])
                      for k in ("secret_key", "public_key", "eval_keys")))
