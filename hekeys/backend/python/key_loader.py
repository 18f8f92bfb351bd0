import logging

from hekeys.core.errors import HEKeysError, LoadError
from .keys import KeyPair

logger = logging.getLogger(__name__)


class NewKeyLoader:
    def __init__(self, serializer):
        self.serializer = serializer
        self.backend = serializer.backend

    def load(self, context, secret_id, public_id, eval_id):
        """Reads the secret key, the public key and then the evaluation keys
        into ``context``. Any failure raises LoadError naming the artifact,
        and leaves the context without evaluation keys."""
        logger.info("Loading keys from %s", self.serializer.store)

        stage, artifact_id = "secret key", secret_id
        try:
            secret_key = self.serializer.read_secret_key(secret_id)

            stage, artifact_id = "public key", public_id
            public_key = self.serializer.read_public_key(public_id)

            stage, artifact_id = "evaluation keys", eval_id
            eval_generation = self.serializer.read_evaluation_keys(eval_id, context)
        except HEKeysError as e:
            self._discard(context)
            raise LoadError(artifact_id, stage, e) from e

        generations = {secret_key.generation, public_key.generation, eval_generation}
        if len(generations) > 1:
            # The artifacts are only paired by the generation that produced
            # them. A mismatch usually means a stale file, and shows up later
            # as wrong plaintexts rather than as an error.
            logger.warning(
                "Loaded keys come from different generations (secret=%s, "
                "public=%s, evaluation=%s)",
                secret_key.generation, public_key.generation, eval_generation)

        logger.info(
            "Keys loaded successfully (evaluation key degrees %s)",
            context.evaluation_keys.degrees)
        return KeyPair(secret_key, public_key)

    def _discard(self, context):
        self.backend.ClearEvalMultKeys(context.handle)
        context.evaluation_keys.clear()
