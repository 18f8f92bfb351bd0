from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class SecretKey:
    handle: Any
    generation: Optional[str] = None
    kind = "secret_key"


@dataclass
class PublicKey:
    handle: Any
    generation: Optional[str] = None
    kind = "public_key"


@dataclass
class KeyPair:
    """A secret/public key pair. The two are paired by the generation that
    produced them and nothing else; see ``KeyPair.generation``."""
    secret_key: SecretKey
    public_key: PublicKey

    @property
    def generation(self):
        if self.secret_key.generation == self.public_key.generation:
            return self.secret_key.generation
        return None


KEY_TYPES = {
    SecretKey.kind: SecretKey,
    PublicKey.kind: PublicKey,
}
