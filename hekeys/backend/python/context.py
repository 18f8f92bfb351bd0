import enum
import logging
from dataclasses import dataclass

from hekeys.core.errors import BackendError, InvalidParameters

logger = logging.getLogger(__name__)


class Capability(enum.Enum):
    PKE = "PKE"
    KEYSWITCH = "KEYSWITCH"
    LEVELEDSHE = "LEVELEDSHE"
    ADVANCEDSHE = "ADVANCEDSHE"


DEFAULT_CAPABILITIES = frozenset(
    {Capability.PKE, Capability.KEYSWITCH, Capability.LEVELEDSHE})


@dataclass(frozen=True)
class EvaluationKeyEntry:
    degree: int
    generation: str


class EvaluationKeyCollection:
    """
    The relinearization keys a context currently holds, addressed by the
    power of the secret key they relinearize (s^2, s^3, ...). The key
    material itself lives inside the cryptographic library; this collection
    mirrors what was installed so that the custody lifecycle can check it.
    """
    def __init__(self):
        self._entries = {}

    def install(self, degrees, generation):
        for degree in degrees:
            self._entries[degree] = EvaluationKeyEntry(degree, generation)

    def clear(self):
        self._entries.clear()

    def covers(self, degree):
        return degree in self._entries

    @property
    def count(self):
        return len(self._entries)

    @property
    def degrees(self):
        return sorted(self._entries)

    @property
    def generations(self):
        return {entry.generation for entry in self._entries.values()}

    @property
    def is_empty(self):
        return not self._entries

    def __len__(self):
        return self.count

    def __contains__(self, degree):
        return self.covers(degree)

    def __repr__(self):
        return f"EvaluationKeyCollection(degrees={self.degrees})"


class Context:
    def __init__(self, params, capabilities, handle, backend):
        self.params = params
        self.capabilities = frozenset(capabilities)
        self.handle = handle
        self.backend = backend
        self.evaluation_keys = EvaluationKeyCollection()
        self.keys_generated = False

    def supports(self, capability):
        return capability in self.capabilities

    def __repr__(self):
        caps = ", ".join(sorted(c.value for c in self.capabilities))
        return (
            f"Context(fingerprint={self.params.fingerprint()[:16]}, "
            f"capabilities=[{caps}], evaluation_keys={self.evaluation_keys.degrees})"
        )


def parse_capabilities(names):
    capabilities = set()
    for name in names:
        try:
            capabilities.add(Capability(name.upper()))
        except ValueError:
            raise InvalidParameters(
                f"Unknown capability: {name}. Expected one of "
                f"{[c.value for c in Capability]}."
            ) from None
    return frozenset(capabilities)


def build_context(params, capabilities=DEFAULT_CAPABILITIES, backend=None):
    if backend is None:
        from hekeys.backend import load_backend
        backend = load_backend("openfhe")

    capabilities = frozenset(capabilities)
    missing = DEFAULT_CAPABILITIES - capabilities
    if missing:
        raise InvalidParameters(
            f"Contexts must enable {sorted(c.value for c in DEFAULT_CAPABILITIES)}, "
            f"missing {sorted(c.value for c in missing)}."
        )

    try:
        handle = backend.GenCryptoContext(params, capabilities)
    except BackendError as e:
        raise InvalidParameters(
            f"The {backend.name} backend rejected the scheme parameters: {e}\n"
            f"{params}"
        ) from e

    logger.debug("Built %s context %s", backend.name, params.fingerprint()[:16])
    return Context(params, capabilities, handle, backend)
