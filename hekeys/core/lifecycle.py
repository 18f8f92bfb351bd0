import enum
import logging

from .errors import LifecycleError

logger = logging.getLogger(__name__)


class KeyState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    GENERATED = "generated"
    SERIALIZED = "serialized"
    PURGED = "purged"
    LOADED = "loaded"
    READY = "ready"


# operation -> {from_state: to_state}
TRANSITIONS = {
    "generate": {KeyState.UNINITIALIZED: KeyState.GENERATED},
    "publish": {KeyState.GENERATED: KeyState.SERIALIZED},
    "purge": {KeyState.SERIALIZED: KeyState.PURGED},
    "load": {
        KeyState.UNINITIALIZED: KeyState.LOADED,
        KeyState.PURGED: KeyState.LOADED,
    },
    "activate": {
        KeyState.GENERATED: KeyState.READY,
        KeyState.SERIALIZED: KeyState.READY,
        KeyState.LOADED: KeyState.READY,
    },
}


class KeyLifecycle:
    """
    Tracks where a process is in the custody sequence

        UNINITIALIZED -> GENERATED -> SERIALIZED -> PURGED -> LOADED -> READY

    plus the shortcuts a consumer-only process (UNINITIALIZED -> LOADED) or a
    custodian that keeps computing (GENERATED/SERIALIZED -> READY) takes.
    Use ``step`` around each operation: the state only advances when the
    operation returns without raising.
    """
    def __init__(self):
        self.state = KeyState.UNINITIALIZED
        self.history = [self.state]

    def allows(self, operation):
        return self.state in TRANSITIONS[operation]

    def check(self, operation):
        if not self.allows(operation):
            allowed = ", ".join(s.name for s in TRANSITIONS[operation])
            raise LifecycleError(
                f"Cannot {operation} keys in state {self.state.name} "
                f"(allowed from: {allowed}).")

    def advance(self, operation):
        self.check(operation)
        previous = self.state
        self.state = TRANSITIONS[operation][previous]
        self.history.append(self.state)
        logger.debug("%s: %s -> %s", operation, previous.name, self.state.name)
        return self.state

    def step(self, operation, func, *args, **kwargs):
        self.check(operation)
        result = func(*args, **kwargs)
        self.advance(operation)
        return result

    @property
    def ready(self):
        return self.state is KeyState.READY

    def __repr__(self):
        return f"KeyLifecycle(state={self.state.name})"
