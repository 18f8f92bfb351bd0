import logging

from hekeys.core import *
from hekeys.backend.python.parameters import BGVParameters
from hekeys.backend.python.context import (
    Capability,
    Context,
    DEFAULT_CAPABILITIES,
    build_context,
)
from hekeys.backend.python.keys import KeyPair, PublicKey, SecretKey

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
