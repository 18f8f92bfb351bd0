from .errors import *
from .lifecycle import KeyLifecycle, KeyState
from .scheme import Scheme, init_scheme, load_config
