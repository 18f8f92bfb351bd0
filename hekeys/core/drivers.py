"""
Entry points over the custody lifecycle. Each driver walks one path through
``KeyLifecycle``; none of them adds logic of its own.
"""
import logging

logger = logging.getLogger(__name__)


def compute_product(scheme, a, b):
    ctxt_a = scheme.encrypt(a)
    ctxt_b = scheme.encrypt(b)
    logger.info("Running EvalMult")
    return scheme.decrypt(scheme.multiply(ctxt_a, ctxt_b))


def run_direct(scheme, a, b):
    """Generate and compute in one context, nothing touches the store."""
    scheme.generate_keys()
    scheme.activate()
    return compute_product(scheme, a, b)


def run_custodian(scheme):
    """Generate, publish and purge. The artifacts are what remains."""
    scheme.generate_keys()
    scheme.publish_keys()
    scheme.purge_keys()
    return scheme.artifact_ids


def run_consumer(scheme, a, b):
    """Load published artifacts into this process' context and compute."""
    scheme.load_keys()
    scheme.activate()
    return compute_product(scheme, a, b)


def run_roundtrip(scheme, a, b):
    """The whole sequence inside one process: the custodian half, a cold
    start on a freshly built context, then the consumer half."""
    run_custodian(scheme)
    scheme.rebuild_context()
    return run_consumer(scheme, a, b)
