"""
End to end runs against the real OpenFHE bindings. Skipped when the
``openfhe`` package is not installed.
"""
import pytest

pytest.importorskip("openfhe")

from hekeys.core import drivers
from hekeys.core.errors import (
    ArtifactMissing,
    BackendError,
    IncompatibleParameters,
    LoadError,
)
from hekeys.core.lifecycle import KeyState
from hekeys.core.scheme import init_scheme

BGV_PARAMS = {
    "MultiplicativeDepth": 3,
    "PlaintextModulus": 536903681,
    "MaxRelinSkDeg": 3,
}


def config(keys_path, **custody):
    return {
        "bgv_params": dict(BGV_PARAMS),
        "hekeys": {"backend": "openfhe", "keys_path": str(keys_path), **custody},
    }


def test_direct(tmp_path):
    scheme = init_scheme(config(tmp_path / "keys"))
    result = drivers.run_direct(scheme, [1, 2, 3, 4], [10, 11, 12, 13])
    assert result.tolist() == [10, 22, 36, 52]


def test_roundtrip(tmp_path):
    scheme = init_scheme(config(tmp_path / "keys"))
    result = drivers.run_roundtrip(scheme, [5, 6, 7, 8], [2, 3, 4, 5])

    assert result.tolist() == [10, 18, 28, 40]
    assert scheme.state is KeyState.READY


def test_custodian_then_consumer(tmp_path):
    drivers.run_custodian(init_scheme(config(tmp_path / "keys")))

    consumer = init_scheme(config(tmp_path / "keys"))
    result = drivers.run_consumer(consumer, [5, 6, 7, 8], [2, 3, 4, 5])
    assert result.tolist() == [10, 18, 28, 40]


def test_missing_evaluation_keys(tmp_path):
    custodian = init_scheme(config(tmp_path / "keys"))
    drivers.run_custodian(custodian)
    (tmp_path / "keys" / "mult_key.json").unlink()

    consumer = init_scheme(config(tmp_path / "keys"))
    with pytest.raises(LoadError) as excinfo:
        drivers.run_consumer(consumer, [5, 6, 7, 8], [2, 3, 4, 5])

    assert isinstance(excinfo.value.cause, ArtifactMissing)
    assert consumer.state is KeyState.UNINITIALIZED


def test_smaller_relin_degree_is_incompatible(tmp_path):
    drivers.run_custodian(init_scheme(config(tmp_path / "keys", params_artifact="")))

    consumer_config = config(tmp_path / "keys", params_artifact="")
    consumer_config["bgv_params"]["MaxRelinSkDeg"] = 2
    consumer = init_scheme(consumer_config)

    with pytest.raises(LoadError) as excinfo:
        consumer.load_keys()
    assert isinstance(excinfo.value.cause, IncompatibleParameters)
    assert excinfo.value.cause.fields == ["max_relin_sk_deg"]
    assert consumer.context.evaluation_keys.is_empty


def test_h5_store(tmp_path):
    custody = dict(store="h5", secret_key="sk", public_key="pk",
                   eval_keys="evk", params_artifact="params")
    drivers.run_custodian(init_scheme(config(tmp_path / "keys.h5", **custody)))

    consumer = init_scheme(config(tmp_path / "keys.h5", **custody))
    result = drivers.run_consumer(consumer, [5, 6, 7, 8], [2, 3, 4, 5])
    assert result.tolist() == [10, 18, 28, 40]


def test_purged_library_refuses_to_multiply(tmp_path):
    """After a purge OpenFHE itself no longer holds the relinearization keys."""
    scheme = init_scheme(config(tmp_path / "keys"))
    scheme.generate_keys()
    ct = scheme.encryptor.encrypt(scheme.encoder.encode([1, 2, 3]))
    scheme.publish_keys()
    scheme.purge_keys()

    with pytest.raises(BackendError):
        scheme.backend.EvalMult(scheme.context.handle, ct.handle, ct.handle)
