import json
import uuid
import random

import pytest

from hekeys.core.errors import BackendError
from hekeys.backend.python.artifacts import DirectoryStore


class FakeContextHandle:
    def __init__(self, params):
        self.params = params


class FakeKey:
    def __init__(self, kind, tag, secret, fingerprint):
        self.kind = kind
        self.tag = tag
        self.secret = secret
        self.fingerprint = fingerprint


class FakeCiphertext:
    def __init__(self, values, tag):
        self.values = values
        self.tag = tag


class FakeBackend:
    """
    Stands in for the cryptographic library. Like OpenFHE it keeps evaluation
    keys in a store shared by every context it built, refuses to multiply
    without a matching key and decrypts to garbage under the wrong key.
    """
    name = "fake"
    max_depth = 20

    def __init__(self):
        self.eval_keys = {}
        self.fail_keygen = False
        self.fail_eval_keygen = False
        self.calls = []

    def GenCryptoContext(self, params, capabilities):
        self.calls.append("GenCryptoContext")
        if params.multiplicative_depth > self.max_depth:
            raise BackendError("multiplicative depth exceeds the supported maximum")
        return FakeContextHandle(params)

    def KeyGen(self, cc):
        self.calls.append("KeyGen")
        if self.fail_keygen:
            raise BackendError("out of memory")
        tag = uuid.uuid4().hex
        secret = random.randrange(1, cc.params.plaintext_modulus)
        fingerprint = cc.params.fingerprint()
        return (FakeKey("public", tag, secret, fingerprint),
                FakeKey("secret", tag, secret, fingerprint))

    def EvalMultKeysGen(self, cc, secret_key):
        self.calls.append("EvalMultKeysGen")
        if self.fail_eval_keygen:
            raise BackendError("out of memory")
        self.eval_keys[secret_key.tag] = {
            "fingerprint": cc.params.fingerprint(),
            "degrees": list(range(2, cc.params.max_relin_sk_deg + 1)),
        }

    def ClearEvalMultKeys(self, cc):
        self.calls.append("ClearEvalMultKeys")
        self.eval_keys.clear()

    def SerializeKey(self, key):
        return json.dumps({
            "kind": key.kind, "tag": key.tag, "secret": key.secret,
            "fingerprint": key.fingerprint})

    def DeserializeKey(self, payload, kind):
        try:
            data = json.loads(payload)
        except ValueError as e:
            raise BackendError(str(e)) from e
        if data.get("kind") != {"secret_key": "secret", "public_key": "public"}[kind]:
            raise BackendError(f"payload is not a {kind}")
        return FakeKey(data["kind"], data["tag"], data["secret"], data["fingerprint"])

    def SerializeEvalMultKeys(self, cc):
        if not self.eval_keys:
            raise BackendError("no evaluation keys to serialize")
        return json.dumps(self.eval_keys)

    def DeserializeEvalMultKeys(self, cc, payload):
        try:
            self.eval_keys.update(json.loads(payload))
        except ValueError as e:
            raise BackendError(str(e)) from e

    def MakePackedPlaintext(self, cc, values):
        return list(values)

    def Encrypt(self, cc, public_key, plaintext):
        return FakeCiphertext(list(plaintext), public_key.tag)

    def EvalMult(self, cc, ciphertext1, ciphertext2):
        self.calls.append("EvalMult")
        key = self.eval_keys.get(ciphertext1.tag)
        if key is None or key["fingerprint"] != cc.params.fingerprint():
            raise BackendError("EvalMultKey not found for this context")
        t = cc.params.plaintext_modulus
        values = [(x * y) % t for x, y in zip(ciphertext1.values, ciphertext2.values)]
        return FakeCiphertext(values, ciphertext1.tag)

    def Decrypt(self, cc, secret_key, ciphertext, length):
        t = cc.params.plaintext_modulus
        if secret_key.tag != ciphertext.tag:
            return [(v + secret_key.secret) % t for v in ciphertext.values[:length]]
        return ciphertext.values[:length]


BGV_PARAMS = {
    "MultiplicativeDepth": 3,
    "PlaintextModulus": 536903681,
    "MaxRelinSkDeg": 3,
}


def make_config(keys_path, **custody):
    return {
        "bgv_params": dict(BGV_PARAMS),
        "hekeys": {"backend": "fake", "keys_path": str(keys_path), **custody},
    }


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def store(tmp_path):
    return DirectoryStore(tmp_path / "keys")


@pytest.fixture
def config(tmp_path):
    return make_config(tmp_path / "keys")
