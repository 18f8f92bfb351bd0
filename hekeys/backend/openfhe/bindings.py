import os
import logging
import tempfile
import contextlib

from openfhe import (
    CCParamsBGVRNS,
    GenCryptoContext,
    PKESchemeFeature,
    JSON,
    SerializeToFile,
    DeserializePrivateKey,
    DeserializePublicKey,
)

from hekeys.core.errors import BackendError

logger = logging.getLogger(__name__)

_FEATURES = {
    "PKE": PKESchemeFeature.PKE,
    "KEYSWITCH": PKESchemeFeature.KEYSWITCH,
    "LEVELEDSHE": PKESchemeFeature.LEVELEDSHE,
    "ADVANCEDSHE": PKESchemeFeature.ADVANCEDSHE,
}


@contextlib.contextmanager
def _scratch_file(name, payload=None):
    # The bindings only (de)serialize through file paths, so payloads make a
    # round trip through a private temporary directory.
    with tempfile.TemporaryDirectory(prefix="hekeys-") as tmp:
        path = os.path.join(tmp, name)
        if payload is not None:
            with open(path, "w") as f:
                f.write(payload)
        yield path


def _read_text(path):
    with open(path) as f:
        return f.read()


class OpenFHEBackend:
    """
    BGV-RNS through the OpenFHE python bindings. Method names follow the
    OpenFHE API they wrap. Library failures (exceptions or False return
    codes) are raised as BackendError.
    """
    name = "openfhe"

    def GenCryptoContext(self, params, capabilities):
        parameters = CCParamsBGVRNS()
        parameters.SetMultiplicativeDepth(params.multiplicative_depth)
        parameters.SetPlaintextModulus(params.plaintext_modulus)
        parameters.SetMaxRelinSkDeg(params.max_relin_sk_deg)
        if params.ring_dimension:
            parameters.SetRingDim(params.ring_dimension)
        if params.batch_size:
            parameters.SetBatchSize(params.batch_size)

        try:
            cc = GenCryptoContext(parameters)
            for capability in sorted(c.value for c in capabilities):
                cc.Enable(_FEATURES[capability])
        except RuntimeError as e:
            raise BackendError(str(e)) from e
        return cc

    def KeyGen(self, cc):
        try:
            key_pair = cc.KeyGen()
        except RuntimeError as e:
            raise BackendError(str(e)) from e
        return key_pair.publicKey, key_pair.secretKey

    def EvalMultKeysGen(self, cc, secret_key):
        try:
            cc.EvalMultKeysGen(secret_key)
        except RuntimeError as e:
            raise BackendError(str(e)) from e

    def ClearEvalMultKeys(self, cc):
        cc.ClearEvalMultKeys()

    def SerializeKey(self, key):
        with _scratch_file("key.json") as path:
            if not SerializeToFile(path, key, JSON):
                raise BackendError("OpenFHE could not serialize the key")
            return _read_text(path)

    def DeserializeKey(self, payload, kind):
        deserialize = {
            "secret_key": DeserializePrivateKey,
            "public_key": DeserializePublicKey,
        }[kind]

        with _scratch_file("key.json", payload) as path:
            try:
                key, ok = deserialize(path, JSON)
            except RuntimeError as e:
                raise BackendError(str(e)) from e
        if not ok:
            raise BackendError(f"OpenFHE could not deserialize the {kind}")
        return key

    def SerializeEvalMultKeys(self, cc):
        with _scratch_file("mult_key.json") as path:
            if not cc.SerializeEvalMultKey(path, JSON):
                raise BackendError(
                    "OpenFHE could not serialize the evaluation keys")
            return _read_text(path)

    def DeserializeEvalMultKeys(self, cc, payload):
        with _scratch_file("mult_key.json", payload) as path:
            try:
                ok = cc.DeserializeEvalMultKey(path, JSON)
            except RuntimeError as e:
                raise BackendError(str(e)) from e
        if not ok:
            raise BackendError(
                "OpenFHE could not deserialize the evaluation keys")

    def MakePackedPlaintext(self, cc, values):
        return cc.MakePackedPlaintext([int(v) for v in values])

    def Encrypt(self, cc, public_key, plaintext):
        try:
            return cc.Encrypt(public_key, plaintext)
        except RuntimeError as e:
            raise BackendError(str(e)) from e

    def EvalMult(self, cc, ciphertext1, ciphertext2):
        try:
            return cc.EvalMult(ciphertext1, ciphertext2)
        except RuntimeError as e:
            raise BackendError(str(e)) from e

    def Decrypt(self, cc, secret_key, ciphertext, length):
        try:
            plaintext = cc.Decrypt(ciphertext, secret_key)
        except RuntimeError as e:
            raise BackendError(str(e)) from e
        plaintext.SetLength(length)
        return list(plaintext.GetPackedValue())
