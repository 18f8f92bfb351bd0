import numpy as np

from hekeys.core.errors import LifecycleError


class Ciphertext:
    def __init__(self, scheme, handle, length):
        self.scheme = scheme
        self.handle = handle
        self.length = length

    def __mul__(self, other):
        return self.scheme.evaluator.multiply(self, other)

    def decrypt(self):
        return self.scheme.encryptor.decrypt(self)


class NewEncryptor:
    def __init__(self, scheme):
        self.scheme = scheme
        self.backend = scheme.backend

    def _key_pair(self):
        key_pair = self.scheme.key_pair
        if key_pair is None:
            raise LifecycleError(
                "No keys are available. Generate or load a key set first.")
        return key_pair

    def encrypt(self, plaintext):
        public_key = self._key_pair().public_key
        handle = self.backend.Encrypt(
            self.scheme.context.handle, public_key.handle, plaintext.handle)
        return Ciphertext(self.scheme, handle, plaintext.length)

    def decrypt(self, ciphertext):
        secret_key = self._key_pair().secret_key
        values = self.backend.Decrypt(
            self.scheme.context.handle, secret_key.handle, ciphertext.handle,
            ciphertext.length)
        return np.array(values, dtype=np.int64)
