from hekeys.core.errors import MissingEvaluationKeys
from .encryptor import Ciphertext


class NewEvaluator:
    def __init__(self, scheme):
        self.scheme = scheme
        self.backend = scheme.backend

    def multiply(self, ciphertext1, ciphertext2):
        context = self.scheme.context
        # Multiplying two fresh ciphertexts yields a degree 2 result that has
        # to be relinearized with the s^2 key.
        if not context.evaluation_keys.covers(2):
            raise MissingEvaluationKeys(
                "Homomorphic multiplication needs the degree 2 evaluation key, "
                f"the context holds {context.evaluation_keys.degrees}. Load the "
                "evaluation key artifact first.")

        handle = self.backend.EvalMult(
            context.handle, ciphertext1.handle, ciphertext2.handle)
        return Ciphertext(
            self.scheme, handle, max(ciphertext1.length, ciphertext2.length))
