import numpy as np


class PackedPlaintext:
    def __init__(self, handle, length):
        self.handle = handle
        self.length = length

    def __len__(self):
        return self.length


class NewEncoder:
    def __init__(self, scheme):
        self.scheme = scheme
        self.backend = scheme.backend

    def encode(self, values):
        if isinstance(values, list):
            values = np.array(values, dtype=np.int64)
        elif not isinstance(values, np.ndarray):
            raise TypeError(
                f"Expected 'values' passed to encode() to be either a list "
                f"or a numpy.ndarray, but got {type(values)}.")

        if values.ndim != 1 or not np.issubdtype(values.dtype, np.integer):
            raise TypeError(
                f"Packed BGV plaintexts hold a flat vector of integers, got "
                f"shape {values.shape} and dtype {values.dtype}.")

        context = self.scheme.context
        handle = self.backend.MakePackedPlaintext(context.handle, values.tolist())
        return PackedPlaintext(handle, len(values))
