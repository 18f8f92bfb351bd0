from hekeys.core.errors import InvalidParameters

SUPPORTED_BACKENDS = ("openfhe",)


def load_backend(name):
    # Imported lazily so that the package itself loads without the bindings.
    name = name.lower()
    if name == "openfhe":
        from hekeys.backend.openfhe import OpenFHEBackend
        return OpenFHEBackend()

    raise InvalidParameters(
        f"Invalid backend: {name}. Supported backends: {', '.join(SUPPORTED_BACKENDS)}.")
