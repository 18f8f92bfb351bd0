from .bindings import OpenFHEBackend
