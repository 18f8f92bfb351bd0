import os
import json
import hashlib
from typing import List
from dataclasses import MISSING, dataclass, field, fields, asdict

from hekeys.core.errors import InvalidParameters


# Keys accepted from the YAML config. OpenFHE setter names are used there
# (SetMultiplicativeDepth -> MultiplicativeDepth), the dataclass is snake_case.
_PARAM_ALIASES = {
    "multiplicativedepth": "multiplicative_depth",
    "plaintextmodulus": "plaintext_modulus",
    "maxrelinskdeg": "max_relin_sk_deg",
    "ringdim": "ring_dimension",
    "ringdimension": "ring_dimension",
    "batchsize": "batch_size",
}


@dataclass(frozen=True)
class BGVParameters:
    multiplicative_depth: int
    plaintext_modulus: int
    max_relin_sk_deg: int
    ring_dimension: int = 0
    batch_size: int = 0

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidParameters(
                    f"Invalid parameters: {f.name} must be an integer, "
                    f"got {type(value).__name__} ({value!r})."
                )

        if self.multiplicative_depth < 1:
            raise InvalidParameters(
                f"Invalid parameters: multiplicative depth must be positive, "
                f"got {self.multiplicative_depth}."
            )
        if self.plaintext_modulus < 2:
            raise InvalidParameters(
                f"Invalid parameters: plaintext modulus must be at least 2, "
                f"got {self.plaintext_modulus}."
            )
        # Relinearization keys start at s^2, anything lower leaves nothing
        # to relinearize with.
        if self.max_relin_sk_deg < 2:
            raise InvalidParameters(
                f"Invalid parameters: the maximum relinearization degree must "
                f"be at least 2, got {self.max_relin_sk_deg}."
            )
        if self.ring_dimension < 0 or self.batch_size < 0:
            raise InvalidParameters(
                "Invalid parameters: ring dimension and batch size cannot be "
                "negative (use 0 to let the library choose)."
            )

    @classmethod
    def from_dict(cls, params: dict):
        kwargs = {}
        for key, value in params.items():
            name = key.lower().replace("_", "")
            if name not in _PARAM_ALIASES:
                raise InvalidParameters(f"Unknown scheme parameter: {key}.")
            kwargs[_PARAM_ALIASES[name]] = value

        missing = [
            f.name for f in fields(cls)
            if f.default is MISSING and f.name not in kwargs
        ]
        if missing:
            raise InvalidParameters(
                f"Missing scheme parameters: {', '.join(missing)}.")
        return cls(**kwargs)

    def to_dict(self):
        return asdict(self)

    def fingerprint(self):
        canonical = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(canonical.encode()).hexdigest()

    def is_compatible(self, other):
        return isinstance(other, BGVParameters) and self.diff(other) == []

    def diff(self, other) -> List[str]:
        return [
            f.name for f in fields(self)
            if getattr(self, f.name) != getattr(other, f.name, None)
        ]

    def relin_degrees(self):
        return list(range(2, self.max_relin_sk_deg + 1))

    def __str__(self):
        output = [
            "BGV-RNS Parameters:",
            f"  Multiplicative depth: {self.multiplicative_depth}",
            f"  Plaintext modulus (t): {self.plaintext_modulus}",
            f"  Max relinearization degree: {self.max_relin_sk_deg}",
        ]
        if self.ring_dimension:
            output.append(f"  Ring dimension (N): {self.ring_dimension}")
        if self.batch_size:
            output.append(f"  Batch size: {self.batch_size}")
        output.append(f"  Fingerprint: {self.fingerprint()[:16]}")
        return "\n".join(output)


@dataclass
class CustodyParameters:
    backend: str = "openfhe"
    store: str = "directory"
    keys_path: str = "keys"
    secret_key: str = "secret_key.json"
    public_key: str = "public_key.json"
    eval_keys: str = "mult_key.json"
    params_artifact: str = "cryptocontext.yml"
    capabilities: List[str] = field(
        default_factory=lambda: ["PKE", "KEYSWITCH", "LEVELEDSHE"])
    debug: bool = False

    def __post_init__(self):
        valid_stores = {"directory", "h5"}
        if self.store.lower() not in valid_stores:
            raise InvalidParameters(
                f"Invalid store: {self.store}. Only 'directory' or 'h5' "
                f"artifact stores are supported."
            )

        ids = [self.secret_key, self.public_key, self.eval_keys]
        if self.params_artifact:
            ids.append(self.params_artifact)
        if any(not artifact_id for artifact_id in ids[:3]):
            raise InvalidParameters(
                "Artifact ids for the secret, public and evaluation keys "
                "cannot be empty.")
        if len(set(ids)) != len(ids):
            raise InvalidParameters(
                f"Artifact ids must be distinct, got {ids}.")

    def __str__(self):
        output = [
            "Custody Parameters:",
            f"  Backend: {self.backend}",
            f"  Store: {self.store} ({self.keys_path})",
            f"  Secret key artifact: {self.secret_key}",
            f"  Public key artifact: {self.public_key}",
            f"  Evaluation key artifact: {self.eval_keys}",
        ]
        if self.params_artifact:
            output.append(f"  Parameters artifact: {self.params_artifact}")
        output.append(f"  Capabilities: {', '.join(self.capabilities)}")
        output.append(f"  Debug Mode: {self.debug}")
        return "\n".join(output)


@dataclass
class NewParameters:
    params_json: dict
    bgv_params: BGVParameters = field(init=False)
    custody_params: CustodyParameters = field(init=False)

    def __post_init__(self):
        params = self.params_json
        if not isinstance(params, dict) or "bgv_params" not in params:
            raise InvalidParameters(
                "Configuration is missing the 'bgv_params' section.")

        custody_params = {
            k.lower(): v for k, v in (params.get("hekeys") or {}).items()}
        unknown = sorted(set(custody_params) - {f.name for f in fields(CustodyParameters)})
        if unknown:
            raise InvalidParameters(
                f"Unknown hekeys settings: {', '.join(unknown)}.")

        self.bgv_params = BGVParameters.from_dict(params["bgv_params"])
        self.custody_params = CustodyParameters(**custody_params)

    def __str__(self) -> str:
        border = "=" * 50
        return f"\n{border}\n{self.bgv_params}\n\n{self.custody_params}\n{border}\n"

    def new_descriptor(self):
        # A fresh, independently constructed descriptor from the same
        # literals. Consumers rebuild their context from this.
        return BGVParameters.from_dict(self.params_json["bgv_params"])

    def get_backend(self):
        return self.custody_params.backend.lower()

    def get_store(self):
        return self.custody_params.store.lower()

    def get_keys_path(self):
        path = self.custody_params.keys_path
        return os.path.abspath(os.path.join(os.getcwd(), path))

    def get_artifact_ids(self):
        return {
            "secret_key": self.custody_params.secret_key,
            "public_key": self.custody_params.public_key,
            "eval_keys": self.custody_params.eval_keys,
            "params": self.custody_params.params_artifact or None,
        }

    def get_capabilities(self):
        return [c.upper() for c in self.custody_params.capabilities]

    def get_debug_status(self):
        return self.custody_params.debug
