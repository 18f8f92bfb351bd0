import pytest

from hekeys.core.errors import InvalidParameters
from hekeys.backend.python.context import (
    Capability,
    DEFAULT_CAPABILITIES,
    EvaluationKeyCollection,
    build_context,
    parse_capabilities,
)
from hekeys.backend.python.parameters import BGVParameters


def test_build_context(backend):
    params = BGVParameters(3, 536903681, 3)
    context = build_context(params, backend=backend)

    assert context.params is params
    assert context.capabilities == DEFAULT_CAPABILITIES
    assert context.backend is backend
    assert context.evaluation_keys.is_empty
    assert not context.keys_generated


def test_extra_capabilities_are_kept(backend):
    caps = DEFAULT_CAPABILITIES | {Capability.ADVANCEDSHE}
    context = build_context(BGVParameters(2, 65537, 2), caps, backend=backend)
    assert context.supports(Capability.ADVANCEDSHE)


def test_missing_required_capability(backend):
    with pytest.raises(InvalidParameters, match="KEYSWITCH"):
        build_context(
            BGVParameters(2, 65537, 2),
            {Capability.PKE, Capability.LEVELEDSHE},
            backend=backend)


def test_backend_rejection_surfaces_as_invalid_parameters(backend):
    params = BGVParameters(backend.max_depth + 1, 65537, 2)
    with pytest.raises(InvalidParameters, match="rejected") as excinfo:
        build_context(params, backend=backend)
    assert "supported maximum" in str(excinfo.value.__cause__)


def test_parse_capabilities():
    assert parse_capabilities(["pke", "KEYSWITCH", "LeveledSHE"]) == DEFAULT_CAPABILITIES
    with pytest.raises(InvalidParameters, match="FHE"):
        parse_capabilities(["PKE", "FHE"])


def test_evaluation_key_collection():
    collection = EvaluationKeyCollection()
    assert collection.count == 0
    assert not collection.covers(2)

    collection.install([2, 3], "gen-a")
    assert len(collection) == 2
    assert 3 in collection
    assert collection.degrees == [2, 3]
    assert collection.generations == {"gen-a"}

    # Installing replaces by degree
    collection.install([3], "gen-b")
    assert collection.count == 2
    assert collection.generations == {"gen-a", "gen-b"}

    collection.clear()
    assert collection.is_empty
    collection.clear()
    assert collection.degrees == []
