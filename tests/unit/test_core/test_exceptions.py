"""Tests for core exceptions."""

from collective_service.core import exceptions as exc


def test_cache_error_defaults() -> None:
    error = exc.CacheError("boom")
    assert error.kind == "cache-error"
    assert error.operation is None
    assert error.key is None
    assert error.extra == {}
    assert str(error) == "boom"


def test_subclass_kinds() -> None:
    assert exc.ProviderConnectionError("x").kind == "provider-connection"
    assert exc.SerializationError("x").kind == "serialization"
    assert exc.ConfigurationError("x").kind == "configuration"


def test_all_errors_are_cache_errors() -> None:
    for cls in (exc.ProviderConnectionError, exc.SerializationError, exc.ConfigurationError):
        assert issubclass(cls, exc.CacheError)


def test_to_dict_merges_extra() -> None:
    error = exc.ProviderConnectionError(
        "Connection refused",
        operation="set",
        key="collective_id_with_slug_acme",
        extra={"provider": "redis"},
    )
    assert error.to_dict() == {
        "error": "Connection refused",
        "kind": "provider-connection",
        "operation": "set",
        "key": "collective_id_with_slug_acme",
        "provider": "redis",
    }
