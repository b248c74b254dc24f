from typing import Generic, TypeVar

from msauth.errors import IllegalStateError


V = TypeVar("V")
E = TypeVar("E")

_VALUE = "value"
_DOMAIN_ERROR = "domain_error"
_TRANSPORT_FAILURE = "transport_failure"


class StageResult(Generic[V, E]):
    """
    Outcome of one chain stage: a value, a domain error (the service said no)
    or a transport failure (we never got a usable answer).
    """

    __slots__ = ("_kind", "_payload")

    def __init__(self, kind: str, payload):
        object.__setattr__(self, "_kind", kind)
        object.__setattr__(self, "_payload", payload)

    def __setattr__(self, name, value):
        raise AttributeError("StageResult is immutable")

    @classmethod
    def of_value(cls, value: V) -> "StageResult[V, E]":
        return cls(_VALUE, value)

    @classmethod
    def of_domain_error(cls, error: E) -> "StageResult[V, E]":
        return cls(_DOMAIN_ERROR, error)

    @classmethod
    def of_transport_failure(cls, cause: Exception) -> "StageResult[V, E]":
        return cls(_TRANSPORT_FAILURE, cause)

    @property
    def has_value(self) -> bool:
        return self._kind == _VALUE

    @property
    def has_domain_error(self) -> bool:
        return self._kind == _DOMAIN_ERROR

    @property
    def has_transport_failure(self) -> bool:
        return self._kind == _TRANSPORT_FAILURE

    def _get(self, kind: str):
        if self._kind != kind:
            raise IllegalStateError(f"StageResult holds {self._kind}, not {kind}")
        return self._payload

    @property
    def value(self) -> V:
        return self._get(_VALUE)

    @property
    def domain_error(self) -> E:
        return self._get(_DOMAIN_ERROR)

    @property
    def transport_failure(self) -> Exception:
        return self._get(_TRANSPORT_FAILURE)

    def __repr__(self):
        return f"StageResult({self._kind}={self._payload!r})"
