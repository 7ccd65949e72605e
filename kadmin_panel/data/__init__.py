"""Data access layer for the kadmin backend API."""

from .clients import BackendEndpoint, BackendError, BackendErrorKind, CatalogBackend, ConsumerBackend
from .models import ConsumerInfo, DeserializerInfo, MessagePage, MessageRecord, ReadResult
from .kadmin_client import KadminClient

__all__ = [
    "BackendEndpoint",
    "BackendError",
    "BackendErrorKind",
    "CatalogBackend",
    "ConsumerBackend",
    "ConsumerInfo",
    "DeserializerInfo",
    "KadminClient",
    "MessagePage",
    "MessageRecord",
    "ReadResult",
]
