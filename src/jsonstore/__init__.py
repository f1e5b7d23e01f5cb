"""
Client for a path-addressed JSON document store (jsonstore.io style).

Modules:
- client: JsonStoreClient and the error taxonomy
- config: ClientConfig and environment loading
- models: Envelope wire model
- urls: key path to URL mapping
"""

from .client import (
    StoreClient,
    DeserializationError,
    JsonStoreClient,
    JsonStoreError,
    MalformedEnvelope,
    NoValueForKey,
    SerializationError,
    StoreReadRejected,
    StoreRequestFailed,
    StoreWriteRejected,
    TransportError,
)
from .config import ClientConfig
from .models import Envelope
from .urls import build_url

__all__ = [
    "ClientConfig",
    "DeserializationError",
    "Envelope",
    "JsonStoreClient",
    "JsonStoreError",
    "MalformedEnvelope",
    "NoValueForKey",
    "SerializationError",
    "StoreClient",
    "StoreReadRejected",
    "StoreRequestFailed",
    "StoreWriteRejected",
    "TransportError",
    "build_url",
]
