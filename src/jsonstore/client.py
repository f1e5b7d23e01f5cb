from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional, Protocol, Tuple, Type, TypeVar, runtime_checkable

import httpx
from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json, to_jsonable_python

from .config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, ClientConfig
from .models import Envelope
from .urls import build_url


logger = logging.getLogger(__name__)

T = TypeVar("T")

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class JsonStoreError(RuntimeError):
    """Base error for the JSON store client."""


class TransportError(JsonStoreError):
    """The request never produced a response (DNS, connection, timeout)."""

    def __init__(self, message: str, *, timeout: bool = False) -> None:
        super().__init__(message)
        self.timeout = timeout


class StoreRequestFailed(JsonStoreError):
    """The store answered with a failure HTTP status."""

    def __init__(self, status: int, url: str) -> None:
        super().__init__(f"Non OK status {status} from store for {url}")
        self.status = status
        self.url = url


class MalformedEnvelope(JsonStoreError):
    """Response body does not match the {result, ok} envelope."""


class _KeyedError(JsonStoreError):
    def __init__(self, message: str, key: str) -> None:
        super().__init__(message)
        self.key = key


class NoValueForKey(_KeyedError):
    """The store holds no value at the key (null result in an ok envelope)."""

    def __init__(self, key: str) -> None:
        super().__init__(f"No value for key '{key}'", key)


class StoreWriteRejected(_KeyedError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Failed to store resource at '{key}'", key)


class StoreReadRejected(_KeyedError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Could not get resource '{key}'", key)


class SerializationError(_KeyedError):
    def __init__(self, key: str, detail: str) -> None:
        super().__init__(f"Failed to serialize value for '{key}': {detail}", key)


class DeserializationError(_KeyedError):
    def __init__(self, key: str, detail: str) -> None:
        super().__init__(f"Failed to deserialize value at '{key}': {detail}", key)


@runtime_checkable
class StoreClient(Protocol):
    """Operations a store consumer depends on; `JsonStoreClient` is the HTTP implementation."""

    def get(self, key: str, type_: Any = ...) -> Any: ...

    def get_bytes(self, key: str) -> bytes: ...

    def post(self, key: str, value: Any) -> None: ...

    def post_bytes(self, key: str, data: bytes) -> None: ...

    def put(self, key: str, value: Any) -> None: ...

    def put_bytes(self, key: str, data: bytes) -> None: ...

    def delete(self, key: str) -> None: ...


class JsonStoreClient:
    """
    Client for a path-addressed JSON document store.

    Notes
    - Every response is wrapped as {"result": ..., "ok": bool}. A null result in
      an ok envelope is how the store says a key is absent; reads surface it as
      `NoValueForKey` so callers can branch on it (e.g. to seed defaults).
    - No retries and no local recovery: each failure is raised as a typed
      `JsonStoreError` subclass.
    - Safe to share between threads; the only shared state is the httpx pool.
    - `timeout` bounds the whole exchange, body included, not just each read.
    - `post` and `put` behave the same against the reference store, which does
      not enforce create-if-absent.
    """

    def __init__(
        self,
        store_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._config = ClientConfig(store_key=store_key, base_url=base_url, timeout=timeout)
        self._base_url = self._config.store_url
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, headers=JSON_HEADERS)

    @classmethod
    def from_config(cls, config: ClientConfig, *, client: Optional[httpx.Client] = None) -> "JsonStoreClient":
        return cls(config.store_key, base_url=config.base_url, timeout=config.timeout, client=client)

    @classmethod
    def from_env(cls, *, client: Optional[httpx.Client] = None) -> "JsonStoreClient":
        return cls.from_config(ClientConfig.from_env(), client=client)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "JsonStoreClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --------------- Public API ---------------
    def get(self, key: str, type_: Type[T] = Any) -> T:  # type: ignore[assignment]
        """
        Fetch the value at `key` and validate it into `type_`.

        Raises NoValueForKey when the store has nothing there, StoreReadRejected
        on `ok: false`, and DeserializationError if the value does not fit `type_`.
        """
        envelope = self._decode_envelope(self.get_bytes(key))
        if not envelope.has_value:
            logger.debug("jsonstore: no value for %s", key)
            raise NoValueForKey(key)
        if not envelope.ok:
            logger.debug("jsonstore: read of %s rejected", key)
            raise StoreReadRejected(key)
        # Re-encode the untyped result and decode it strictly: "5" is not an int
        raw = to_json(envelope.result)
        try:
            return TypeAdapter(type_).validate_json(raw, strict=True)
        except ValidationError as ve:
            raise DeserializationError(key, str(ve)) from ve

    def get_bytes(self, key: str) -> bytes:
        """Return the raw response body (the undecoded envelope) for `key`."""
        resp, body = self._send("GET", key)
        if resp.status_code != httpx.codes.OK:
            raise StoreRequestFailed(resp.status_code, str(resp.request.url))
        return body

    def post(self, key: str, value: Any) -> None:
        self.post_bytes(key, self._serialize(key, value))

    def post_bytes(self, key: str, data: bytes) -> None:
        self._write("POST", key, data)

    def put(self, key: str, value: Any) -> None:
        self.put_bytes(key, self._serialize(key, value))

    def put_bytes(self, key: str, data: bytes) -> None:
        self._write("PUT", key, data)

    def delete(self, key: str) -> None:
        """
        Remove the value at `key`.

        The store's envelope does not tell "deleted" from "was already absent";
        an acknowledged delete of a missing key therefore succeeds.

        Keys that do not resolve below the store root ("", "/", "todos/..", "..")
        are refused with ValueError before any request is sent.
        """
        if not self._url(key).startswith(self._base_url.rstrip("/") + "/"):
            raise ValueError(f"Refusing to delete the store root (key {key!r})")
        self._write("DELETE", key, None)

    # --------------- Internal ---------------
    def _url(self, key: str) -> str:
        return build_url(self._base_url, key)

    def _send(self, method: str, key: str, data: Optional[bytes] = None) -> Tuple[httpx.Response, bytes]:
        """Perform one exchange and return the response with its fully read body.

        httpx timeouts apply per network operation, so the body is streamed
        against a single deadline covering the whole exchange.
        """
        url = self._url(key)
        timeout = self._config.timeout
        logger.debug("jsonstore: %s %s", method, key)
        deadline = time.monotonic() + timeout
        request = self._client.build_request(
            method,
            url,
            content=data,
            headers=JSON_HEADERS,
            timeout=timeout,
        )
        try:
            resp = self._client.send(request, stream=True)
            try:
                chunks = []
                if time.monotonic() > deadline:
                    raise httpx.ReadTimeout("deadline exceeded before body", request=request)
                for chunk in resp.iter_bytes():
                    chunks.append(chunk)
                    if time.monotonic() > deadline:
                        raise httpx.ReadTimeout("deadline exceeded while reading body", request=request)
            finally:
                resp.close()
            return resp, b"".join(chunks)
        except httpx.TimeoutException as exc:
            logger.debug("jsonstore: %s %s timed out", method, key)
            raise TransportError(
                f"{method} {url} timed out after {self._config.timeout}s", timeout=True
            ) from exc
        except httpx.RequestError as exc:
            logger.debug("jsonstore: %s %s transport failure: %s", method, key, exc)
            raise TransportError(f"{method} {url} failed: {exc}") from exc

    def _write(self, method: str, key: str, data: Optional[bytes]) -> None:
        resp, body = self._send(method, key, data)
        if resp.status_code >= 400:
            raise StoreRequestFailed(resp.status_code, str(resp.request.url))
        envelope = self._decode_envelope(body)
        if not envelope.ok:
            logger.debug("jsonstore: %s %s rejected", method, key)
            raise StoreWriteRejected(key)

    @staticmethod
    def _decode_envelope(body: bytes) -> Envelope:
        try:
            return Envelope.model_validate_json(body)
        except ValidationError as ve:
            raise MalformedEnvelope(f"Invalid store response envelope: {ve}") from ve

    @staticmethod
    def _serialize(key: str, value: Any) -> bytes:
        # Deterministic compact JSON; NaN and Infinity are not JSON
        try:
            payload = json.dumps(to_jsonable_python(value), separators=(",", ":"), allow_nan=False)
        except (PydanticSerializationError, ValueError, TypeError) as exc:
            raise SerializationError(key, str(exc)) from exc
        return payload.encode("utf-8")


__all__ = [
    "JsonStoreClient",
    "StoreClient",
    "JsonStoreError",
    "TransportError",
    "StoreRequestFailed",
    "MalformedEnvelope",
    "NoValueForKey",
    "StoreWriteRejected",
    "StoreReadRejected",
    "SerializationError",
    "DeserializationError",
]
