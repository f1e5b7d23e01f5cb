from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Optional

from .urls import build_url


DEFAULT_BASE_URL = "https://www.jsonstore.io"
DEFAULT_TIMEOUT = 5.0

# Environment variable names for convenience configuration
ENV_TOKEN = "JSONSTORE_TOKEN"
ENV_URL = "JSONSTORE_URL"
ENV_TIMEOUT = "JSONSTORE_TIMEOUT"


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.environ.get(name)
    return val if val not in (None, "") else default


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable connection settings for one store.

    Fields
    - store_key: opaque store identifier; it is the first path segment of every
      request and doubles as the access credential.
    - base_url: scheme and host of the store service.
    - timeout: per-request bound in seconds (connect, read, write and pool).
    """

    store_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.store_key or not self.store_key.strip("/"):
            raise ValueError("store_key is required")
        if self.timeout is None or not math.isfinite(self.timeout) or self.timeout <= 0:
            raise ValueError("timeout must be a finite number > 0")

    @property
    def store_url(self) -> str:
        return build_url(self.base_url, self.store_key)

    @classmethod
    def from_env(cls) -> "ClientConfig":
        token = _getenv(ENV_TOKEN)
        if not token:
            raise RuntimeError(f"Missing required environment variable: {ENV_TOKEN}")
        base_url = _getenv(ENV_URL, DEFAULT_BASE_URL)
        raw_timeout = _getenv(ENV_TIMEOUT)
        timeout = DEFAULT_TIMEOUT
        if raw_timeout is not None:
            try:
                timeout = float(raw_timeout)
            except ValueError as ex:
                raise ValueError(f"{ENV_TIMEOUT} must be a number, got {raw_timeout!r}") from ex
        return cls(store_key=token, base_url=base_url, timeout=timeout)
