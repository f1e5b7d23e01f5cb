import json
import os
import sys
from typing import Any, Dict, List, Optional

import httpx
import pytest


def pytest_configure():
    # Ensure `src/` is importable as top-level for `jsonstore.*` and `todos.*` imports
    root = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    src_path = os.path.join(root, "src")
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


STORE_KEY = "abc123"


class InMemoryStore:
    """Store double speaking the {result, ok} envelope protocol over MockTransport."""

    def __init__(self, store_key: str = STORE_KEY) -> None:
        self.store_key = store_key
        self.data: Dict[str, Any] = {}
        self.requests: List[httpx.Request] = []

    def _segments(self, request: httpx.Request) -> List[str]:
        parts = [p for p in request.url.path.split("/") if p]
        assert parts and parts[0] == self.store_key, f"unexpected path {request.url.path}"
        return parts[1:]

    def _lookup(self, segments: List[str]) -> Optional[Any]:
        node: Any = self.data
        for seg in segments:
            if not isinstance(node, dict) or seg not in node:
                return None
            node = node[seg]
        return node

    def _assign(self, segments: List[str], value: Any) -> None:
        if not segments:
            self.data = value if isinstance(value, dict) else {}
            return
        node = self.data
        for seg in segments[:-1]:
            child = node.get(seg)
            if not isinstance(child, dict):
                child = {}
                node[seg] = child
            node = child
        node[segments[-1]] = value

    def _remove(self, segments: List[str]) -> None:
        parent = self._lookup(segments[:-1]) if segments else None
        if isinstance(parent, dict):
            parent.pop(segments[-1], None)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        segments = self._segments(request)
        if request.method == "GET":
            return httpx.Response(200, json={"result": self._lookup(segments), "ok": True})
        if request.method in ("POST", "PUT"):
            self._assign(segments, json.loads(request.content))
            return httpx.Response(200, json={"result": None, "ok": True})
        if request.method == "DELETE":
            self._remove(segments)
            return httpx.Response(200, json={"result": None, "ok": True})
        return httpx.Response(405)

    def http_client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler), timeout=5.0)


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()
