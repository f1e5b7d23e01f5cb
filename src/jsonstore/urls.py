from __future__ import annotations

import posixpath

import httpx


def build_url(base_url: str, key: str = "") -> str:
    """Join `key` onto the path of `base_url`.

    Scheme, host and port are kept. Empty segments collapse, so neither doubled
    nor missing separators can appear, and `.`/`..` resolve like a POSIX path
    join. An empty key yields the base URL itself.
    """
    key_segments = [s for s in (key or "").split("/") if s]
    if not key_segments:
        return base_url
    base = httpx.URL(base_url)
    segments = [s for s in base.path.split("/") if s] + key_segments
    path = posixpath.normpath("/" + "/".join(segments))
    return str(base.copy_with(path=path))
