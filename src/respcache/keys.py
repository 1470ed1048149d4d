"""Cache key derivation and hashing.

Two steps turn a request into the string a backend stores under:

1. :func:`derive_key` builds a *logical* key from the request URL and, for
   body-bearing calls, the JSON-serialised payload with its top-level keys
   sorted.  Only the top level is canonicalised: ``{"a": {"y": 1, "x": 2}}``
   and ``{"a": {"x": 2, "y": 1}}`` produce different keys.
2. :func:`hash_key` maps the logical key to a fixed 8-character physical
   key with 32-bit FNV-1a.  The hash is not collision resistant; it only
   bounds key length for the backends.

:func:`resolve_cache_options` merges per-call :class:`CacheOptions` with the
process-wide :class:`DefaultCacheOptions` and produces the key the
orchestrator uses.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Optional

from respcache.models import CacheOptions, DefaultCacheOptions, ResolvedCacheOptions

logger = logging.getLogger(__name__)

_FNV_OFFSET_BASIS = 0x811C9DC5
_FNV_PRIME = 0x01000193
_MASK_32 = 0xFFFFFFFF


def hash_key(text: str) -> str:
    """Return the 32-bit FNV-1a hash of *text* as 8 lowercase hex digits.

    The hash runs over UTF-16 code units so that keys containing
    characters outside the Basic Multilingual Plane hash the same way as
    in JavaScript-based clients sharing a backend.

    Args:
        text: The logical cache key.

    Returns:
        A zero-padded 8-character hexadecimal string.
    """
    h = _FNV_OFFSET_BASIS
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * _FNV_PRIME) & _MASK_32
    return f"{h:08x}"


def derive_key(url: str, data: Any = None) -> str:
    """Build a logical cache key from *url* and an optional request payload.

    Args:
        url: The request URL (query string included, if any).
        data: The request body.  Falsy payloads are ignored.

    Returns:
        ``url`` alone, or ``url`` followed by the compact JSON form of
        *data*.  When *data* cannot be serialised (bytes, sets, circular
        references) the URL alone is returned.
    """
    if not data:
        return url
    if isinstance(data, Mapping):
        data = {k: data[k] for k in sorted(data, key=str)}
    try:
        serialized = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        logger.debug("Payload for %s is not serialisable (%s); keying on URL only", url, exc)
        return url
    return url + serialized


def resolve_cache_options(
    defaults: DefaultCacheOptions,
    url: str,
    data: Any = None,
    options: Optional[CacheOptions | Mapping[str, Any]] = None,
) -> ResolvedCacheOptions:
    """Merge per-call cache options with *defaults* and resolve the key.

    Args:
        defaults: Process-wide defaults.
        url: The request URL.
        data: Optional request payload, used for key derivation.
        options: Per-call overrides, as a :class:`CacheOptions` or a plain
            dict (camelCase or snake_case keys).

    Returns:
        The resolved ``key``, ``use_cache`` flag, and ``stale_time``.
    """
    if options is None:
        opts = CacheOptions()
    elif isinstance(options, CacheOptions):
        opts = options
    else:
        opts = CacheOptions.model_validate(options)

    return ResolvedCacheOptions(
        key=opts.key or derive_key(url, data),
        use_cache=opts.use_cache if opts.use_cache is not None else defaults.use_cache,
        stale_time=opts.stale_time if opts.stale_time is not None else defaults.stale_time,
    )
