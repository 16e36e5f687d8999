"""Cache key builders.

Keys are derived from an operation name and its parameters. Parameters are
serialized as canonical JSON (sorted keys, compact separators, ``None``
values dropped) and hashed with SHA-256. The key keeps the first 32 hex
characters of the digest, i.e. 128 bits, so distinct parameter sets only
collide with negligible probability while key length stays bounded.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping, Sequence
from typing import Any

DIGEST_HEX_CHARS = 32

HEALTH_KEY = "health_check"
SCHEMAS_KEY = "schemas_list"


def _canonical(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _canonical(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    return value


def fingerprint(params: Mapping[str, Any]) -> str:
    """Return the truncated SHA-256 hex digest of ``params``."""
    payload = json.dumps(
        _canonical(params),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:DIGEST_HEX_CHARS]


def build_key(operation: str, params: Mapping[str, Any] | None = None) -> str:
    """Build a key for ``operation`` called with ``params``.

    Field order in ``params`` never affects the result.
    """
    if not params:
        return operation
    return f"{operation}:{fingerprint(params)}"


def health_key() -> str:
    return HEALTH_KEY


def schemas_key() -> str:
    return SCHEMAS_KEY


def schema_key(table_code: str) -> str:
    return build_key("schema", {"table_code": table_code})


def query_key(
    query: str,
    table_codes: Sequence[str] | None = None,
    model_choice: str | None = None,
) -> str:
    """Key for a query conversion; table code order is significant."""
    return build_key(
        "query",
        {
            "query": query,
            "table_codes": list(table_codes) if table_codes is not None else None,
            "model_choice": model_choice,
        },
    )
