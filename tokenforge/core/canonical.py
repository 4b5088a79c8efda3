"""
Canonical serialization for deterministic hashing.

Constructor arguments, timelock call payloads and events are all hashed via
these functions, so the same values always produce the same bytes.
"""

import json
from typing import Any

from pydantic import BaseModel


def canonicalize(obj: Any) -> Any:
    """
    Convert arbitrary nested values to canonical JSON-ready form.

    Rules:
    - dict keys sorted alphabetically
    - tuples converted to lists
    - bytes converted to 0x-prefixed lowercase hex
    - pydantic models converted to their field dict
    - recursive normalization
    """
    if isinstance(obj, BaseModel):
        return canonicalize(obj.model_dump())
    if isinstance(obj, dict):
        return {str(k): canonicalize(obj[k]) for k in sorted(obj.keys(), key=str)}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    if isinstance(obj, (bytes, bytearray)):
        return "0x" + bytes(obj).hex()
    return obj


def canonical_json_bytes(obj: Any) -> bytes:
    """
    Deterministic JSON bytes for hashing.

    Returns:
        UTF-8 encoded JSON bytes, sorted keys, no whitespace
    """
    canon = canonicalize(obj)
    s = json.dumps(canon, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return s.encode("utf-8")


def canonical_json_str(obj: Any) -> str:
    return canonical_json_bytes(obj).decode("utf-8")


def encode_args(*args: Any) -> bytes:
    """Encode a positional argument list the way init code and call data embed it."""
    return canonical_json_bytes(list(args))
