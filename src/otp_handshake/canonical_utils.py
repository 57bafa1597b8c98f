"""
Canonical serialization and stable hashing utilities
Produces the deterministic bytes that capability tokens are signed over
"""

import json
import hashlib
import logging
from typing import Any, Dict, Union
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def canonical_json(data: Union[Dict[str, Any], list, str, int, bool, None]) -> str:
    """
    Convert data to canonical JSON representation

    Rules:
    - Sort object keys alphabetically
    - Use compact separators (no whitespace)
    - Normalize datetime to ISO format UTC

    Args:
        data: Data to canonicalize

    Returns:
        Canonical JSON string
    """
    def _canonicalize(value):
        if isinstance(value, dict):
            return {k: _canonicalize(v) for k, v in sorted(value.items())}
        elif isinstance(value, (list, tuple)):
            return [_canonicalize(item) for item in value]
        elif isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')
        elif isinstance(value, (str, int, bool)) or value is None:
            return value
        else:
            raise ValueError(f"Unsupported type for canonicalization: {type(value)}")

    try:
        canonical_data = _canonicalize(data)
        return json.dumps(canonical_data, sort_keys=True, separators=(',', ':'), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to canonicalize data: {e}")
        raise ValueError(f"Canonicalization failed: {e}") from e


def stable_hash(data: str) -> str:
    """Generate stable SHA-256 hex digest of canonical string data"""
    if not isinstance(data, str):
        raise ValueError(f"Data must be string, got {type(data)}")

    return hashlib.sha256(data.encode('utf-8')).hexdigest()
