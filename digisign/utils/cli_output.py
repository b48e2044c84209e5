"""Schema-stamped JSON output for CLI commands."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from digisign import __version__


def json_response(
    schema_id: str,
    schema_version: int,
    **data: Any,
) -> str:
    """Create schema-wrapped JSON response for CLI output.

    Args:
        schema_id: Identifier for the output type (e.g., "envelope_info").
        schema_version: Integer version for backward compatibility.
        **data: Payload data to include in the response.

    Returns:
        JSON string with schema metadata and payload.

    Example:
        >>> json_response("envelope_info", 1, signature_length=256)
        {
          "schema_id": "envelope_info",
          "schema_version": 1,
          "producer": "digisign-0.1.0",
          "produced_at": "2026-10-18T10:30:00+00:00",
          "signature_length": 256
        }
    """
    wrapped = {
        "schema_id": schema_id,
        "schema_version": schema_version,
        "producer": f"digisign-{__version__}",
        "produced_at": datetime.now(UTC).isoformat(),
        **data,
    }
    return json.dumps(wrapped, indent=2, default=str)
