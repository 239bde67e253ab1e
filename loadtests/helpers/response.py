"""Response error extraction for load test observability.

Parses ordering API error responses into human-readable messages.
Handles two response shapes:

- Request validation (400): {"error": [{"loc": [...], "msg": "..."}]}
- Domain errors (400/404/500): {"error": "msg"}, {"error": {"field": ["msg"]}} or {"detail": "msg"}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except ValueError:
        # Not JSON: return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    error = body.get("error", body.get("detail"))

    if isinstance(error, list):
        parts = []
        for err in error:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if isinstance(error, dict):
        return " | ".join(f"{k}: {v}" for k, v in error.items())

    if error is not None:
        return str(error)

    # Unknown shape: stringify and truncate
    return str(body)[:300]
