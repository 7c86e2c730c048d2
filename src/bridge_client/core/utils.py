"""
Utility functions for the bridge client.

Includes:
- Deterministic header merge for every attempt
- Header sanitization for safe logging
"""

from typing import Dict, Mapping, Optional


# Headers that should never reach the logs in clear text
SENSITIVE_HEADERS = {
    'authorization',
    'apikey',
    'api-key',
    'x-api-key',
    'cookie',
    'set-cookie',
    'proxy-authorization',
}


def build_headers(
    request_id: str,
    token: Optional[str] = None,
    user_id: Optional[str] = None,
    api_key: Optional[str] = None,
    static_headers: Optional[Mapping[str, str]] = None,
    extra_headers: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Build the headers for one attempt.

    Merge order (later wins): static config headers, protocol headers,
    per-request extras. Protocol headers are:

    - ``Content-Type: application/json``
    - ``X-Request-Id``
    - ``Authorization: Bearer <token>`` when a token is available
    - ``X-User-Id`` when a user id is available
    - ``apikey`` when configured

    Args:
        request_id: Correlation id of the logical request
        token: Bearer token fetched for this attempt
        user_id: User id fetched for this attempt
        api_key: Static client key
        static_headers: Headers from BridgeClientConfig
        extra_headers: Headers from the Request

    Returns:
        New headers dictionary

    Examples:
        >>> build_headers("req-1", token="abc")["Authorization"]
        'Bearer abc'
    """
    if not request_id:
        raise ValueError("request_id is required")

    headers: Dict[str, str] = {}
    if static_headers:
        headers.update(static_headers)

    headers['Content-Type'] = 'application/json'
    headers['X-Request-Id'] = request_id

    if token:
        headers['Authorization'] = f'Bearer {token}'
    if user_id:
        headers['X-User-Id'] = user_id
    if api_key:
        headers['apikey'] = api_key

    if extra_headers:
        headers.update(extra_headers)

    return headers


def sanitize_headers(headers: Mapping[str, str], mask: str = 'REDACTED') -> Dict[str, str]:
    """
    Mask sensitive headers for safe logging.

    Examples:
        >>> sanitize_headers({'Authorization': 'Bearer token123'})
        {'Authorization': 'REDACTED'}
    """
    if not headers:
        return dict(headers or {})

    return {
        key: mask if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }
