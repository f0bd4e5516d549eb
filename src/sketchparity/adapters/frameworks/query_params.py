"""Query parameter parsing utilities for the fake intake app."""

# Payload formats the fake intake can serve
VALID_FORMATS = {"raw"}


def _parse_endpoint_param(params: dict[str, list[str]]) -> str | None:
    """Parse and validate the 'endpoint' query parameter.

    Args:
        params: Parsed query string parameters (as returned by urllib.parse.parse_qs).

    Returns:
        Endpoint path, or None if missing or not an absolute path.
    """
    # @tra: Adapter.ASGI.QueryParameter.Endpoint
    endpoint_list = params.get("endpoint", [])
    endpoint = endpoint_list[0] if endpoint_list else ""
    if not endpoint.startswith("/"):
        return None
    return endpoint


def _parse_format_param(params: dict[str, list[str]]) -> str | None:
    """Parse and validate the 'format' query parameter.

    Args:
        params: Parsed query string parameters (as returned by urllib.parse.parse_qs).

    Returns:
        Validated format string (lowercase), defaulting to "raw" if missing.
        None if the format is not supported.
    """
    # @tra: Adapter.ASGI.QueryParameter.Format
    format_list = params.get("format", ["raw"])
    format_raw = format_list[0].lower() if format_list else "raw"
    if format_raw in VALID_FORMATS:
        return format_raw
    return None
