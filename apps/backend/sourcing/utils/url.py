"""URL helpers for provider search endpoints."""

from __future__ import annotations

from urllib.parse import quote, urlsplit

QUERY_PLACEHOLDER = "{query}"
QUERY_PARAM = "wd"

# Characters left unescaped, matching JavaScript's encodeURIComponent.
_COMPONENT_SAFE = "-_.!~*'()"


def encode_query_component(value: str) -> str:
    return quote(value, safe=_COMPONENT_SAFE)


def build_search_url(endpoint_template: str, query: str) -> str:
    """Substitute the URL-encoded query into a provider endpoint.

    Templates carrying an explicit ``{query}`` placeholder get it replaced.
    Otherwise the query is appended as the ``wd`` parameter, joined with ``&``
    when the endpoint already has a query string.
    """

    encoded = encode_query_component(query)
    template = endpoint_template.strip()
    if QUERY_PLACEHOLDER in template:
        return template.replace(QUERY_PLACEHOLDER, encoded)

    separator = "&" if urlsplit(template).query else "?"
    if template.endswith(("?", "&")):
        separator = ""
    return f"{template}{separator}{QUERY_PARAM}={encoded}"


__all__ = ["build_search_url", "encode_query_component"]
