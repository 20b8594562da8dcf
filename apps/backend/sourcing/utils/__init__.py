"""Utility helpers shared by the sourcing pipeline."""

from .url import build_search_url, encode_query_component

__all__ = [
    "build_search_url",
    "encode_query_component",
]
