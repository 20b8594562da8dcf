"""Decode provider XML feeds and normalize their <video> nodes into records."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Mapping

from exceptions import MalformedPayloadError
from sourcing.models import ProviderDescriptor, VideoRecord

logger = logging.getLogger(__name__)

# Key holding an element's own text when it also has child elements.
TEXT_KEY = "_"


def _local_name(tag: str) -> str:
    if tag.startswith("{"):
        return tag.rsplit("}", 1)[-1]
    return tag


def _element_to_node(element: ET.Element) -> Any:
    """
    Convert an element into plain Python data.

    Attributes are ignored. A leaf becomes its text. Children become a dict
    keyed by tag; a tag becomes a list only when it actually repeats, so a
    single child is never wrapped.
    """
    children = list(element)
    if not children:
        return element.text or ""

    node: Dict[str, Any] = {}
    text_parts = [element.text or ""]
    for child in children:
        tag = _local_name(child.tag)
        value = _element_to_node(child)
        if tag not in node:
            node[tag] = value
        elif isinstance(node[tag], list):
            node[tag].append(value)
        else:
            node[tag] = [node[tag], value]
        text_parts.append(child.tail or "")

    text = "".join(text_parts).strip()
    if text:
        node[TEXT_KEY] = text
    return node


def parse_xml_tree(text: str) -> Dict[str, Any]:
    """Decode an XML document into ``{root_tag: node}``."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise MalformedPayloadError(f"Invalid XML: {e}") from e
    return {_local_name(root.tag): _element_to_node(root)}


def _child(node: Any, key: str) -> Any:
    if isinstance(node, Mapping):
        return node.get(key)
    return None


def extract_video_nodes(tree: Mapping[str, Any]) -> List[Any]:
    """
    Return ``rss.list.video`` as a list.

    Any other document shape means "no results". A bare single node is
    wrapped in a one-element list.
    """
    videos = _child(_child(_child(tree, "rss"), "list"), "video")
    if videos is None:
        return []
    if isinstance(videos, list):
        return videos
    return [videos]


def tag_record(node: Mapping[str, Any], descriptor: ProviderDescriptor) -> VideoRecord:
    record = dict(node)
    record["source"] = descriptor.key
    record["source_name"] = descriptor.display_name
    return record


def normalize_video_records(
    tree: Mapping[str, Any], descriptor: ProviderDescriptor, max_results: int
) -> List[VideoRecord]:
    """Capped, source-tagged records for one provider, in feed order."""
    nodes = extract_video_nodes(tree)[:max_results]
    records: List[VideoRecord] = []
    for node in nodes:
        if not isinstance(node, Mapping):
            # <video> with text only carries no fields to tag
            logger.debug("Skipping non-element <video> node from %s", descriptor.key)
            continue
        records.append(tag_record(node, descriptor))
    return records
