"""Result normalizers for provider payloads."""

from sourcing.normalizers.xml_feed import (
    extract_video_nodes,
    normalize_video_records,
    parse_xml_tree,
    tag_record,
)

__all__ = [
    "extract_video_nodes",
    "normalize_video_records",
    "parse_xml_tree",
    "tag_record",
]
