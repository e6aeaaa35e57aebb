"""
ABOUTME: Writes generated text back into <w:t> elements by segment ID
ABOUTME: Followers of a filled merge-group leader are emptied automatically
"""

import re
from html import escape
from typing import Dict, List, Mapping, Optional, Sequence

from .common import StructuredSegment
from .patch_list import PatchList
from .xml_utils import sanitize_xml_string

_WT_OPEN_ATTRS = re.compile(r'^<w:t(\s[^>]*?)?>')


def expand_fills(fills: Mapping[str, str],
                 merge_groups: Optional[Mapping[str, List[str]]] = None) -> Dict[str, str]:
    """
    Add an empty fill for every follower of a filled leader.

    Followers that already have an explicit fill keep it.
    """
    expanded = dict(fills)
    for leader_id, follower_ids in (merge_groups or {}).items():
        if leader_id not in expanded:
            continue
        for fid in follower_ids:
            expanded.setdefault(fid, '')
    return expanded


def build_text_element(original_xml_text: str, new_text: str) -> str:
    """
    Build a replacement <w:t> element for new_text.

    Attributes of the original <w:t> are kept; xml:space="preserve" is added
    when the original has no xml:space attribute so leading and trailing
    spaces survive.

    Examples:
        ('<w:t>Old</w:t>', 'A & B') -> '<w:t xml:space="preserve">A &amp; B</w:t>'
    """
    match = _WT_OPEN_ATTRS.match(original_xml_text)
    attrs = (match.group(1) or '') if match else ''
    if 'xml:space' not in attrs:
        attrs = f' xml:space="preserve"{attrs}'
    return f'<w:t{attrs}>{escape(sanitize_xml_string(new_text), quote=True)}</w:t>'


def apply_structured_fills(
    doc_xml: str,
    fills: Mapping[str, str],
    segments: Sequence[StructuredSegment],
    merge_groups: Optional[Mapping[str, List[str]]] = None,
    verbose: bool = False,
) -> str:
    """
    Apply generated fills to the document XML.

    doc_xml must be the processed XML the segments were extracted from.
    Every fill replaces one whole <w:t> element; replacements are applied
    in reverse position order so earlier offsets stay valid. IDs that match
    no segment are skipped.

    Args:
        doc_xml: Processed document XML
        fills: Segment ID -> new text
        segments: Segments from the same extraction
        merge_groups: Leader -> followers map from the same extraction
        verbose: Print skipped IDs and a summary

    Returns:
        New XML string (doc_xml itself when there is nothing to apply)

    Raises:
        TypeError: If doc_xml is not a string
    """
    if not isinstance(doc_xml, str):
        raise TypeError(f"doc_xml must be str, got {type(doc_xml).__name__}")

    by_id = {seg.id: seg for seg in segments}
    patches = PatchList()

    for seg_id, new_text in expand_fills(fills, merge_groups).items():
        seg = by_id.get(seg_id)
        if seg is None:
            if verbose:
                print(f"  [Warning] Fill target {seg_id} not found, skipped")
            continue
        text = '' if new_text is None else str(new_text)
        patches.replace(seg.start, seg.end, build_text_element(seg.xml_text, text))

    if verbose:
        print(f"[Fill] Applied {len(patches)} fill(s)")

    return patches.apply(doc_xml)
