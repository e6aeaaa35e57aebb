"""
ABOUTME: Groups run fragments of one logical value into leader/follower merge groups
ABOUTME: Groups never cross paragraph boundaries or <w:tab/> separators
"""

from typing import Dict, List, Sequence

from .common import TAB_PATTERN, StructuredSegment


def group_by_paragraph(segments: Sequence[StructuredSegment]) -> List[List[StructuredSegment]]:
    """
    Split position-sorted segments into runs sharing the same paragraph start.
    """
    groups: List[List[StructuredSegment]] = []
    current: List[StructuredSegment] = []
    current_para_start = -1

    for seg in segments:
        if seg.location.paragraph.start != current_para_start:
            if current:
                groups.append(current)
            current = [seg]
            current_para_start = seg.location.paragraph.start
        else:
            current.append(seg)

    if current:
        groups.append(current)
    return groups


def has_tab_between(seg_a: StructuredSegment, seg_b: StructuredSegment, xml: str) -> bool:
    """Check for a <w:tab/> between the end of seg_a and the start of seg_b"""
    return TAB_PATTERN.search(xml, seg_a.end, seg_b.start) is not None


def paragraph_has_tabs(group: Sequence[StructuredSegment], xml: str) -> bool:
    return any(has_tab_between(a, b, xml) for a, b in zip(group, group[1:]))


def split_at_tabs(group: Sequence[StructuredSegment], xml: str) -> List[List[StructuredSegment]]:
    """
    Split one paragraph group into sub-groups at every tab boundary.

    A group without tabs comes back as a single sub-group.
    """
    if not group:
        return []
    sub_groups: List[List[StructuredSegment]] = []
    current = [group[0]]
    for prev, seg in zip(group, group[1:]):
        if has_tab_between(prev, seg, xml):
            sub_groups.append(current)
            current = [seg]
        else:
            current.append(seg)
    sub_groups.append(current)
    return sub_groups


def compute_merge_groups(body_segments: Sequence[StructuredSegment], xml: str) -> Dict[str, List[str]]:
    """
    Compute merge groups for body paragraph segments.

    Word splits a single value across runs at spell-check and formatting
    boundaries, so "2020-2025" may arrive as "20", "20", "-", "2025". Every
    tab-free stretch of two or more segments within one paragraph becomes a
    merge group: the first segment is the leader that receives the fill,
    the rest are followers that get emptied. Tabs separate unrelated fields
    ("Email:" <tab> "value"), so a group never spans one.

    Args:
        body_segments: Body-context segments sorted by start
        xml: The processed XML the segments were extracted from

    Returns:
        Dict mapping leader segment ID to its follower IDs
    """
    merge_groups: Dict[str, List[str]] = {}

    for group in group_by_paragraph(body_segments):
        if len(group) <= 1:
            continue
        for sub_group in split_at_tabs(group, xml):
            if len(sub_group) > 1:
                merge_groups[sub_group[0].id] = [seg.id for seg in sub_group[1:]]

    return merge_groups
