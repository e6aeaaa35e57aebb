"""
ABOUTME: Renders the compact template map handed to content generation
ABOUTME: Lists body paragraphs and table cells with the segment IDs to target
"""

from typing import Dict, List, Optional, Sequence

from .common import (
    CELL_TEXT_WIDTH,
    CONTEXT_BODY,
    PARAGRAPH_TEXT_WIDTH,
    TAB_PART_TEXT_WIDTH,
    TABLE_LABEL_WIDTH,
    StructuredSegment,
    TableInfo,
    truncate_text,
)
from .merge_groups import group_by_paragraph, has_tab_between, paragraph_has_tabs, split_at_tabs

BODY_HEADER = '--- Body Paragraphs ---'
EMPTY_CELL = '(empty)'
PLACEHOLDER_CELL = '(placeholder - fill with content)'
TAB_MARKER = '[TAB]'


def _quoted(ids: str, text: str) -> str:
    return f'[{ids}] "{text}"'


def _render_body_group(group: List[StructuredSegment], processed_xml: Optional[str],
                       merge_aware: bool) -> str:
    combined = ''.join(seg.text for seg in group)
    tabbed = processed_xml is not None and len(group) > 1 and paragraph_has_tabs(group, processed_xml)

    if merge_aware:
        if not tabbed:
            return _quoted(group[0].id, truncate_text(combined, PARAGRAPH_TEXT_WIDTH))
        parts = []
        for sub_group in split_at_tabs(group, processed_xml):
            if parts:
                parts.append(TAB_MARKER)
            sub_text = ''.join(seg.text for seg in sub_group)
            parts.append(_quoted(sub_group[0].id, truncate_text(sub_text, TAB_PART_TEXT_WIDTH)))
        return ' '.join(parts)

    # Without merge groups every segment ID is listed
    if not tabbed:
        ids = ','.join(seg.id for seg in group)
        return _quoted(ids, truncate_text(combined, PARAGRAPH_TEXT_WIDTH))
    parts = []
    for i, seg in enumerate(group):
        parts.append(_quoted(seg.id, truncate_text(seg.text, TAB_PART_TEXT_WIDTH)))
        if i < len(group) - 1 and has_tab_between(seg, group[i + 1], processed_xml):
            parts.append(TAB_MARKER)
    return ' '.join(parts)


def _render_table(table: TableInfo, by_id: Dict[str, StructuredSegment]) -> List[str]:
    first_row_text = ''
    if table.rows:
        first_row_text = ' | '.join(
            cell.text.strip() for cell in table.rows[0].cells if cell.text.strip()
        )
    label = f' [{truncate_text(first_row_text, TABLE_LABEL_WIDTH)}]' if first_row_text else ''

    lines = [f'--- Table {table.table_index} ({len(table.rows)} rows x {table.column_count} cols){label} ---']
    for row in table.rows:
        cell_texts = []
        for cell in row.cells:
            cell_segs = [by_id[sid] for sid in cell.segment_ids if sid in by_id]
            if not cell_segs:
                cell_texts.append(EMPTY_CELL)
                continue
            ids = ','.join(seg.id for seg in cell_segs)
            text = ''.join(seg.text for seg in cell_segs)
            if not text.strip():
                display = PLACEHOLDER_CELL
            else:
                display = truncate_text(text.replace('\n', '\\n'), CELL_TEXT_WIDTH)
            cell_texts.append(_quoted(ids, display))
        lines.append(f'  Row {row.row_index}: {" | ".join(cell_texts)}')
    lines.append('')
    return lines


def build_template_map(
    segments: Sequence[StructuredSegment],
    tables: Sequence[TableInfo],
    processed_xml: Optional[str] = None,
    merge_groups: Optional[Dict[str, List[str]]] = None,
) -> str:
    """
    Build a compact text representation of the template for AI consumption.

    Output format:

        --- Body Paragraphs ---
        [s0] "Curriculum Vitae"
        [s1] "Email:" [TAB] [s2] "jan@example.com"

        --- Table 0 (2 rows x 2 cols) [Period | Employer] ---
          Row 0: [s3] "Period" | [s4] "Employer"
          Row 1: [s5] "2020 - 2025" | (empty)

    With merge groups, each paragraph (or tab-separated part) shows only its
    leader ID with the combined text of the whole group. Whitespace-only
    body paragraphs and tables without segments are left out.

    Args:
        segments: All segments, sorted by start
        tables: Table structure from the same extraction
        processed_xml: Processed XML, needed to detect tab boundaries
        merge_groups: Leader -> followers map

    Returns:
        Multi-line template map
    """
    lines: List[str] = []
    merge_aware = bool(merge_groups)

    body_segments = [seg for seg in segments if seg.location.context == CONTEXT_BODY]
    if body_segments:
        lines.append(BODY_HEADER)
        for group in group_by_paragraph(body_segments):
            if not ''.join(seg.text for seg in group).strip():
                continue
            lines.append(_render_body_group(group, processed_xml, merge_aware))
        lines.append('')

    by_id = {seg.id: seg for seg in segments if seg.location.is_table}
    for table in tables:
        if not any(sid in by_id for row in table.rows for cell in row.cells for sid in cell.segment_ids):
            continue
        lines.extend(_render_table(table, by_id))

    return '\n'.join(lines)
