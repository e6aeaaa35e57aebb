"""
ABOUTME: Structure-aware <w:t> segment extraction for DOCX document.xml
ABOUTME: Attaches body/table context (table, row, cell, paragraph) to every text run
"""

import bisect
from dataclasses import dataclass
from html import unescape
from typing import List, Optional, Tuple

from .common import (
    CONTEXT_BODY,
    CONTEXT_TABLE,
    ElementRange,
    ExtractionResult,
    SegmentLocation,
    StructuredSegment,
    TableCellInfo,
    TableInfo,
    TableRowInfo,
    segment_id,
)
from .merge_groups import compute_merge_groups
from .placeholders import inject_placeholders_for_empty_cells
from .range_locator import TAG_CLOSE, TAG_OPEN, find_all_elements, iter_tags
from .template_map import build_template_map


@dataclass
class TextElement:
    """A non-empty-tag <w:t>...</w:t> element found by scan_text_elements"""
    start: int
    end: int
    content: str                        # Raw character data between the tags
    paragraph: Optional[ElementRange]   # Innermost enclosing <w:p>, None if unclosed or absent


@dataclass
class _RawMatch:
    """A <w:t> match in discovery order, before IDs exist"""
    start: int
    end: int
    xml_text: str
    text: str
    location: SegmentLocation


def scan_text_elements(xml: str) -> List[TextElement]:
    """
    Find every <w:t> element together with its innermost enclosing paragraph.

    Driven by the tag tokenizer, so <w:t> inside comments or CDATA is
    ignored, and a run after a textbox (<w:txbxContent><w:p>...</w:p>)
    still belongs to the outer paragraph rather than the textbox's one.
    Self-closing <w:t/> and <w:t> elements holding markup are skipped.

    Returns:
        TextElement list in document order
    """
    elements: List[TextElement] = []
    # Each open paragraph: (start offset, indices of elements waiting for its end)
    open_paragraphs: List[Tuple[int, List[int]]] = []
    pending_t = None

    for token in iter_tags(xml):
        if token.name == 'w:t':
            if token.kind == TAG_OPEN:
                pending_t = token
            elif token.kind == TAG_CLOSE and pending_t is not None:
                content = xml[pending_t.end:token.start]
                # A comment or CDATA section inside the element
                if '<' not in content:
                    elements.append(TextElement(
                        start=pending_t.start,
                        end=token.end,
                        content=content,
                        paragraph=None,
                    ))
                    if open_paragraphs:
                        open_paragraphs[-1][1].append(len(elements) - 1)
                pending_t = None
            continue

        # Any other tag between <w:t> and </w:t> means it is not plain text
        pending_t = None

        if token.name != 'w:p':
            continue
        if token.kind == TAG_OPEN:
            open_paragraphs.append((token.start, []))
        elif token.kind == TAG_CLOSE and open_paragraphs:
            para_start, members = open_paragraphs.pop()
            para_range = ElementRange(para_start, token.end)
            for idx in members:
                elements[idx].paragraph = para_range

    return elements


def _in_any_range(ranges: List[ElementRange], starts: List[int], start: int, end: int) -> bool:
    """Check containment against sorted, non-overlapping ranges"""
    idx = bisect.bisect_right(starts, start) - 1
    return idx >= 0 and ranges[idx].contains(start, end)


def _elements_within(elements: List[TextElement], starts: List[int], rng: ElementRange) -> List[TextElement]:
    lo = bisect.bisect_left(starts, rng.start)
    hi = bisect.bisect_left(starts, rng.end)
    return [el for el in elements[lo:hi] if rng.contains(el.start, el.end)]


def _collect_table_matches(
    xml: str,
    elements: List[TextElement],
    table_ranges: List[ElementRange],
    arena: List[_RawMatch],
) -> Tuple[List[TableInfo], List[Tuple[TableCellInfo, List[int]]]]:
    """
    Walk tables -> rows -> cells and record every <w:t> in a cell.

    Returns:
        (tables, cell_members) where cell_members pairs each cell with the
        arena indices of its matches, in document order
    """
    tables: List[TableInfo] = []
    cell_members: List[Tuple[TableCellInfo, List[int]]] = []
    element_starts = [el.start for el in elements]

    for ti, tbl in enumerate(table_ranges):
        table_info = TableInfo(table_index=ti, start=tbl.start, end=tbl.end)

        for ri, row in enumerate(find_all_elements(xml, 'w:tr', tbl.start, tbl.end)):
            row_info = TableRowInfo(row_index=ri, start=row.start, end=row.end)

            for ci, cell in enumerate(find_all_elements(xml, 'w:tc', row.start, row.end)):
                cell_info = TableCellInfo(cell_index=ci, start=cell.start, end=cell.end)
                members: List[int] = []

                for el in _elements_within(elements, element_starts, cell):
                    para = el.paragraph
                    if para is None or not cell.contains(para.start, para.end):
                        para = ElementRange(cell.start, cell.end)
                    text = unescape(el.content)
                    members.append(len(arena))
                    arena.append(_RawMatch(
                        start=el.start,
                        end=el.end,
                        xml_text=xml[el.start:el.end],
                        text=text,
                        location=SegmentLocation(
                            context=CONTEXT_TABLE,
                            paragraph=para,
                            table_index=ti,
                            row_index=ri,
                            cell_index=ci,
                            table_row=row,
                        ),
                    ))
                    cell_info.text += text

                row_info.cells.append(cell_info)
                cell_members.append((cell_info, members))

            table_info.rows.append(row_info)

        tables.append(table_info)

    return tables, cell_members


def _collect_body_matches(
    xml: str,
    elements: List[TextElement],
    table_ranges: List[ElementRange],
    arena: List[_RawMatch],
) -> None:
    table_starts = [tbl.start for tbl in table_ranges]

    for el in elements:
        if _in_any_range(table_ranges, table_starts, el.start, el.end):
            continue
        arena.append(_RawMatch(
            start=el.start,
            end=el.end,
            xml_text=xml[el.start:el.end],
            text=unescape(el.content),
            location=SegmentLocation(
                context=CONTEXT_BODY,
                paragraph=el.paragraph or ElementRange(el.start, el.end),
            ),
        ))


def extract_structured_segments(doc_xml: str, verbose: bool = False) -> ExtractionResult:
    """
    Extract all <w:t> segments from document XML with their structural context.

    Steps:
    1. Inject placeholders into empty table cells (see placeholders.py).
       The result is the processed XML; all offsets refer to it.
    2. Scan every <w:t> with its innermost paragraph, then attribute
       table segments by walking <w:tbl> -> <w:tr> -> <w:tc>.
    3. Collect body segments: every <w:t> outside all tables.
    4. Sort by position and assign IDs s0, s1, ... in that order. Cell
       segment lists are derived from the same ordering.
    5. Compute merge groups over body segments and render the template map.

    Tables nested inside a cell are folded into the outer cell: their
    segments carry the outer table, row and cell indices.

    Segment `text` is the decoded character data ("R&amp;D" becomes
    "R&D", numeric references are resolved and invalid ones become
    U+FFFD). The raw substring between the tags stays available through
    `xml_text`; for entity-free content the two agree.

    Args:
        doc_xml: Raw document.xml content
        verbose: Print progress messages

    Returns:
        ExtractionResult

    Raises:
        TypeError: If doc_xml is not a string
    """
    if not isinstance(doc_xml, str):
        raise TypeError(f"doc_xml must be str, got {type(doc_xml).__name__}")

    processed_xml = inject_placeholders_for_empty_cells(doc_xml, verbose=verbose)

    arena: List[_RawMatch] = []
    table_ranges = find_all_elements(processed_xml, 'w:tbl')
    elements = scan_text_elements(processed_xml)
    tables, cell_members = _collect_table_matches(processed_xml, elements, table_ranges, arena)
    _collect_body_matches(processed_xml, elements, table_ranges, arena)

    order = sorted(range(len(arena)), key=lambda i: arena[i].start)
    ids = {arena_index: segment_id(rank) for rank, arena_index in enumerate(order)}

    segments = [
        StructuredSegment(
            id=ids[i],
            text=arena[i].text,
            xml_text=arena[i].xml_text,
            start=arena[i].start,
            end=arena[i].end,
            location=arena[i].location,
        )
        for i in order
    ]
    for cell_info, members in cell_members:
        cell_info.segment_ids = [ids[i] for i in members]

    body_segments = [seg for seg in segments if seg.location.context == CONTEXT_BODY]
    merge_groups = compute_merge_groups(body_segments, processed_xml)
    template_map = build_template_map(segments, tables, processed_xml, merge_groups)

    if verbose:
        print(f"[Extract] {len(segments)} segment(s): {len(body_segments)} body, "
              f"{len(segments) - len(body_segments)} in {len(tables)} table(s), "
              f"{len(merge_groups)} merge group(s)")

    return ExtractionResult(
        segments=segments,
        tables=tables,
        template_map=template_map,
        processed_xml=processed_xml,
        merge_groups=merge_groups,
    )
