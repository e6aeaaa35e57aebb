#!/usr/bin/env python3
"""
ABOUTME: Shared constants, data classes and text helpers for structure extraction
ABOUTME: Every byte offset in these classes refers to the processed document XML
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

# ============================================================
# Constants
# ============================================================

SEGMENT_ID_PREFIX = "s"

# Template map truncation widths (characters, ellipsis included)
PARAGRAPH_TEXT_WIDTH = 80
TAB_PART_TEXT_WIDTH = 40
CELL_TEXT_WIDTH = 60
TABLE_LABEL_WIDTH = 40
ELLIPSIS = "..."

CONTEXT_BODY = "body"
CONTEXT_TABLE = "table"

# Single-space text run injected in place of a <w:br/> in empty table cells
PLACEHOLDER_TEXT_XML = '<w:t xml:space="preserve"> </w:t>'

# Empty paragraph inserted between duplicated paragraph groups
PARAGRAPH_SPACER_XML = "<w:p></w:p>"

# Matches the opening tag of any <w:t> element (not <w:tab>, <w:tbl>, ...)
WT_OPEN_PATTERN = re.compile(r'<w:t[\s>/]')

# Matches a plain line break <w:br/> (no type attribute)
PLAIN_BR_PATTERN = re.compile(r'<w:br\s*/>')

# Matches a tab character run element <w:tab/>
TAB_PATTERN = re.compile(r'<w:tab\s*/>')


# ============================================================
# Data Classes
# ============================================================

@dataclass(frozen=True)
class ElementRange:
    """Half-open byte range [start, end) of one XML element"""
    start: int
    end: int

    def contains(self, start: int, end: int) -> bool:
        return self.start <= start and end <= self.end

    def to_dict(self) -> dict:
        return {'start': self.start, 'end': self.end}


@dataclass(frozen=True)
class SegmentLocation:
    """Structural context of a segment"""
    context: str                            # body | table
    paragraph: ElementRange
    table_index: Optional[int] = None
    row_index: Optional[int] = None
    cell_index: Optional[int] = None
    table_row: Optional[ElementRange] = None

    @property
    def is_table(self) -> bool:
        return self.context == CONTEXT_TABLE

    def to_dict(self) -> dict:
        data = {'context': self.context, 'paragraph': self.paragraph.to_dict()}
        if self.is_table:
            data['tableIndex'] = self.table_index
            data['rowIndex'] = self.row_index
            data['cellIndex'] = self.cell_index
            if self.table_row is not None:
                data['tableRow'] = self.table_row.to_dict()
        return data


@dataclass(frozen=True)
class StructuredSegment:
    """One <w:t> element with its decoded text and structural location"""
    id: str
    text: str                    # Decoded text content
    xml_text: str                # Raw matched <w:t ...>...</w:t>
    start: int
    end: int
    location: SegmentLocation

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'text': self.text,
            'xmlText': self.xml_text,
            'start': self.start,
            'end': self.end,
            'location': self.location.to_dict(),
        }


@dataclass
class TableCellInfo:
    cell_index: int
    start: int
    end: int
    text: str = ''
    segment_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'cellIndex': self.cell_index,
            'start': self.start,
            'end': self.end,
            'text': self.text,
            'segmentIds': list(self.segment_ids),
        }


@dataclass
class TableRowInfo:
    row_index: int
    start: int
    end: int
    cells: List[TableCellInfo] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'rowIndex': self.row_index,
            'start': self.start,
            'end': self.end,
            'cells': [cell.to_dict() for cell in self.cells],
        }


@dataclass
class TableInfo:
    table_index: int
    start: int
    end: int
    rows: List[TableRowInfo] = field(default_factory=list)

    @property
    def column_count(self) -> int:
        return max((len(row.cells) for row in self.rows), default=0)

    def to_dict(self) -> dict:
        return {
            'tableIndex': self.table_index,
            'start': self.start,
            'end': self.end,
            'rows': [row.to_dict() for row in self.rows],
        }


@dataclass
class ExtractionResult:
    """
    Output of one extraction pass.

    processed_xml (the document after placeholder injection) is the offset
    space for segments, tables and every later fill/duplication call.
    """
    segments: List[StructuredSegment]
    tables: List[TableInfo]
    template_map: str
    processed_xml: str
    merge_groups: Dict[str, List[str]]

    def segment_by_id(self, segment_id: str) -> Optional[StructuredSegment]:
        for seg in self.segments:
            if seg.id == segment_id:
                return seg
        return None

    def to_dict(self, include_xml: bool = False) -> dict:
        data = {
            'segments': [seg.to_dict() for seg in self.segments],
            'tables': [table.to_dict() for table in self.tables],
            'templateMap': self.template_map,
            'mergeGroups': {k: list(v) for k, v in self.merge_groups.items()},
        }
        if include_xml:
            data['processedXml'] = self.processed_xml
        return data


# ============================================================
# Helper Functions
# ============================================================

def segment_id(rank: int) -> str:
    """Return the external segment ID for a position in sorted order"""
    return f"{SEGMENT_ID_PREFIX}{rank}"


def truncate_text(text: str, max_len: int) -> str:
    """
    Truncate text to max_len characters, ellipsis included.

    Examples:
        truncate_text("Hello", 10) -> "Hello"
        truncate_text("Hello World", 8) -> "Hello..."
    """
    if len(text) <= max_len:
        return text
    return text[:max_len - len(ELLIPSIS)] + ELLIPSIS
