"""
ABOUTME: Clones repeating template blocks (table rows or paragraph groups)
ABOUTME: Adds slots until each repeating section reaches its target entry count
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from .blueprint import BLOCK_PARAGRAPH_GROUP, BLOCK_TABLE_ROWS, ProfileCounts, RepeatingBlock, TemplateBlueprint
from .common import PARAGRAPH_SPACER_XML, ElementRange, StructuredSegment, TableInfo
from .patch_list import PatchList


@dataclass
class DuplicationOperation:
    """Insert `count` copies of [block_start, block_end) at insert_after"""
    insert_after: int
    block_start: int
    block_end: int
    count: int
    type: str


@dataclass
class DuplicationResult:
    xml: str
    duplicated: bool
    details: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {'xml': self.xml, 'duplicated': self.duplicated, 'details': list(self.details)}


def _table_rows_range(segs: List[StructuredSegment], tables: Sequence[TableInfo]) -> Optional[ElementRange]:
    """Span from the first to the last table row owning any of segs"""
    table_index = segs[0].location.table_index
    if table_index is None:
        return None
    table = next((t for t in tables if t.table_index == table_index), None)
    if table is None:
        return None

    row_indices = {
        seg.location.row_index for seg in segs
        if seg.location.table_index == table_index and seg.location.row_index is not None
    }
    rows = [row for row in table.rows if row.row_index in row_indices]
    if not rows:
        return None
    return ElementRange(rows[0].start, rows[-1].end)


def _paragraph_group_range(segs: List[StructuredSegment]) -> ElementRange:
    """Span from the first to the last paragraph owning any of segs"""
    return ElementRange(
        min(seg.location.paragraph.start for seg in segs),
        max(seg.location.paragraph.end for seg in segs),
    )


def _resolve_block_range(block: RepeatingBlock, segments: Sequence[StructuredSegment],
                         tables: Sequence[TableInfo]) -> Optional[ElementRange]:
    """Byte range of the block's last instance, or None if it cannot be resolved"""
    if not block.instances:
        return None
    last_ids = set(block.instances[-1].segment_ids)
    last_segs = [seg for seg in segments if seg.id in last_ids]
    if not last_segs:
        return None

    if block.block_type == BLOCK_TABLE_ROWS:
        span = _table_rows_range(last_segs, tables)
    else:
        span = _paragraph_group_range(last_segs)

    if span is None or span.start >= span.end:
        return None
    return span


def duplicate_blocks_in_xml(
    doc_xml: str,
    blueprint: TemplateBlueprint,
    segments: Sequence[StructuredSegment],
    tables: Sequence[TableInfo],
    profile_counts: Union[ProfileCounts, dict],
    verbose: bool = False,
) -> DuplicationResult:
    """
    Duplicate repeating blocks so each section has enough slots.

    For every block whose section needs more entries than it has instances,
    the last instance is located (its table rows for "table_rows", its
    paragraphs for "paragraph_group") and copied directly after itself.
    Paragraph group copies are each preceded by an empty paragraph; table
    rows need no separator. Blocks that cannot be resolved are skipped.

    All insertions are computed against doc_xml and applied back-to-front,
    so the caller must re-extract before filling.

    Args:
        doc_xml: Processed document XML the segments were extracted from
        blueprint: Repeating block description from template analysis
        segments: Segments from the same extraction
        tables: Tables from the same extraction
        profile_counts: Target counts (ProfileCounts or its camelCase dict)
        verbose: Print per-block decisions

    Returns:
        DuplicationResult with the new XML and one detail line per block

    Raises:
        TypeError: If doc_xml is not a string
    """
    if not isinstance(doc_xml, str):
        raise TypeError(f"doc_xml must be str, got {type(doc_xml).__name__}")
    if isinstance(profile_counts, dict):
        profile_counts = ProfileCounts.from_dict(profile_counts)

    details: List[str] = []
    operations: List[DuplicationOperation] = []

    for block in blueprint.repeating_blocks:
        target_count = profile_counts.target_for(block.section_type)
        if target_count <= 0:
            continue

        current_count = len(block.instances)
        if current_count >= target_count:
            details.append(f"{block.section_type}: {current_count} slots >= {target_count} needed")
            continue

        span = _resolve_block_range(block, segments, tables)
        if span is None:
            if verbose:
                print(f"  [Warning] {block.section_type}: last {block.block_type} instance "
                      f"could not be located, skipped")
            continue

        additional = target_count - current_count
        operations.append(DuplicationOperation(
            insert_after=span.end,
            block_start=span.start,
            block_end=span.end,
            count=additional,
            type=block.block_type,
        ))
        details.append(
            f"{block.section_type}: duplicating {additional} {block.block_type} "
            f"({current_count} -> {target_count})"
        )

    patches = PatchList()
    for op in operations:
        block_xml = doc_xml[op.block_start:op.block_end]
        spacer = PARAGRAPH_SPACER_XML if op.type == BLOCK_PARAGRAPH_GROUP else ''
        patches.insert(op.insert_after, (spacer + block_xml) * op.count)

    if verbose:
        for line in details:
            print(f"[Duplicate] {line}")

    return DuplicationResult(xml=patches.apply(doc_xml), duplicated=bool(operations), details=details)
