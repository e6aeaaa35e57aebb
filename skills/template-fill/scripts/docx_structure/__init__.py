"""
ABOUTME: Structure-aware segmentation and mutation of DOCX document.xml bodies
"""

from .block_duplicator import DuplicationResult, duplicate_blocks_in_xml
from .blueprint import BlockInstance, BlueprintSection, ProfileCounts, RepeatingBlock, TemplateBlueprint
from .common import (
    ElementRange,
    ExtractionResult,
    SegmentLocation,
    StructuredSegment,
    TableCellInfo,
    TableInfo,
    TableRowInfo,
)
from .extractor import extract_structured_segments
from .fill import apply_structured_fills
from .pipeline import PipelineResult, run_fill_pipeline
from .template_map import build_template_map
