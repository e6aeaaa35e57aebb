"""
ABOUTME: Runs the extract -> duplicate -> re-extract -> fill sequence for one document
ABOUTME: Blueprint and fill generation are supplied by the caller as callables
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from .block_duplicator import DuplicationResult, duplicate_blocks_in_xml
from .blueprint import ProfileCounts, TemplateBlueprint
from .common import ExtractionResult
from .extractor import extract_structured_segments
from .fill import apply_structured_fills

BlueprintProvider = Callable[[str], TemplateBlueprint]
FillProvider = Callable[[str], Dict[str, str]]


@dataclass
class PipelineResult:
    xml: str
    extraction: ExtractionResult                # Extraction the fills were keyed against
    duplication: Optional[DuplicationResult]    # None when no blueprint provider was given


def run_fill_pipeline(
    doc_xml: str,
    fill_provider: FillProvider,
    blueprint_provider: Optional[BlueprintProvider] = None,
    profile_counts: Union[ProfileCounts, dict, None] = None,
    verbose: bool = False,
) -> PipelineResult:
    """
    Fill one document.

    Each stage works on the exact string produced by the previous one:
    1. Extract segments from doc_xml.
    2. If a blueprint provider is given, ask it for a blueprint from the
       template map and duplicate repeating blocks up to profile_counts.
    3. Re-extract when anything was duplicated, since offsets and IDs change.
    4. Ask the fill provider for segment fills from the (new) template map.
    5. Apply the fills to the processed XML of that extraction.

    Args:
        doc_xml: Raw document.xml content
        fill_provider: template map -> {segment ID: text}
        blueprint_provider: template map -> TemplateBlueprint
        profile_counts: Target entry counts for duplication
        verbose: Print stage progress

    Returns:
        PipelineResult
    """
    extraction = extract_structured_segments(doc_xml, verbose=verbose)
    duplication = None

    if blueprint_provider is not None:
        blueprint = blueprint_provider(extraction.template_map)
        duplication = duplicate_blocks_in_xml(
            extraction.processed_xml,
            blueprint,
            extraction.segments,
            extraction.tables,
            profile_counts or ProfileCounts(),
            verbose=verbose,
        )
        if duplication.duplicated:
            if verbose:
                print("[Pipeline] Blocks duplicated, re-extracting segments")
            extraction = extract_structured_segments(duplication.xml, verbose=verbose)

    fills = fill_provider(extraction.template_map)
    xml = apply_structured_fills(
        extraction.processed_xml,
        fills,
        extraction.segments,
        extraction.merge_groups,
        verbose=verbose,
    )
    return PipelineResult(xml=xml, extraction=extraction, duplication=duplication)
