"""
ABOUTME: Turns empty-but-formatted table cell slots into fillable text runs
ABOUTME: Replaces the first <w:br/> of a text-less cell with a single-space <w:t>
"""

from .common import PLACEHOLDER_TEXT_XML, PLAIN_BR_PATTERN, WT_OPEN_PATTERN
from .patch_list import PatchList
from .range_locator import find_all_elements


def _is_placeholder_run(run_xml: str) -> bool:
    """A run with a plain line break, no text and no VML picture"""
    return (
        PLAIN_BR_PATTERN.search(run_xml) is not None
        and WT_OPEN_PATTERN.search(run_xml) is None
        and '<w:pict' not in run_xml
    )


def inject_placeholders_for_empty_cells(doc_xml: str, verbose: bool = False) -> str:
    """
    Inject a placeholder <w:t> into every table cell that has line breaks but no text.

    Word templates often mark an empty slot as a styled run holding only
    <w:br/>:

        <w:r><w:rPr>...</w:rPr><w:br/></w:r>

    Such a run has no <w:t> and would never become a segment. The first
    qualifying run of each qualifying cell becomes:

        <w:r><w:rPr>...</w:rPr><w:t xml:space="preserve"> </w:t></w:r>

    Only outermost cells are inspected; a cell that holds a nested table
    is treated as one cell. Runs containing <w:pict> (horizontal rules and
    other decorative shapes) are never touched.

    Args:
        doc_xml: Raw document.xml content
        verbose: Print a summary line

    Returns:
        New XML string (unchanged if no cell qualifies)
    """
    patches = PatchList()

    for cell in find_all_elements(doc_xml, 'w:tc'):
        cell_xml = doc_xml[cell.start:cell.end]
        if WT_OPEN_PATTERN.search(cell_xml):
            continue
        if not PLAIN_BR_PATTERN.search(cell_xml):
            continue

        for run in find_all_elements(doc_xml, 'w:r', cell.start, cell.end):
            run_xml = doc_xml[run.start:run.end]
            if not _is_placeholder_run(run_xml):
                continue
            br = PLAIN_BR_PATTERN.search(run_xml)
            patches.replace(run.start + br.start(), run.start + br.end(), PLACEHOLDER_TEXT_XML)
            break

    if verbose and patches:
        print(f"[Placeholder] Injected {len(patches)} placeholder(s) into empty table cells")

    return patches.apply(doc_xml)
