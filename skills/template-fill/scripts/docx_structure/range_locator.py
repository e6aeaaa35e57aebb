"""
ABOUTME: Tag-aware element range locator for raw OOXML strings
ABOUTME: Tokenizes tags in one pass so <w:tbl> never matches <w:tblPr>
"""

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .common import ElementRange

TAG_OPEN = 'open'
TAG_CLOSE = 'close'
TAG_EMPTY = 'empty'   # self-closing <tag .../>

# End of a tag name: whitespace, "/" or ">"
_NAME_END = re.compile(r'[\s/>]')

# Rest of a start tag up to and including ">", skipping quoted attribute values
_TAG_REST = re.compile(r'[^"\'>]*(?:(?:"[^"]*"|\'[^\']*\')[^"\'>]*)*>')


@dataclass(frozen=True)
class TagToken:
    """A single start, end or empty-element tag"""
    kind: str
    name: str
    start: int
    end: int


def iter_tags(xml: str, start: int = 0, end: Optional[int] = None) -> Iterator[TagToken]:
    """
    Yield every tag inside xml[start:end] in document order.

    Comments, CDATA sections, processing instructions and declarations are
    skipped. Offsets are absolute positions in xml. Iteration stops at the
    first tag that is not terminated before `end`.

    Args:
        xml: Document text
        start: First position to scan
        end: Scan limit (exclusive), defaults to len(xml)

    Yields:
        TagToken for each tag found
    """
    limit = len(xml) if end is None else min(end, len(xml))
    pos = start

    while pos < limit:
        lt = xml.find('<', pos, limit)
        if lt == -1:
            return

        if xml.startswith('<!--', lt):
            close = xml.find('-->', lt + 4, limit)
            if close == -1:
                return
            pos = close + 3
            continue
        if xml.startswith('<![CDATA[', lt):
            close = xml.find(']]>', lt + 9, limit)
            if close == -1:
                return
            pos = close + 3
            continue
        if xml.startswith('<?', lt):
            close = xml.find('?>', lt + 2, limit)
            if close == -1:
                return
            pos = close + 2
            continue
        if xml.startswith('<!', lt):
            close = xml.find('>', lt + 2, limit)
            if close == -1:
                return
            pos = close + 1
            continue

        if xml.startswith('</', lt):
            gt = xml.find('>', lt + 2, limit)
            if gt == -1:
                return
            yield TagToken(TAG_CLOSE, xml[lt + 2:gt].strip(), lt, gt + 1)
            pos = gt + 1
            continue

        name_end = _NAME_END.search(xml, lt + 1, limit)
        if name_end is None:
            return
        name = xml[lt + 1:name_end.start()]
        if not name:
            # Stray "<" in malformed text
            pos = lt + 1
            continue

        rest = _TAG_REST.match(xml, name_end.start(), limit)
        if rest is None:
            return
        tag_end = rest.end()
        kind = TAG_EMPTY if xml[tag_end - 2] == '/' else TAG_OPEN
        yield TagToken(kind, name, lt, tag_end)
        pos = tag_end


def find_next_exact_open_tag(xml: str, tag_name: str, pos: int = 0,
                             end: Optional[int] = None) -> Optional[TagToken]:
    """
    Find the next start tag whose name is exactly tag_name.

    "w:tbl" matches <w:tbl> and <w:tbl ...> (and <w:tbl/>) but never <w:tblPr>.

    Returns:
        TagToken of kind TAG_OPEN or TAG_EMPTY, or None if there is none
    """
    for token in iter_tags(xml, pos, end):
        if token.name == tag_name and token.kind != TAG_CLOSE:
            return token
    return None


def find_element_range(xml: str, tag_name: str, pos: int = 0,
                       end: Optional[int] = None) -> Optional[ElementRange]:
    """
    Find the full range of the next balanced tag_name element at or after pos.

    Self-closing occurrences are skipped. Nested elements of the same name
    are balanced by depth.

    Returns:
        ElementRange spanning open tag through matching close tag, or None
        when no element starts after pos or its close tag is missing
    """
    depth = 0
    open_start = -1
    for token in iter_tags(xml, pos, end):
        if token.name != tag_name:
            continue
        if token.kind == TAG_OPEN:
            if depth == 0:
                open_start = token.start
            depth += 1
        elif token.kind == TAG_CLOSE and depth > 0:
            depth -= 1
            if depth == 0:
                return ElementRange(open_start, token.end)
    return None


def find_all_elements(xml: str, tag_name: str, start: int = 0,
                      end: Optional[int] = None) -> List[ElementRange]:
    """
    Find all outermost tag_name elements inside xml[start:end].

    Ranges are non-overlapping and in document order. Nested elements with
    the same name are folded into their outermost ancestor. If an element is
    never closed the scan stops there; ranges found before it are returned.

    Args:
        xml: Document text
        tag_name: Qualified tag name, e.g. "w:tbl"
        start: First position to scan
        end: Scan limit (exclusive)

    Returns:
        List of ElementRange with absolute offsets
    """
    results: List[ElementRange] = []
    depth = 0
    open_start = -1

    for token in iter_tags(xml, start, end):
        if token.name != tag_name:
            continue
        if token.kind == TAG_OPEN:
            if depth == 0:
                open_start = token.start
            depth += 1
        elif token.kind == TAG_CLOSE and depth > 0:
            depth -= 1
            if depth == 0:
                results.append(ElementRange(open_start, token.end))

    return results
