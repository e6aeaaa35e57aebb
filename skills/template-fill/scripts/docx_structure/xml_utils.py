#!/usr/bin/env python3
"""
ABOUTME: XML utility functions for document processing
ABOUTME: Provides sanitization for XML-incompatible characters and a parse check
"""

from typing import Optional

from lxml import etree

# XML 1.0 forbids every C0 control character except tab, LF and CR
_ILLEGAL_XML_CHARS = str.maketrans('', '', ''.join(
    chr(c) for c in range(0x20)
    if c not in (0x09, 0x0A, 0x0D)
))


def sanitize_xml_string(text: str) -> str:
    """
    Remove control characters that are illegal in XML 1.0.

    XML 1.0 allows: #x9 (tab), #xA (LF), #xD (CR), and #x20-#xD7FF, #xE000-#xFFFD, #x10000-#x10FFFF
    This function removes all other control characters (0x00-0x08, 0x0B, 0x0C, 0x0E-0x1F).

    Args:
        text: Text that may contain control characters

    Returns:
        Sanitized text safe for XML. Returns input unchanged if not a non-empty string.
    """
    if not text or not isinstance(text, str):
        return text
    return text.translate(_ILLEGAL_XML_CHARS)


def check_well_formed(xml: str) -> Optional[str]:
    """
    Parse xml with lxml and report the first well-formedness error.

    Args:
        xml: Complete XML document (an XML declaration is allowed)

    Returns:
        None if the document parses, otherwise the parser error message
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)
    try:
        etree.fromstring(xml.encode('utf-8'), parser)
    except etree.XMLSyntaxError as e:
        return str(e)
    return None
