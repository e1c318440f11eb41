# Path: doc2xbrl/core/xml_parser.py
"""
Secure XML Parsing

lxml parser factory with entity resolution and network access disabled.
Every XML document read by doc2xbrl (uploaded instances, generated
output under validation) goes through parse_xml().
"""

from lxml import etree


def create_xml_parser(recover: bool = False) -> etree.XMLParser:
    """
    Create an lxml parser hardened against XXE and entity expansion.

    Args:
        recover: Enable lxml error recovery mode

    Returns:
        Configured XMLParser instance
    """
    return etree.XMLParser(
        recover=recover,
        remove_blank_text=False,
        resolve_entities=False,  # XXE protection
        no_network=True,
        huge_tree=False,  # Prevent billion laughs attack
        remove_comments=True,
    )


def parse_xml(content: bytes, recover: bool = False) -> etree._Element:
    """
    Parse XML bytes into a root element.

    Args:
        content: XML document bytes
        recover: Enable lxml error recovery mode

    Returns:
        Root element

    Raises:
        etree.XMLSyntaxError: Document is not well-formed
        ValueError: Document is empty
    """
    if not content or not content.strip():
        raise ValueError('XML document is empty')
    root = etree.fromstring(content, parser=create_xml_parser(recover))
    if root is None:
        raise ValueError('XML document has no root element')
    return root


__all__ = ['create_xml_parser', 'parse_xml']
