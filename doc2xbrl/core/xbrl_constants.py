# Path: doc2xbrl/core/xbrl_constants.py
"""
XBRL Constants

Namespace URIs, schema references and prefix tables shared by the
XML-instance parser, the instance generator and the structural validator.

NO HARDCODED namespace URIs should exist in other modules - import them
from here.
"""

from typing import Final

from constants import Framework


# ==============================================================================
# XBRL INFRASTRUCTURE NAMESPACES
# ==============================================================================

XBRLI_NS: Final[str] = 'http://www.xbrl.org/2003/instance'
XBRLDI_NS: Final[str] = 'http://xbrl.org/2006/xbrldi'
LINK_NS: Final[str] = 'http://www.xbrl.org/2003/linkbase'
XLINK_NS: Final[str] = 'http://www.w3.org/1999/xlink'
XSI_NS: Final[str] = 'http://www.w3.org/2001/XMLSchema-instance'
ISO4217_NS: Final[str] = 'http://www.xbrl.org/2003/iso4217'

# ==============================================================================
# TAXONOMY NAMESPACES
# ==============================================================================

US_GAAP_NS: Final[str] = 'http://xbrl.us/us-gaap/2009-01-31'
IFRS_NS: Final[str] = 'http://xbrl.ifrs.org/taxonomy/2023-03-31/ifrs-full'
DEI_NS: Final[str] = 'http://xbrl.sec.gov/dei/2023-01-31'

# Prefix -> namespace map declared on every generated instance
NAMESPACES: Final[dict] = {
    'xbrli': XBRLI_NS,
    'link': LINK_NS,
    'xlink': XLINK_NS,
    'xsi': XSI_NS,
    'iso4217': ISO4217_NS,
    'us-gaap': US_GAAP_NS,
    'ifrs-full': IFRS_NS,
    'dei': DEI_NS,
}

# Namespaces whose elements are never facts
INFRASTRUCTURE_NAMESPACES: Final[frozenset] = frozenset({
    XBRLI_NS, XBRLDI_NS, LINK_NS, XLINK_NS, XSI_NS, DEI_NS,
})

# Prefixes whose elements are never facts (for documents with unusual URIs)
NON_FINANCIAL_PREFIXES: Final[frozenset] = frozenset({
    'xbrli', 'xbrldi', 'link', 'xlink', 'dei', 'custom',
    'calc', 'def', 'label', 'pres', 'ref', 'gen',
})

# ==============================================================================
# FRAMEWORK TABLES
# ==============================================================================

SCHEMA_REFS: Final[dict] = {
    Framework.US_GAAP: (
        'http://xbrl.us/us-gaap/2009-01-31/us-gaap-2009-01-31.xsd',
        'http://xbrl.sec.gov/dei/2023-01-31/dei-2023-01-31.xsd',
    ),
    Framework.IFRS: (
        'http://xbrl.ifrs.org/taxonomy/2023-03-31/ifrs-full-2023-03-31.xsd',
    ),
    Framework.OTHER: (
        'http://www.xbrl.org/2003/xbrl-instance-2003-12-31.xsd',
    ),
}

FRAMEWORK_PREFIX: Final[dict] = {
    Framework.US_GAAP: 'us-gaap',
    Framework.IFRS: 'ifrs-full',
    Framework.OTHER: 'us-gaap',
}

# Tag prefix -> framework, for tags found in instances and taxonomy rows
PREFIX_FRAMEWORK: Final[dict] = {
    'us-gaap': Framework.US_GAAP,
    'usgaap': Framework.US_GAAP,
    'ifrs': Framework.IFRS,
    'ifrs-full': Framework.IFRS,
}

# Legacy prefix spellings normalized on output
PREFIX_ALIASES: Final[dict] = {
    'ifrs': 'ifrs-full',
    'usgaap': 'us-gaap',
}

DEFAULT_ENTITY_SCHEME: Final[str] = 'http://www.sec.gov/CIK'
PURE_UNIT_ID: Final[str] = 'pure'
LINKBASE_SIMPLE_TYPE: Final[str] = 'simple'


def framework_for_tag(tag: str, default: Framework = Framework.US_GAAP) -> Framework:
    """
    Framework of a prefixed tag.

    Args:
        tag: Tag such as 'us-gaap:Assets' or 'ifrs-full:Revenue'
        default: Framework for unprefixed or unknown tags

    Returns:
        Framework
    """
    if ':' not in (tag or ''):
        return default
    prefix = tag.split(':', 1)[0].lower()
    return PREFIX_FRAMEWORK.get(prefix, default)


__all__ = [
    'XBRLI_NS',
    'XBRLDI_NS',
    'LINK_NS',
    'XLINK_NS',
    'XSI_NS',
    'ISO4217_NS',
    'US_GAAP_NS',
    'IFRS_NS',
    'DEI_NS',
    'NAMESPACES',
    'INFRASTRUCTURE_NAMESPACES',
    'NON_FINANCIAL_PREFIXES',
    'SCHEMA_REFS',
    'FRAMEWORK_PREFIX',
    'PREFIX_FRAMEWORK',
    'PREFIX_ALIASES',
    'DEFAULT_ENTITY_SCHEME',
    'PURE_UNIT_ID',
    'LINKBASE_SIMPLE_TYPE',
    'framework_for_tag',
]
