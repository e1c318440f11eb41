# Path: doc2xbrl/output/xbrl/validator.py
"""
Structural Validator

Checks the structure of an XBRL instance, not its taxonomy semantics:
- the document parses as XML and its root is xbrli:xbrl
- at least one schema reference, context, unit and financial fact
- every contextRef and unitRef resolves to a declared id
- context and unit ids are unique

Returns a list of human-readable issues; an empty list means valid.
"""

from typing import Union

from lxml import etree

from core.logger.ipo_logging import get_output_logger
from core.xbrl_constants import DEI_NS, INFRASTRUCTURE_NAMESPACES, LINK_NS, XBRLI_NS
from core.xml_parser import parse_xml


class StructuralValidator:
    """
    Structural checks over a generated (or uploaded) instance.

    Example:
        issues = StructuralValidator().validate(result.document)
        if issues:
            print('\\n'.join(issues))
    """

    def __init__(self):
        """Initialize validator."""
        self.logger = get_output_logger('xbrl.validator')

    def validate(self, document: Union[bytes, str]) -> list[str]:
        """
        Validate an instance document.

        Args:
            document: Instance XML (bytes or text)

        Returns:
            List of issues (empty when structurally valid)
        """
        if isinstance(document, str):
            document = document.encode('utf-8')

        try:
            root = parse_xml(document)
        except (etree.XMLSyntaxError, ValueError) as e:
            return [f"Document is not well-formed XML: {e}"]

        issues: list[str] = []

        if root.tag != f'{{{XBRLI_NS}}}xbrl':
            issues.append(f"Root element is {root.tag}, expected xbrli:xbrl")

        if not root.findall(f'{{{LINK_NS}}}schemaRef'):
            issues.append('Missing required element: link:schemaRef')

        context_ids = self._declared_ids(root, 'context', issues)
        unit_ids = self._declared_ids(root, 'unit', issues)

        if not context_ids:
            issues.append('Missing required element: xbrli:context')
        else:
            issues.extend(self._check_contexts(root))
        if not unit_ids:
            issues.append('Missing required element: xbrli:unit')

        financial_facts = 0
        for element in root:
            if not isinstance(element.tag, str):
                continue
            namespace = etree.QName(element).namespace
            if namespace in INFRASTRUCTURE_NAMESPACES and namespace != DEI_NS:
                continue

            name = etree.QName(element).localname
            context_ref = element.get('contextRef')
            if context_ref is None:
                issues.append(f"Fact {name} has no contextRef")
            elif context_ref not in context_ids:
                issues.append(f"Fact {name} references undeclared context '{context_ref}'")

            unit_ref = element.get('unitRef')
            if unit_ref is not None and unit_ref not in unit_ids:
                issues.append(f"Fact {name} references undeclared unit '{unit_ref}'")

            if namespace != DEI_NS:
                financial_facts += 1

        if financial_facts == 0:
            issues.append('No financial facts found in document')

        if issues:
            self.logger.warning(f"Structural validation found {len(issues)} issues")
        else:
            self.logger.debug('Structural validation passed')
        return issues

    def _declared_ids(self, root: etree._Element, local_name: str, issues: list[str]) -> set[str]:
        ids: set[str] = set()
        for element in root.findall(f'{{{XBRLI_NS}}}{local_name}'):
            element_id = element.get('id')
            if not element_id:
                issues.append(f"xbrli:{local_name} without id")
                continue
            if element_id in ids:
                issues.append(f"Duplicate {local_name} id '{element_id}'")
            ids.add(element_id)
        return ids

    def _check_contexts(self, root: etree._Element) -> list[str]:
        issues = []
        for context in root.findall(f'{{{XBRLI_NS}}}context'):
            context_id = context.get('id')
            if context.find(f'{{{XBRLI_NS}}}entity/{{{XBRLI_NS}}}identifier') is None:
                issues.append(f"Context '{context_id}' has no entity identifier")
            period = context.find(f'{{{XBRLI_NS}}}period')
            if period is None or len(period) == 0:
                issues.append(f"Context '{context_id}' has no period")
        return issues


__all__ = ['StructuralValidator']
