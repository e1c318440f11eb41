# Path: doc2xbrl/output/xbrl/generator.py
"""
XBRL Instance Generator

Writes matched statements as an XBRL 2.1 instance document.

Document layout:
    xbrli:xbrl (all namespaces declared on the root)
        link:schemaRef      one per framework schema
        xbrli:context       one per statement period + Document_{date}
        xbrli:unit          monetary unit (id = currency code), pure
        dei:*               entity facts in the document context
        us-gaap:* / ifrs-full:*   one fact per line item

Items whose tag is unusable are skipped and reported in the metadata;
generation itself never raises for bad items.

Example:
    generator = XBRLGenerator()
    result = generator.generate(report.statements, GenerationOptions(currency='EUR'))
    Path('out.xbrl').write_bytes(result.document)
"""

import time
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from lxml import etree

from constants import Framework
from core.logger.ipo_logging import get_output_logger
from core.xbrl_constants import (
    DEFAULT_ENTITY_SCHEME,
    DEI_NS,
    LINK_NS,
    LINKBASE_SIMPLE_TYPE,
    NAMESPACES,
    PURE_UNIT_ID,
    SCHEMA_REFS,
    XBRLI_NS,
    XLINK_NS,
    XSI_NS,
    framework_for_tag,
)
from parsers.models.canonical import LineItem, Statement

from .contexts import ContextPlanner, build_context, document_context_id
from .formatting import format_date, format_value, is_xml_text, resolve_tag
from .validator import StructuralValidator


UNKNOWN_ENTITY = 'UNKNOWN'


@dataclass
class GenerationOptions:
    """
    Instance-level settings.

    Attributes:
        framework: Target framework (schema references, synthesized prefixes)
        currency: ISO 4217 code of the monetary unit
        document_date: Date of the document context (default: latest period end)
        entity_name: dei:EntityRegistrantName, omitted when None
        entity_identifier: Entity identifier text
        entity_scheme: Entity identifier scheme
    """
    framework: Framework = Framework.US_GAAP
    currency: str = 'USD'
    document_date: Optional[date] = None
    entity_name: Optional[str] = None
    entity_identifier: str = UNKNOWN_ENTITY
    entity_scheme: str = DEFAULT_ENTITY_SCHEME


@dataclass
class GenerationMetadata:
    """Facts about a generated instance."""
    total_facts: int = 0
    skipped_facts: int = 0
    frameworks: list[str] = field(default_factory=list)
    currencies: list[str] = field(default_factory=list)
    contexts: list[str] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.utcnow)
    generation_time_ms: float = 0.0
    validation_issues: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'total_facts': self.total_facts,
            'skipped_facts': self.skipped_facts,
            'frameworks': list(self.frameworks),
            'currencies': list(self.currencies),
            'contexts': list(self.contexts),
            'generated_at': self.generated_at.isoformat(),
            'generation_time_ms': self.generation_time_ms,
            'validation_issues': list(self.validation_issues),
        }


@dataclass
class GenerationResult:
    """Generated document bytes plus metadata."""
    document: bytes
    metadata: GenerationMetadata

    @property
    def is_valid(self) -> bool:
        """Check if no issues were recorded."""
        return not self.metadata.validation_issues


class XBRLGenerator:
    """
    Builds XBRL instance documents with lxml.

    Example:
        generator = XBRLGenerator()
        result = generator.generate(statements, GenerationOptions())
        print(result.metadata.total_facts)
    """

    def __init__(self, validator: Optional[StructuralValidator] = None):
        """
        Initialize generator.

        Args:
            validator: Structural validator run on every document
        """
        self.logger = get_output_logger('xbrl.generator')
        self.validator = validator or StructuralValidator()

    def generate(
        self,
        statements: list[Statement],
        options: Optional[GenerationOptions] = None
    ) -> GenerationResult:
        """
        Generate an instance document.

        Args:
            statements: Statements with (optionally matched) items
            options: Instance settings

        Returns:
            GenerationResult with UTF-8 document bytes
        """
        options = options or GenerationOptions()
        started = time.time()
        metadata = GenerationMetadata()

        currency = (options.currency or '').strip().upper()
        if len(currency) != 3 or not currency.isalpha():
            metadata.validation_issues.append(
                f"Invalid currency code '{options.currency}', using USD"
            )
            currency = 'USD'
        metadata.currencies = [currency]

        document_date = options.document_date or self._latest_period_end(statements)

        self.logger.info(
            f"Generating {options.framework.value} instance for "
            f"{len(statements)} statements ({currency})"
        )

        root = etree.Element(f'{{{XBRLI_NS}}}xbrl', nsmap=dict(NAMESPACES))

        # Schema references
        for href in SCHEMA_REFS.get(options.framework, SCHEMA_REFS[Framework.OTHER]):
            etree.SubElement(
                root,
                f'{{{LINK_NS}}}schemaRef',
                attrib={
                    f'{{{XLINK_NS}}}type': LINKBASE_SIMPLE_TYPE,
                    f'{{{XLINK_NS}}}href': href,
                },
            )

        # Contexts
        planner = ContextPlanner()
        statement_contexts = [planner.context_for(statement) for statement in statements]
        doc_context = document_context_id(document_date)
        planner.add_instant(doc_context, document_date)

        identifier = options.entity_identifier or UNKNOWN_ENTITY
        scheme = options.entity_scheme or DEFAULT_ENTITY_SCHEME
        if not (is_xml_text(identifier) and is_xml_text(scheme)):
            metadata.validation_issues.append(
                f"Invalid entity identifier {identifier!r}, using {UNKNOWN_ENTITY}"
            )
            identifier, scheme = UNKNOWN_ENTITY, DEFAULT_ENTITY_SCHEME
        for spec in planner.specs:
            build_context(root, spec, identifier, scheme)
        metadata.contexts = planner.context_ids

        # Units
        self._add_unit(root, currency, f'iso4217:{currency}')
        self._add_unit(root, PURE_UNIT_ID, 'xbrli:pure')

        # Entity information
        self._add_entity_information(root, options, doc_context, document_date, metadata)

        # Financial facts
        frameworks: list[str] = []
        for statement, context_id in zip(statements, statement_contexts):
            for item in statement.items:
                fact_framework = self._add_fact(root, item, context_id, currency, options, metadata)
                if fact_framework is not None and fact_framework.value not in frameworks:
                    frameworks.append(fact_framework.value)
        metadata.frameworks = frameworks or [options.framework.value]

        document = etree.tostring(
            root,
            xml_declaration=True,
            encoding='UTF-8',
            pretty_print=True,
        )

        metadata.validation_issues.extend(self.validator.validate(document))
        metadata.generation_time_ms = (time.time() - started) * 1000

        self.logger.info(
            f"Generated {metadata.total_facts} facts in {len(metadata.contexts)} contexts "
            f"({metadata.skipped_facts} skipped, "
            f"{len(metadata.validation_issues)} issues)"
        )
        return GenerationResult(document=document, metadata=metadata)

    # ==========================================================================
    # BUILDING BLOCKS
    # ==========================================================================

    def _latest_period_end(self, statements: list[Statement]) -> date:
        if not statements:
            return date.today()
        return max(statement.period_end for statement in statements)

    def _add_unit(self, root: etree._Element, unit_id: str, measure: str) -> None:
        unit = etree.SubElement(root, f'{{{XBRLI_NS}}}unit', attrib={'id': unit_id})
        measure_element = etree.SubElement(unit, f'{{{XBRLI_NS}}}measure')
        measure_element.text = measure

    def _add_entity_information(
        self,
        root: etree._Element,
        options: GenerationOptions,
        context_id: str,
        document_date: date,
        metadata: GenerationMetadata
    ) -> None:
        if options.entity_name:
            try:
                fact = etree.Element(
                    f'{{{DEI_NS}}}EntityRegistrantName', attrib={'contextRef': context_id}
                )
                fact.text = options.entity_name
                root.append(fact)
            except ValueError as e:
                metadata.validation_issues.append(f"Skipped entity name: {e}")
                self.logger.warning(f"Failed to write entity name: {e}")

        fact = etree.SubElement(
            root, f'{{{DEI_NS}}}DocumentPeriodEndDate', attrib={'contextRef': context_id}
        )
        fact.text = format_date(document_date)

        fact = etree.SubElement(
            root, f'{{{DEI_NS}}}DocumentFiscalYearFocus', attrib={'contextRef': context_id}
        )
        fact.text = str(document_date.year)

    def _add_fact(
        self,
        root: etree._Element,
        item: LineItem,
        context_id: str,
        currency: str,
        options: GenerationOptions,
        metadata: GenerationMetadata
    ) -> Optional[Framework]:
        """
        Append one fact.

        Returns:
            Framework of the written fact, None when skipped
        """
        tag, reason = resolve_tag(item, options.framework)
        if tag is None:
            metadata.skipped_facts += 1
            metadata.validation_issues.append(f"Skipped '{item.concept}': {reason}")
            self.logger.debug(f"Skipped fact '{item.concept}': {reason}")
            return None

        attrib = {'contextRef': context_id}
        text = None
        try:
            if item.is_nil or item.value is None:
                attrib['unitRef'] = currency
                attrib[f'{{{XSI_NS}}}nil'] = 'true'
            elif item.is_numeric:
                attrib['unitRef'] = currency
                if item.decimals is not None:
                    attrib['decimals'] = str(item.decimals)
                text = format_value(item.value, item.decimals)
            else:
                attrib['unitRef'] = PURE_UNIT_ID
                text = format_value(item.value)

            fact = etree.Element(f'{{{NAMESPACES[tag.prefix]}}}{tag.local_name}', attrib=attrib)
            fact.text = text
        except ValueError as e:
            metadata.skipped_facts += 1
            metadata.validation_issues.append(f"Skipped '{item.concept}': {e}")
            self.logger.warning(f"Failed to create fact for item {item.concept}: {e}")
            return None

        root.append(fact)
        metadata.total_facts += 1
        return framework_for_tag(tag.qname, options.framework)


__all__ = [
    'GenerationOptions',
    'GenerationMetadata',
    'GenerationResult',
    'XBRLGenerator',
]
