from __future__ import annotations

import logging
from typing import Optional
from typing import Tuple

from lxml import etree

from common.util import blank_to_none
from importer.context import ParseContext
from importer.exceptions import ImporterError
from importer.exceptions import MalformedReferenceError
from importer.hierarchy import SectionHierarchyResolver
from importer.hierarchy import child_section_elements
from importer.hierarchy import section_natural_key
from importer.namespaces import Tags
from importer.parsers import ElementParser
from importer.parsers import EffectiveTimeMixin
from importer.parsers import TextElement
from importer.parsers import parse_element
from importer.products import ProductParser
from importer.results import ParseResult
from labels.models import Section

logger = logging.getLogger(__name__)


class SectionElement(EffectiveTimeMixin, ElementParser):
    """
    Reads the header of a ``<section>``. Subsections, products and narrative
    text are left to other parsers.

    .. code-block:: XML

        <section ID="s1">
            <id root="6e8d5b9c-5c5a-4c4e-9b8c-0a3a9c7f2e11"/>
            <code code="34067-9" codeSystem="2.16.840.1.113883.6.1"
                  displayName="INDICATIONS &amp; USAGE SECTION"/>
            <title>1 INDICATIONS AND USAGE</title>
            <effectiveTime value="20210415"/>
            <text>...</text>
            <component>...</component>
        </section>
    """

    tag = Tags.SECTION
    id = ElementParser(Tags.ID)
    code = ElementParser(Tags.CODE)
    title = TextElement(Tags.TITLE)
    effective_time = EffectiveTimeMixin.effective_time

    def clean(self):
        super().clean()
        code = self.data.get("code", {})
        self.data = {
            "raw_id": self.data.get("id", {}).get("root"),
            "section_link_id": blank_to_none(self.data.get("ID")),
            "title": self.data.get("title"),
            "code": blank_to_none(code.get("code")),
            "code_system": blank_to_none(code.get("codeSystem")),
            "code_system_name": blank_to_none(code.get("codeSystemName")),
            "display_name": blank_to_none(code.get("displayName")),
            "effective_time": self.data.get("effective_time"),
            "effective_time_low": self.data.get("effective_time_low"),
            "effective_time_high": self.data.get("effective_time_high"),
        }


class SectionParser:
    """
    Persists SPL sections together with the products declared in them.

    Linking a section to its subsections is delegated to a
    :class:`~importer.hierarchy.SectionHierarchyResolver`, which calls back
    into :meth:`resolve_child_section` or :meth:`resolve_subtree` depending on
    the strategy it runs.
    """

    def __init__(
        self,
        product_parser: Optional[ProductParser] = None,
        hierarchy: Optional[SectionHierarchyResolver] = None,
    ):
        self.products = product_parser or ProductParser()
        self.hierarchy = hierarchy or SectionHierarchyResolver(content_parser=self)

    def parse_section(
        self,
        element: etree._Element,
        context: ParseContext,
    ) -> Tuple[Section, ParseResult]:
        """
        Upsert the section for ``element`` and parse the products it declares.

        Raises :class:`MalformedReferenceError` if the section has no usable
        id, and :class:`StoreError` if it can't be saved.
        """
        document = context.require_document()
        key = section_natural_key(element)

        data = parse_element(SectionElement(), element)
        data.pop("raw_id")
        data.update(document=document, section_guid=key)

        result = ParseResult()
        section, created = context.store.upsert_node(data)
        if created:
            result.sections_created += 1

        with context.scoped(section=section):
            result.merge(self.products.parse_products(element, context))

        return section, result

    def resolve_child_section(
        self,
        element: etree._Element,
        context: ParseContext,
    ) -> Tuple[Optional[Section], ParseResult]:
        """
        Persist one section and everything below it.

        Returns the saved section, or None if the section itself could not be
        saved. Failures further down the subtree are reported in the result
        but still return the section.
        """
        result = ParseResult()
        try:
            section, section_result = self.parse_section(element, context)
        except MalformedReferenceError as e:
            logger.warning("Skipping section: %s", e)
            result.record_exception(e, "Error parsing section")
            return None, result
        except ImporterError as e:
            logger.exception("Error parsing section")
            result.record_exception(e, "Error parsing section")
            return None, result

        result.merge(section_result)
        result.merge(self.hierarchy.resolve_hierarchy(section, element, context))
        return section, result

    def resolve_subtree(
        self,
        element: etree._Element,
        context: ParseContext,
        deep: bool = True,
        result: Optional[ParseResult] = None,
    ) -> ParseResult:
        """
        Persist every section below ``element`` without linking any of them.

        Sections are saved depth-first in document order, so on an empty store
        their ids follow document order. A section with a malformed id is
        skipped together with its subtree. Store failures propagate; counts
        made before the failure are already in ``result`` when one is passed
        in.
        """
        if result is None:
            result = ParseResult()
        for child_element in child_section_elements(element):
            try:
                section, section_result = self.parse_section(child_element, context)
            except MalformedReferenceError as e:
                logger.warning("Skipping section: %s", e)
                result.record_exception(e, "Error parsing section")
                continue

            result.merge(section_result)
            if deep:
                with context.scoped(section=section):
                    self.resolve_subtree(child_element, context, result=result)
        return result
