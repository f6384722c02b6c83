"""
Entry point for importing an SPL document.

.. code-block:: XML

    <document xmlns="urn:hl7-org:v3">
        <id root="..."/>
        <code code="34391-3" codeSystem="2.16.840.1.113883.6.1"/>
        <title>...</title>
        <effectiveTime value="20210415"/>
        <setId root="..."/>
        <versionNumber value="3"/>
        <component>
            <structuredBody>
                <component><section>...</section></component>
                <component><section>...</section></component>
            </structuredBody>
        </component>
    </document>

The top level sections of the structured body are saved without a parent
edge; everything below them is linked by the section hierarchy resolver.
"""
from __future__ import annotations

import logging
from typing import IO
from typing import Optional
from typing import Union

from lxml import etree

from common.util import blank_to_none
from common.util import parse_nullable_int
from common.util import parse_nullable_uuid
from importer.context import ParseContext
from importer.exceptions import ImporterError
from importer.exceptions import MalformedReferenceError
from importer.hierarchy import child_section_elements
from importer.namespaces import Tags
from importer.parsers import EffectiveTimeMixin
from importer.parsers import ElementParser
from importer.parsers import TextElement
from importer.parsers import parse_element
from importer.results import ParseResult
from importer.sections import SectionParser
from importer.store import BaseStore
from importer.store import DjangoStore

logger = logging.getLogger(__name__)


class DocumentElement(EffectiveTimeMixin, ElementParser):
    tag = Tags.DOCUMENT
    id = ElementParser(Tags.ID)
    set_id = ElementParser(Tags.SET_ID)
    version_number = ElementParser(Tags.VERSION_NUMBER)
    code = ElementParser(Tags.CODE)
    title = TextElement(Tags.TITLE)
    effective_time = EffectiveTimeMixin.effective_time

    def clean(self):
        super().clean()
        code = self.data.get("code", {})
        self.data = {
            "raw_id": self.data.get("id", {}).get("root"),
            "set_guid": parse_nullable_uuid(self.data.get("set_id", {}).get("root")),
            "version_number": parse_nullable_int(
                self.data.get("version_number", {}).get("value"),
            ),
            "code": blank_to_none(code.get("code")),
            "code_system": blank_to_none(code.get("codeSystem")),
            "title": self.data.get("title"),
            "effective_time": self.data.get("effective_time"),
            "effective_time_low": self.data.get("effective_time_low"),
            "effective_time_high": self.data.get("effective_time_high"),
        }


class DocumentParser:
    """Saves a parsed SPL document and every section below its structured
    body."""

    def __init__(self, section_parser: Optional[SectionParser] = None):
        self.sections = section_parser or SectionParser()

    def parse(self, root: etree._Element, context: ParseContext) -> ParseResult:
        result = ParseResult()
        try:
            data = parse_element(DocumentElement(), root)
            raw_id = data.pop("raw_id", None)
            document_guid = parse_nullable_uuid(raw_id)
            if document_guid is None:
                raise MalformedReferenceError(
                    f"Document id {raw_id!r} is not a valid GUID",
                )
            data["document_guid"] = document_guid
            context.document, _ = context.store.upsert_document(data)
        except ImporterError as e:
            logger.error("Unable to import document %s: %s", context.file_name, e)
            result.record_exception(e, "Error parsing document")
            return result

        body = Tags.STRUCTURED_BODY.child(Tags.COMPONENT.child(root))
        if body is None:
            logger.warning("Document %s has no structured body", document_guid)
            return result

        for element in child_section_elements(body):
            _, section_result = self.sections.resolve_child_section(element, context)
            result.merge(section_result)

        logger.info("Imported document %s: %s", document_guid, result.summary())
        return result


def import_spl(
    source: Union[str, IO[bytes]],
    store: Optional[BaseStore] = None,
    use_bulk_operations: Optional[bool] = None,
) -> ParseResult:
    """
    Import one SPL file.

    ``use_bulk_operations`` overrides the ``SPL_USE_BULK_OPERATIONS`` setting
    when given. Raises ``lxml.etree.XMLSyntaxError`` if the file is not well
    formed XML.
    """
    context = ParseContext(
        store=store or DjangoStore(),
        file_name=getattr(source, "name", str(source)),
    )
    if use_bulk_operations is not None:
        context.use_bulk_operations = use_bulk_operations

    logger.info(
        "Importing %s (%s)",
        context.file_name,
        "batch" if context.use_bulk_operations else "incremental",
    )
    tree = etree.parse(source)
    return DocumentParser().parse(tree.getroot(), context)
