"""Provides a dataclass for xml element tags and the SPL tags the importer
reads."""
from dataclasses import dataclass
from dataclasses import field
from typing import Dict
from typing import Iterator
from typing import Optional
from typing import TypeVar
from typing import Union

from lxml import etree

from common.xml.namespaces import HL7
from common.xml.namespaces import nsmap

TTag = TypeVar("TTag", bound="Tag")


@dataclass
class Tag:
    """
    A dataclass for xml element tags.

    :py:attr:`name` corresponds to the local name of the element in the HL7 v3
    schema.

    :py:attr:`prefix` reflects namespace prefixes defined in
    :mod:`common.xml.namespaces`.

    :py:attr:`nsmap` this is a prefix-namespace mapping in the format required by
    lxml
    """

    name: str
    prefix: str = field(default=HL7)
    nsmap: Dict[str, str] = field(default_factory=lambda: nsmap)

    @property
    def namespace(self) -> str:
        """Returns the namespace for the tag."""
        return self.nsmap.get(self.prefix)

    @property
    def qualified_name(self) -> str:
        """Returns a fully qualified element tag."""
        ns = self.namespace

        if ns is None:
            return self.name

        return f"{{{ns}}}{self.name}"

    def children(self, parent: etree._Element) -> Iterator[etree._Element]:
        """Returns an iterator of the direct children of the parent matching
        this tag's name, in document order."""
        qname = self.qualified_name
        return (el for el in parent if el.tag == qname)

    def child(self, parent: Optional[etree._Element]) -> Optional[etree._Element]:
        """Returns the first direct child of the parent matching this tag's
        name."""
        if parent is None:
            return
        return next(self.children(parent), None)

    def __eq__(self, tag: Union[str, TTag]) -> bool:
        """Returns true if the qualified names of the two tags are equal."""
        if isinstance(tag, Tag):
            tag_qualified_name = tag.qualified_name
        else:
            tag_qualified_name = tag

        return self.qualified_name == tag_qualified_name

    def __hash__(self):
        return hash(self.qualified_name)

    def __str__(self):
        """Returns a string representation of the tag."""
        return self.qualified_name


class Tags:
    """The SPL elements the importer navigates."""

    DOCUMENT = Tag("document")
    ID = Tag("id")
    SET_ID = Tag("setId")
    VERSION_NUMBER = Tag("versionNumber")
    CODE = Tag("code")
    TITLE = Tag("title")
    EFFECTIVE_TIME = Tag("effectiveTime")
    LOW = Tag("low")
    HIGH = Tag("high")
    COMPONENT = Tag("component")
    STRUCTURED_BODY = Tag("structuredBody")
    SECTION = Tag("section")
    SUBJECT = Tag("subject")
    MANUFACTURED_PRODUCT = Tag("manufacturedProduct")
    NAME = Tag("name")
    FORM_CODE = Tag("formCode")
    AS_CONTENT = Tag("asContent")
    QUANTITY = Tag("quantity")
    NUMERATOR = Tag("numerator")
    CONTAINER_PACKAGED_PRODUCT = Tag("containerPackagedProduct")
    SUBJECT_OF = Tag("subjectOf")
    CHARACTERISTIC = Tag("characteristic")
    VALUE = Tag("value")
    ORIGINAL_TEXT = Tag("originalText")
