from __future__ import annotations

import logging
from typing import Any
from typing import Dict
from typing import Optional

from lxml import etree

from common.util import parse_hl7_date
from importer.namespaces import Tag
from importer.namespaces import Tags

logger = logging.getLogger(__name__)


class ElementParser:
    """
    Base class for element specific parsers.

    ElementParser classes uses introspection to build a lookup table of child element
    parsers to their output field name.

    Child parsers are declared as class attributes:

    .. code:: python

        class ChildElement(ElementParser):
            tag = Tag("child")
            field = TextElement(Tag("field"))

        class ParentElement(ElementParser):
            tag = Tag("parent")
            child = ChildElement()

    When handling XML such as:

    .. code:: xml

        <parent>
            <child id="2">
                <field>Text</field>
            </child>
            <component>
                <child id="3"/>
            </component>
        </parent>

    This class will build a dict in `self.data` with
    the following structure:

    .. code:: json

        {"child": {"id": "2", "field": "Text"}}

    Elements that no child parser claims are skipped together with everything
    below them, so a ``child`` nested inside an unknown element (the
    ``component`` above) is not mistaken for a direct child. SPL nests whole
    sections inside ``component`` elements, which is why this matters.
    """

    tag: Optional[Tag] = None
    data_class: type = dict

    def __init__(self, tag: Tag = None, many: bool = False):
        self.child = None
        self.parent: Optional[ElementParser] = None
        self.data = self.data_class()
        self.many = many
        self.text = None
        self.started = False
        self.skipped_depth = 0

        if tag:
            self.tag = tag

    @property
    def _field_lookup(self) -> Dict[ElementParser, str]:
        return {
            parser: field
            for field, parser in self.__class__.__dict__.items()
            if isinstance(parser, ElementParser)
        }

    def is_parser_for_element(
        self,
        parser: ElementParser,
        element: etree._Element,
    ) -> bool:
        """Check if the parser matches the element."""
        return parser.tag == element.tag

    def get_parser(self, element: etree._Element) -> Optional[ElementParser]:
        for parser in self._field_lookup.keys():
            if self.is_parser_for_element(parser, element):
                return parser

    def start(self, element: etree._Element, parent: ElementParser = None):
        """
        Handle the start of an XML tag. The tag may not yet have all of its
        children.

        We have a few cases where there are tags nested within a tag of the same name.

        Example:

        .. code:: xml

            <section>
                <id root="..."/>
                <component>
                    <section>
                        <id root="..."/>
                    </section>
                </component>
            </section>

        In this case matching on tags is not enough and so we also need to keep
        track of whether this parser is already parsing an element. If it is, we
        don't want to select any child parsers. If it is not, we know that this
        is an element that this parser should be parsing.
        """
        if self.skipped_depth:
            self.skipped_depth += 1
            return

        self.parent = parent
        if not self.started:
            self.data = self.data_class()
            self.text = None
            self.started = True
        else:
            # if the tag matches one of the child elements of this element, get the
            # parser for that element
            if not self.child:
                self.child = self.get_parser(element)
                if not self.child:
                    self.skipped_depth = 1
                    return

        # if currently in a child element, delegate to the child parser
        if self.child:
            self.child.start(element, self)

    def end(self, element: etree._Element):
        if self.skipped_depth:
            self.skipped_depth -= 1
            return

        # if currently in a child element, delegate to the child parser
        if self.child:
            self.child.end(element)

            # leaving the child element, so stop delegating
            if not self.child.started and self.is_parser_for_element(
                self.child,
                element,
            ):
                field_name = self._field_lookup[self.child]
                if self.child.many:
                    self.data.setdefault(field_name, []).append(self.child.data)
                else:
                    self.data[field_name] = self.child.data
                self.child = None

        # leaving this element, so marshal the data
        elif self.is_parser_for_element(self, element):
            self.text = self.get_text(element)
            self.data.update(element.attrib.items())
            self.started = False
            self.clean()
            self.validate()

    def get_text(self, element: etree._Element) -> Optional[str]:
        if element.text:
            return element.text.strip()

    def clean(self):
        """Clean up data."""

    def validate(self):
        """Validate data."""


class ValueElementMixin:
    """Provides a convenient way to define a parser for elements that contain
    only a text value and have no attributes or children."""

    native_type: type
    """The Python type that most closely matches the type of the XML element."""

    def clean(self):
        super().clean()
        self.data = self.native_type(self.text) if self.text else None


class TextElement(ValueElementMixin, ElementParser):
    """
    Represents an element which contains a text value.

    Text of inline markup inside the element is included, so
    ``<title>Tablets <sup>1</sup></title>`` reads as ``"Tablets 1"``.

    .. code-block:: XML

        <title>Example Text</title>
    """

    native_type = str

    def get_text(self, element: etree._Element) -> Optional[str]:
        text = " ".join("".join(element.itertext()).split())
        return text or None


def parse_element(parser: ElementParser, element: etree._Element) -> Any:
    """
    Run a parser over an element that has already been built.

    The parser receives the same start and end events it would get from
    ``etree.iterparse``, so parsers written for streaming work unchanged on a
    subtree of a parsed document.
    """
    for event, el in etree.iterwalk(element, events=("start", "end")):
        if event == "start":
            parser.start(el)
        else:
            parser.end(el)
    return parser.data


class EffectiveTimeElement(ElementParser):
    """
    Represents an ``effectiveTime``, either a single point in time or an
    interval.

    .. code-block:: XML

        <effectiveTime value="20210415"/>

        <effectiveTime>
            <low value="20200101"/>
            <high value="20221231"/>
        </effectiveTime>
    """

    tag = Tags.EFFECTIVE_TIME
    low = ElementParser(Tags.LOW)
    high = ElementParser(Tags.HIGH)

    def clean(self):
        super().clean()
        self.data = {
            "effective_time": parse_hl7_date(self.data.get("value")),
            "effective_time_low": parse_hl7_date(self.data.get("low", {}).get("value")),
            "effective_time_high": parse_hl7_date(
                self.data.get("high", {}).get("value"),
            ),
        }


class EffectiveTimeMixin:
    """
    Flattens a parsed ``effectiveTime`` child into the ``effective_time``,
    ``effective_time_low`` and ``effective_time_high`` fields of the parent's
    data.

    Parsers using this need to declare the child themselves:

    .. code:: python

        class SectionElement(EffectiveTimeMixin, ElementParser):
            effective_time = EffectiveTimeMixin.effective_time
    """

    effective_time = EffectiveTimeElement()

    def clean(self):
        super().clean()
        effective_time = self.data.pop("effective_time", None) or {}
        self.data.update(effective_time)
