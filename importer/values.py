"""
Decoding of SPL ``characteristic/value`` elements.

The shape of a characteristic's value depends on the ``xsi:type`` of its
``<value>`` element. Each supported type decodes to one value variant:

.. code-block:: XML

    <characteristic>
        <code code="SPLSIZE" codeSystem="2.16.840.1.113883.1.11.19255"/>
        <value xsi:type="PQ" value="12" unit="mm"/>
    </characteristic>

decodes to ``QuantityValue(value=Decimal("12"), unit="mm")``. Types the
importer does not know decode to :class:`UnknownValue`.

Decoding never raises. Tokens that do not parse (``value="twelve"`` on a
``PQ``) decode to ``None`` and a warning is logged. Decimals are rounded to
the scale of the decimal columns, and magnitudes those columns cannot hold
are treated as tokens that do not parse.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from typing import Callable
from typing import Dict
from typing import Optional
from typing import Union

from lxml import etree

from common.util import blank_to_none
from common.util import parse_nullable_bool
from common.util import parse_nullable_decimal
from common.util import parse_nullable_int
from common.xml.namespaces import HL7
from common.xml.namespaces import XSI_TYPE
from common.xml.namespaces import nsmap
from importer.namespaces import Tags
from labels.models import DECIMAL_MAX_DIGITS
from labels.models import DECIMAL_PLACES

logger = logging.getLogger(__name__)

VALUE_COLUMNS = (
    "quantity_value",
    "quantity_unit",
    "integer_value",
    "null_flavor",
    "interval_low_value",
    "interval_low_unit",
    "interval_high_value",
    "interval_high_unit",
    "coded_code",
    "coded_code_system",
    "coded_display_name",
    "string_value",
    "media_type",
    "media_content",
    "boolean_value",
)
"""Every column of :class:`labels.models.Characteristic` a value variant can
fill."""


@dataclass(frozen=True)
class QuantityValue:
    value: Optional[Decimal] = None
    unit: Optional[str] = None

    def columns(self) -> Dict[str, Any]:
        return {"quantity_value": self.value, "quantity_unit": self.unit}


@dataclass(frozen=True)
class IntegerValue:
    value: Optional[int] = None
    null_flavor: Optional[str] = None

    def columns(self) -> Dict[str, Any]:
        return {"integer_value": self.value, "null_flavor": self.null_flavor}


@dataclass(frozen=True)
class IntervalValue:
    low_value: Optional[Decimal] = None
    low_unit: Optional[str] = None
    high_value: Optional[Decimal] = None
    high_unit: Optional[str] = None

    def columns(self) -> Dict[str, Any]:
        return {
            "interval_low_value": self.low_value,
            "interval_low_unit": self.low_unit,
            "interval_high_value": self.high_value,
            "interval_high_unit": self.high_unit,
        }


@dataclass(frozen=True)
class CodedValue:
    code: Optional[str] = None
    code_system: Optional[str] = None
    display_name: Optional[str] = None

    def columns(self) -> Dict[str, Any]:
        return {
            "coded_code": self.code,
            "coded_code_system": self.code_system,
            "coded_display_name": self.display_name,
        }


@dataclass(frozen=True)
class StringValue:
    text: Optional[str] = None
    code: Optional[str] = None
    code_system: Optional[str] = None

    def columns(self) -> Dict[str, Any]:
        return {
            "coded_code": self.code,
            "coded_code_system": self.code_system,
            "string_value": self.text,
        }


@dataclass(frozen=True)
class EncodedMediaValue:
    media_type: Optional[str] = None
    content: Optional[str] = None
    """The file name of the media, or its inline content when no file name is
    given."""

    def columns(self) -> Dict[str, Any]:
        return {"media_type": self.media_type, "media_content": self.content}


@dataclass(frozen=True)
class BooleanValue:
    value: Optional[bool] = None

    def columns(self) -> Dict[str, Any]:
        return {"boolean_value": self.value}


@dataclass(frozen=True)
class UnknownValue:
    """A value whose type is missing or not one the importer decodes."""

    def columns(self) -> Dict[str, Any]:
        return {}


ValueVariant = Union[
    QuantityValue,
    IntegerValue,
    IntervalValue,
    CodedValue,
    StringValue,
    EncodedMediaValue,
    BooleanValue,
    UnknownValue,
]


def get_value_type(element: Optional[etree._Element]) -> Optional[str]:
    """Returns the ``xsi:type`` of an element without any namespace prefix,
    e.g. ``"IVL_PQ"``."""
    if element is None:
        return None
    value_type = blank_to_none(element.get(XSI_TYPE))
    if value_type is None:
        return None
    return value_type.rsplit(":", 1)[-1].strip()


def _attribute(element: Optional[etree._Element], name: str) -> Optional[str]:
    if element is None:
        return None
    return blank_to_none(element.get(name))


def _decimal(element: Optional[etree._Element], name: str) -> Optional[Decimal]:
    token = _attribute(element, name)
    value = parse_nullable_decimal(token, DECIMAL_MAX_DIGITS, DECIMAL_PLACES)
    if token is not None and value is None:
        logger.warning("Ignoring malformed decimal %s=%r", name, token)
    return value


def _text(element: etree._Element) -> Optional[str]:
    """The text content of an element, excluding any ``originalText`` child,
    with runs of whitespace collapsed."""
    parts = element.xpath(
        "text() | *[not(self::hl7:originalText)]//text()",
        namespaces={"hl7": nsmap[HL7]},
    )
    return blank_to_none(" ".join("".join(parts).split()))


def decode_quantity(element: etree._Element) -> QuantityValue:
    return QuantityValue(
        value=_decimal(element, "value"),
        unit=_attribute(element, "unit"),
    )


def decode_integer(element: etree._Element) -> IntegerValue:
    token = _attribute(element, "value")
    value = parse_nullable_int(token)
    if token is not None and value is None:
        logger.warning("Ignoring malformed integer value=%r", token)
    return IntegerValue(value=value, null_flavor=_attribute(element, "nullFlavor"))


def decode_coded(element: etree._Element) -> CodedValue:
    return CodedValue(
        code=_attribute(element, "code"),
        code_system=_attribute(element, "codeSystem"),
        display_name=_attribute(element, "displayName"),
    )


def decode_string(element: etree._Element) -> StringValue:
    return StringValue(
        text=_text(element),
        code=_attribute(element, "code"),
        code_system=_attribute(element, "codeSystem"),
    )


def decode_interval(element: etree._Element) -> IntervalValue:
    low = Tags.LOW.child(element)
    high = Tags.HIGH.child(element)
    return IntervalValue(
        low_value=_decimal(low, "value"),
        low_unit=_attribute(low, "unit"),
        high_value=_decimal(high, "value"),
        high_unit=_attribute(high, "unit"),
    )


def decode_encoded_media(element: etree._Element) -> EncodedMediaValue:
    return EncodedMediaValue(
        media_type=_attribute(element, "mediaType"),
        content=_attribute(element, "displayName") or _text(element),
    )


def decode_boolean(element: etree._Element) -> BooleanValue:
    token = _attribute(element, "value")
    value = parse_nullable_bool(token)
    if token is not None and value is None:
        logger.warning("Ignoring malformed boolean value=%r", token)
    return BooleanValue(value=value)


DECODERS: Dict[str, Callable[[etree._Element], ValueVariant]] = {
    "PQ": decode_quantity,
    "REAL": decode_quantity,
    "INT": decode_integer,
    "CV": decode_coded,
    "CE": decode_coded,
    "CD": decode_coded,
    "ST": decode_string,
    "IVL_PQ": decode_interval,
    "ED": decode_encoded_media,
    "BL": decode_boolean,
}
"""Value decoders keyed by upper-cased ``xsi:type``."""


def decode_value(element: Optional[etree._Element]) -> ValueVariant:
    """Decode a ``<value>`` element into the variant selected by its
    ``xsi:type``."""
    value_type = get_value_type(element)
    if value_type is None:
        return UnknownValue()

    decoder = DECODERS.get(value_type.upper())
    if decoder is None:
        logger.debug("No decoder for value type %r", value_type)
        return UnknownValue()

    return decoder(element)


@dataclass(frozen=True)
class DecodedCharacteristic:
    """A characteristic read from the document, not yet attached to a product
    or saved."""

    code: Optional[str]
    code_system: Optional[str]
    value_type: Optional[str]
    original_text: Optional[str]
    value: ValueVariant

    def as_fields(self) -> Dict[str, Any]:
        """Flatten into :class:`labels.models.Characteristic` column values.

        Columns the variant does not define are None.
        """
        fields = dict.fromkeys(VALUE_COLUMNS)
        fields.update(self.value.columns())
        fields.update(
            characteristic_code=self.code,
            characteristic_code_system=self.code_system,
            value_type=self.value_type,
            original_text=self.original_text,
        )
        return fields


def decode_characteristic(element: etree._Element) -> DecodedCharacteristic:
    """
    Decode a ``<characteristic>`` element.

    .. code-block:: XML

        <characteristic>
            <code code="SPLIMPRINT" codeSystem="2.16.840.1.113883.1.11.19255"/>
            <value xsi:type="ST">
                L484
                <originalText>L484</originalText>
            </value>
        </characteristic>
    """
    code = Tags.CODE.child(element)
    value = Tags.VALUE.child(element)
    original_text = Tags.ORIGINAL_TEXT.child(value)

    return DecodedCharacteristic(
        code=_attribute(code, "code"),
        code_system=_attribute(code, "codeSystem"),
        value_type=get_value_type(value),
        original_text=_text(original_text) if original_text is not None else None,
        value=decode_value(value),
    )
