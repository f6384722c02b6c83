"""Builders for SPL XML used across the test suite."""
import uuid
from typing import Iterable
from typing import Optional

from lxml import etree
from lxml.builder import ElementMaker

from common.xml.namespaces import HL7
from common.xml.namespaces import XML_SCHEMA_INSTANCE
from common.xml.namespaces import XSI_TYPE
from common.xml.namespaces import nsmap

E = ElementMaker(
    namespace=nsmap[HL7],
    nsmap={None: nsmap[HL7], XML_SCHEMA_INSTANCE: nsmap[XML_SCHEMA_INSTANCE]},
)


def make_value(xsi_type: Optional[str], text=None, *children, **attributes):
    value = E.value(*children, **attributes)
    if xsi_type is not None:
        value.set(XSI_TYPE, xsi_type)
    if text is not None:
        value.text = text
    return value


def make_characteristic(
    characteristic_code: str,
    xsi_type: Optional[str],
    text=None,
    *children,
    code_system="2.16.840.1.113883.1.11.19255",
    **attributes,
):
    """
    Build a ``<characteristic>``.

    .. code:: python

        make_characteristic("SPLSIZE", "PQ", value="12", unit="mm")
    """
    return E.characteristic(
        E.code(code=characteristic_code, codeSystem=code_system),
        make_value(xsi_type, text, *children, **attributes),
    )


def subject_of(*characteristics):
    return [E.subjectOf(characteristic) for characteristic in characteristics]


def make_package(
    code: str,
    *inner_packages,
    characteristics: Iterable = (),
    quantity="30",
    unit="1",
    form_code="C43165",
    form_name="BOTTLE",
):
    return E.asContent(
        E.quantity(
            E.numerator(value=quantity, unit=unit),
            E.denominator(value="1"),
        ),
        E.containerPackagedProduct(
            E.code(code=code, codeSystem="2.16.840.1.113883.6.69"),
            E.formCode(code=form_code, displayName=form_name),
            *inner_packages,
            *subject_of(*characteristics),
        ),
    )


def make_product(
    code="0591-0405",
    name="Lisinopril",
    characteristics: Iterable = (),
    packages: Iterable = (),
):
    """Build the outer ``manufacturedProduct`` of a section's ``subject``."""
    return E.manufacturedProduct(
        E.manufacturedProduct(
            E.code(code=code, codeSystem="2.16.840.1.113883.6.69"),
            E.name(name),
            E.formCode(code="C42998", displayName="TABLET"),
            *packages,
        ),
        *subject_of(*characteristics),
    )


def make_section(
    guid=None,
    *subsections,
    title="Section",
    code="34067-9",
    products: Iterable = (),
):
    """
    Build a ``<section>`` with the given subsections nested in ``component``
    elements.

    ``guid`` is used as the ``id/@root`` as given, so a malformed id can be
    passed as a string. A new GUID is generated when it is None.
    """
    return E.section(
        E.id(root=str(guid or uuid.uuid4())),
        E.code(code=code, codeSystem="2.16.840.1.113883.6.1", displayName=title.upper()),
        E.title(title),
        E.effectiveTime(value="20210415"),
        E.text(E.paragraph("Narrative text.")),
        *[E.subject(product) for product in products],
        *[E.component(section) for section in subsections],
    )


def make_document(*sections, guid=None, set_guid=None, version="1"):
    return E.document(
        E.id(root=str(guid or uuid.uuid4())),
        E.code(code="34391-3", codeSystem="2.16.840.1.113883.6.1"),
        E.title("Lisinopril Tablets"),
        E.effectiveTime(value="20210415"),
        E.setId(root=str(set_guid or uuid.uuid4())),
        E.versionNumber(value=version),
        E.component(
            E.structuredBody(*[E.component(section) for section in sections]),
        ),
    )


def to_bytes(element) -> bytes:
    return etree.tostring(element, xml_declaration=True, encoding="UTF-8")
