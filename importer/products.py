from __future__ import annotations

import logging
from typing import Optional

from lxml import etree

from common.util import blank_to_none
from common.util import parse_nullable_decimal
from importer.characteristics import CharacteristicSynchronizer
from importer.context import ParseContext
from importer.exceptions import ImporterError
from importer.exceptions import StoreError
from importer.namespaces import Tags
from importer.parsers import ElementParser
from importer.parsers import TextElement
from importer.parsers import parse_element
from importer.results import ParseResult
from labels.models import DECIMAL_MAX_DIGITS
from labels.models import DECIMAL_PLACES
from labels.models import PackagingLevel
from labels.models import Product

logger = logging.getLogger(__name__)


class ProductElement(ElementParser):
    """
    .. code-block:: XML

        <manufacturedProduct>
            <code code="0591-0405" codeSystem="2.16.840.1.113883.6.69"/>
            <name>Lisinopril</name>
            <formCode code="C42998" displayName="TABLET"/>
            <asContent>...</asContent>
        </manufacturedProduct>
    """

    tag = Tags.MANUFACTURED_PRODUCT
    code = ElementParser(Tags.CODE)
    name = TextElement(Tags.NAME)
    form_code = ElementParser(Tags.FORM_CODE)

    def clean(self):
        super().clean()
        code = self.data.get("code", {})
        form_code = self.data.get("form_code", {})
        self.data = {
            "product_code": blank_to_none(code.get("code")),
            "product_code_system": blank_to_none(code.get("codeSystem")),
            "name": self.data.get("name"),
            "form_code": blank_to_none(form_code.get("code")),
            "form_display_name": blank_to_none(form_code.get("displayName")),
        }


class QuantityElement(ElementParser):
    tag = Tags.QUANTITY
    numerator = ElementParser(Tags.NUMERATOR)


class PackageElement(ElementParser):
    tag = Tags.CONTAINER_PACKAGED_PRODUCT
    code = ElementParser(Tags.CODE)
    form_code = ElementParser(Tags.FORM_CODE)


class AsContentElement(ElementParser):
    """
    One level of packaging. Nested ``asContent`` elements inside the package
    are the next level in and are read separately.

    .. code-block:: XML

        <asContent>
            <quantity>
                <numerator value="30" unit="1"/>
                <denominator value="1"/>
            </quantity>
            <containerPackagedProduct>
                <code code="0591-0405-01" codeSystem="2.16.840.1.113883.6.69"/>
                <formCode code="C43165" displayName="BOTTLE"/>
            </containerPackagedProduct>
        </asContent>
    """

    tag = Tags.AS_CONTENT
    quantity = QuantityElement()
    package = PackageElement()

    def clean(self):
        super().clean()
        numerator = self.data.get("quantity", {}).get("numerator", {})
        package = self.data.get("package", {})
        code = package.get("code", {})
        form_code = package.get("form_code", {})

        quantity = blank_to_none(numerator.get("value"))
        quantity_numerator = parse_nullable_decimal(
            quantity,
            DECIMAL_MAX_DIGITS,
            DECIMAL_PLACES,
        )
        if quantity is not None and quantity_numerator is None:
            logger.warning("Ignoring malformed package quantity %r", quantity)

        self.data = {
            "package_code": blank_to_none(code.get("code")),
            "package_code_system": blank_to_none(code.get("codeSystem")),
            "quantity_numerator": quantity_numerator,
            "quantity_unit": blank_to_none(numerator.get("unit")),
            "package_form_code": blank_to_none(form_code.get("code")),
            "package_form_display_name": blank_to_none(form_code.get("displayName")),
        }


class ProductParser:
    """
    Persists the products declared in a section, their packaging levels and
    their characteristics.

    .. code-block:: XML

        <section>
            <subject>
                <manufacturedProduct>
                    <manufacturedProduct>...</manufacturedProduct>
                    <subjectOf><characteristic>...</characteristic></subjectOf>
                </manufacturedProduct>
            </subject>
        </section>
    """

    def __init__(self, synchronizer: Optional[CharacteristicSynchronizer] = None):
        self.characteristics = synchronizer or CharacteristicSynchronizer()

    def parse_products(
        self,
        section_element: etree._Element,
        context: ParseContext,
    ) -> ParseResult:
        result = ParseResult()
        for subject in Tags.SUBJECT.children(section_element):
            for container in Tags.MANUFACTURED_PRODUCT.children(subject):
                result.merge(self.parse_product(container, context))
        return result

    def parse_product(
        self,
        container: etree._Element,
        context: ParseContext,
    ) -> ParseResult:
        """
        Save one product from the outer ``manufacturedProduct`` element.

        A failure to save the product or its packaging is recorded and the
        product's characteristics are not read.
        """
        result = ParseResult()
        element = Tags.MANUFACTURED_PRODUCT.child(container)
        if element is None:
            logger.warning("Product without a manufacturedProduct element, skipping")
            return result

        try:
            data = parse_element(ProductElement(), element)
            data.update(document=context.require_document(), section=context.section)
            product, created = context.store.upsert_product(data)
            if created:
                result.products_created += 1

            with context.scoped(product=product):
                result.merge(self.parse_packaging(element, product, None, context))
        except StoreError as e:
            logger.exception("Error saving product")
            result.record_exception(e, "Error parsing product")
            return result
        except ImporterError as e:
            logger.warning("Unable to parse product: %s", e)
            result.record_exception(e, "Error parsing product")
            return result

        result.merge(
            self.characteristics.synchronize_characteristics(
                container,
                product,
                context,
            ),
        )
        return result

    def parse_packaging(
        self,
        element: etree._Element,
        product: Product,
        parent_level: Optional[PackagingLevel],
        context: ParseContext,
    ) -> ParseResult:
        """Save every packaging level below ``element``, outermost first."""
        result = ParseResult()
        for as_content in Tags.AS_CONTENT.children(element):
            package = Tags.CONTAINER_PACKAGED_PRODUCT.child(as_content)
            if package is None:
                continue

            data = parse_element(AsContentElement(), as_content)
            data.update(product=product, parent_packaging_level=parent_level)
            level, created = context.store.upsert_packaging_level(data)
            if created:
                result.packaging_levels_created += 1

            with context.scoped(packaging_level=level):
                result.merge(self.parse_packaging(package, product, level, context))
        return result
