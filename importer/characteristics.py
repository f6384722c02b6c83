"""
Synchronization of product characteristics with the store.

Characteristics appear directly on a product and on each level of its
packaging:

.. code-block:: XML

    <manufacturedProduct>
        <manufacturedProduct>
            ...
            <asContent>
                <containerPackagedProduct>
                    <code code="0591-0405-01"/>
                    <subjectOf><characteristic>...</characteristic></subjectOf>
                </containerPackagedProduct>
            </asContent>
        </manufacturedProduct>
        <subjectOf><characteristic>...</characteristic></subjectOf>
    </manufacturedProduct>

A characteristic found below a ``containerPackagedProduct`` belongs to the
packaging level with that package code. Every characteristic is saved once
per owner (product and packaging level): a characteristic whose
:func:`~importer.keys.characteristic_key` matches one already stored for the
same owner is skipped.
"""
from __future__ import annotations

import logging
from abc import ABC
from abc import abstractmethod
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Tuple

from lxml import etree

from common.util import blank_to_none
from importer.context import ParseContext
from importer.exceptions import ImporterError
from importer.exceptions import MissingContextError
from importer.exceptions import StoreError
from importer.keys import characteristic_key
from importer.namespaces import Tags
from importer.results import ParseResult
from importer.store import ALL_LEVELS
from importer.values import DecodedCharacteristic
from importer.values import decode_characteristic
from labels.models import Characteristic
from labels.models import PackagingLevel
from labels.models import Product

logger = logging.getLogger(__name__)

ScopedCharacteristic = Tuple[Optional[PackagingLevel], DecodedCharacteristic]
LevelResolver = Callable[[str], Optional[PackagingLevel]]


def characteristic_elements(element: etree._Element) -> List[etree._Element]:
    """The ``subjectOf/characteristic`` elements directly below an element."""
    return [
        characteristic
        for subject_of in Tags.SUBJECT_OF.children(element)
        for characteristic in Tags.CHARACTERISTIC.children(subject_of)
    ]


class CharacteristicStrategy(ABC):
    def collect(
        self,
        container: etree._Element,
        product: Product,
        packaging_level: Optional[PackagingLevel],
        resolve_level: LevelResolver,
    ) -> List[ScopedCharacteristic]:
        """
        Decode every characteristic in ``container`` in document order, each
        paired with the packaging level it belongs to.

        The container and any ``manufacturedProduct`` directly inside it are
        searched, then the packaging below them.
        """
        found = []
        elements = [container, *Tags.MANUFACTURED_PRODUCT.children(container)]
        for element in elements:
            found.extend(
                (packaging_level, decode_characteristic(characteristic))
                for characteristic in characteristic_elements(element)
            )
            found.extend(self.collect_packaging(element, product, resolve_level))
        return found

    def collect_packaging(
        self,
        element: etree._Element,
        product: Product,
        resolve_level: LevelResolver,
    ) -> List[ScopedCharacteristic]:
        found = []
        for as_content in Tags.AS_CONTENT.children(element):
            package = Tags.CONTAINER_PACKAGED_PRODUCT.child(as_content)
            if package is None:
                continue

            code = Tags.CODE.child(package)
            package_code = blank_to_none(code.get("code")) if code is not None else None
            level = resolve_level(package_code) if package_code else None
            if level is None:
                logger.warning(
                    "Could not find packaging level %r for product %s, "
                    "saving its characteristics against the product",
                    package_code,
                    product.pk,
                )

            for scope in (as_content, package):
                found.extend(
                    (level, decode_characteristic(characteristic))
                    for characteristic in characteristic_elements(scope)
                )
            found.extend(self.collect_packaging(package, product, resolve_level))
        return found

    @abstractmethod
    def synchronize(
        self,
        container: etree._Element,
        product: Product,
        packaging_level: Optional[PackagingLevel],
        context: ParseContext,
        result: ParseResult,
    ) -> ParseResult:
        """
        Save the missing characteristics of ``container``, counting them in
        ``result`` as they are inserted.
        """


class IncrementalStrategy(CharacteristicStrategy):
    """
    Check and insert characteristics one at a time.

    Existing characteristics are read once per owner, packaging levels are
    looked up once per package, and each new characteristic is inserted as
    soon as it is found.
    """

    def synchronize(self, container, product, packaging_level, context, result):
        store = context.store

        def resolve_level(package_code):
            levels = store.find_packaging_levels(product, [package_code])
            return levels[0] if levels else None

        found = self.collect(container, product, packaging_level, resolve_level)

        groups: Dict[Optional[int], List[ScopedCharacteristic]] = {}
        for level, decoded in found:
            groups.setdefault(level.pk if level else None, []).append((level, decoded))

        for items in groups.values():
            level = items[0][0]
            existing = {
                characteristic_key(characteristic)
                for characteristic in store.find_characteristics_by_owner(
                    product,
                    level,
                )
            }
            for _, decoded in items:
                fields = decoded.as_fields()
                key = characteristic_key(fields)
                if key in existing:
                    logger.debug("Skipping duplicate characteristic %s", decoded.code)
                    continue

                store.insert_characteristics(
                    [Characteristic(product=product, packaging_level=level, **fields)],
                )
                existing.add(key)
                result.characteristics_created += 1
                logger.debug(
                    "Created %s characteristic %s",
                    decoded.value_type,
                    decoded.code,
                )

        return result


class BatchStrategy(CharacteristicStrategy):
    """
    Synchronize all of a product's characteristics with three round trips:
    one read of its packaging levels, one read of its stored
    characteristics and one bulk insert.
    """

    def synchronize(self, container, product, packaging_level, context, result):
        store = context.store

        levels_by_code: Dict[str, PackagingLevel] = {}
        for level in store.find_packaging_levels(product):
            levels_by_code.setdefault(level.package_code, level)

        found = self.collect(
            container,
            product,
            packaging_level,
            levels_by_code.get,
        )
        if not found:
            return result

        existing = {
            (characteristic.packaging_level_id, characteristic_key(characteristic))
            for characteristic in store.find_characteristics_by_owner(
                product,
                ALL_LEVELS,
            )
        }

        new_characteristics = []
        for level, decoded in found:
            fields = decoded.as_fields()
            key = (level.pk if level else None, characteristic_key(fields))
            if key in existing:
                continue
            existing.add(key)
            new_characteristics.append(
                Characteristic(product=product, packaging_level=level, **fields),
            )

        store.insert_characteristics(new_characteristics)
        result.characteristics_created += len(new_characteristics)
        logger.debug(
            "Bulk created %d characteristics for product %s",
            len(new_characteristics),
            product.pk,
        )
        return result


class CharacteristicSynchronizer:
    """
    Saves the characteristics of a product and its packaging, skipping those
    already stored for the same owner.

    The strategy is picked per call from ``context.use_bulk_operations``.
    Both strategies store the same rows for the same input.
    """

    def __init__(self):
        self.incremental = IncrementalStrategy()
        self.batch = BatchStrategy()

    def get_strategy(self, context: ParseContext) -> CharacteristicStrategy:
        return self.batch if context.use_bulk_operations else self.incremental

    def synchronize_characteristics(
        self,
        container: etree._Element,
        product: Optional[Product],
        context: ParseContext,
        packaging_level: Optional[PackagingLevel] = None,
    ) -> ParseResult:
        """
        Save the characteristics found in ``container``.

        Characteristics directly in the container are owned by
        ``packaging_level`` (the product itself when None). Errors do not
        propagate: a missing product or a store failure is returned as an
        error in the result.
        """
        result = ParseResult()
        try:
            if product is None or product.pk is None:
                raise MissingContextError(
                    "Cannot parse product characteristics because no product "
                    "context exists.",
                )
            strategy = self.get_strategy(context)
            with context.scoped(product=product, packaging_level=packaging_level):
                strategy.synchronize(
                    container,
                    product,
                    packaging_level,
                    context,
                    result,
                )
        except StoreError as e:
            logger.exception(
                "Error synchronizing characteristics of product %s",
                getattr(product, "pk", None),
            )
            result.record_exception(e, "Error parsing characteristics")
        except ImporterError as e:
            logger.warning("Unable to synchronize characteristics: %s", e)
            result.record_exception(e, "Error parsing characteristics")
        return result
