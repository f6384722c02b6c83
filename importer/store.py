"""
The persistence interface the importer writes through.

:class:`BaseStore` lists the upsert and query primitives the parsers need;
:class:`DjangoStore` implements them with the Django ORM. Parsers only talk
to a store, never to model managers directly, so every round trip the
importer makes is visible here.
"""
from __future__ import annotations

import logging
import uuid
from abc import ABC
from abc import abstractmethod
from functools import wraps
from typing import Any
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional
from typing import Sequence
from typing import Tuple
from typing import Type

from django.db import DatabaseError
from django.db import models
from django.db.transaction import atomic

from importer.exceptions import StoreError
from labels.models import Characteristic
from labels.models import Document
from labels.models import PackagingLevel
from labels.models import Product
from labels.models import Section
from labels.models import SectionHierarchy

logger = logging.getLogger(__name__)

ALL_LEVELS = object()
"""Passed as ``packaging_level`` to select characteristics at every level."""


class BaseStore(ABC):
    @abstractmethod
    def upsert_document(self, data: Dict[str, Any]) -> Tuple[Document, bool]:
        pass

    @abstractmethod
    def upsert_node(self, data: Dict[str, Any]) -> Tuple[Section, bool]:
        pass

    @abstractmethod
    def find_nodes_by_natural_keys(
        self,
        document: Document,
        keys: Iterable[uuid.UUID],
    ) -> List[Section]:
        pass

    @abstractmethod
    def find_edges_by_parent_and_children(
        self,
        parent_id: int,
        child_ids: Iterable[int],
    ) -> List[SectionHierarchy]:
        pass

    @abstractmethod
    def insert_edges(self, edges: Sequence[SectionHierarchy]) -> List[SectionHierarchy]:
        pass

    @abstractmethod
    def upsert_product(self, data: Dict[str, Any]) -> Tuple[Product, bool]:
        pass

    @abstractmethod
    def upsert_packaging_level(
        self,
        data: Dict[str, Any],
    ) -> Tuple[PackagingLevel, bool]:
        pass

    @abstractmethod
    def find_packaging_levels(
        self,
        product: Product,
        package_codes: Optional[Iterable[str]] = None,
    ) -> List[PackagingLevel]:
        pass

    @abstractmethod
    def find_characteristics_by_owner(
        self,
        product: Product,
        packaging_level=ALL_LEVELS,
    ) -> List[Characteristic]:
        pass

    @abstractmethod
    def insert_characteristics(
        self,
        records: Sequence[Characteristic],
    ) -> List[Characteristic]:
        pass


def store_operation(func):
    """Re-raise database errors from a store method as :class:`StoreError`."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as e:
            raise StoreError(f"{func.__name__} failed: {e}") from e

    return wrapper


class DjangoStore(BaseStore):
    """A store backed by the :mod:`labels` models."""

    def _upsert(
        self,
        model: Type[models.Model],
        data: Dict[str, Any],
    ) -> Tuple[models.Model, bool]:
        """
        Create or update the row identified by the model's
        ``identifying_fields``.

        Fields not in ``data`` are left alone on update.
        """
        data = dict(data)
        lookup = {field: data.pop(field, None) for field in model.identifying_fields}
        obj, created = model.objects.update_or_create(defaults=data, **lookup)
        logger.debug(
            "%s %s %s",
            "Created" if created else "Updated",
            model.__name__,
            obj.pk,
        )
        return obj, created

    @store_operation
    def upsert_document(self, data):
        return self._upsert(Document, data)

    @store_operation
    def upsert_node(self, data):
        return self._upsert(Section, data)

    @store_operation
    def find_nodes_by_natural_keys(self, document, keys):
        keys = set(keys)
        if not keys:
            return []
        return list(
            Section.objects.filter(document=document, section_guid__in=keys),
        )

    @store_operation
    def find_edges_by_parent_and_children(self, parent_id, child_ids):
        child_ids = set(child_ids)
        if not child_ids:
            return []
        return list(
            SectionHierarchy.objects.filter(
                parent_section_id=parent_id,
                child_section_id__in=child_ids,
            ),
        )

    @store_operation
    def insert_edges(self, edges):
        if not edges:
            return []
        with atomic():
            return SectionHierarchy.objects.bulk_create(edges)

    @store_operation
    def upsert_product(self, data):
        return self._upsert(Product, data)

    @store_operation
    def upsert_packaging_level(self, data):
        return self._upsert(PackagingLevel, data)

    @store_operation
    def find_packaging_levels(self, product, package_codes=None):
        queryset = PackagingLevel.objects.filter(product=product)
        if package_codes is not None:
            queryset = queryset.filter(package_code__in=set(package_codes))
        return list(queryset.order_by("pk"))

    @store_operation
    def find_characteristics_by_owner(self, product, packaging_level=ALL_LEVELS):
        queryset = Characteristic.objects.filter(product=product)
        if packaging_level is None:
            queryset = queryset.filter(packaging_level__isnull=True)
        elif packaging_level is not ALL_LEVELS:
            queryset = queryset.filter(packaging_level=packaging_level)
        return list(queryset)

    @store_operation
    def insert_characteristics(self, records):
        if not records:
            return []
        with atomic():
            return Characteristic.objects.bulk_create(records)
