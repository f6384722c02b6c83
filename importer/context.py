from __future__ import annotations

import contextlib
from dataclasses import dataclass
from dataclasses import field
from typing import Iterator
from typing import Optional

from django.conf import settings

from importer.exceptions import MissingContextError
from importer.store import BaseStore
from labels.models import Document
from labels.models import PackagingLevel
from labels.models import Product
from labels.models import Section

UNSET = object()


@dataclass
class ParseContext:
    """
    State shared by the parsers while one SPL document is imported.

    The current section, product and packaging level are only ever changed
    through :meth:`scoped`, which puts the previous references back when the
    nested call returns (or raises). The store handle is shared by every
    collaborator.
    """

    store: BaseStore
    document: Optional[Document] = None
    section: Optional[Section] = None
    product: Optional[Product] = None
    packaging_level: Optional[PackagingLevel] = None
    use_bulk_operations: bool = field(
        default_factory=lambda: settings.SPL_USE_BULK_OPERATIONS,
    )
    file_name: Optional[str] = None

    @contextlib.contextmanager
    def scoped(
        self,
        section=UNSET,
        product=UNSET,
        packaging_level=UNSET,
    ) -> Iterator[ParseContext]:
        """
        Set the current section, product or packaging level for the duration of
        a ``with`` block.

        .. code:: python

            with context.scoped(section=child):
                resolver.resolve_hierarchy(child, element, context)
        """
        previous = (self.section, self.product, self.packaging_level)
        if section is not UNSET:
            self.section = section
        if product is not UNSET:
            self.product = product
        if packaging_level is not UNSET:
            self.packaging_level = packaging_level
        try:
            yield self
        finally:
            self.section, self.product, self.packaging_level = previous

    def require_document(self) -> Document:
        if self.document is None or self.document.pk is None:
            raise MissingContextError("No current document available.")
        return self.document
