from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field
from dataclasses import fields
from typing import List

from django.conf import settings

from importer.exceptions import MalformedReferenceError
from importer.exceptions import MissingContextError
from importer.exceptions import StoreError

if settings.SENTRY_ENABLED:
    from sentry_sdk import capture_exception

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """
    The outcome of one import operation.

    Results of nested operations are folded into their caller's result with
    :meth:`merge`, so the result of importing a document carries the counters
    and messages of every section and product below it. Callers decide whether
    a non-empty :attr:`errors` list is fatal.
    """

    success: bool = True
    sections_created: int = 0
    edges_created: int = 0
    products_created: int = 0
    packaging_levels_created: int = 0
    characteristics_created: int = 0
    malformed_references: int = 0
    missing_context: int = 0
    store_failures: int = 0
    errors: List[str] = field(default_factory=list)

    def merge(self, other: ParseResult) -> ParseResult:
        for f in fields(self):
            if f.type == "int":
                setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))
        self.success = self.success and other.success
        self.errors.extend(other.errors)
        return self

    def add_error(self, message: str):
        self.success = False
        self.errors.append(message)

    def record_exception(self, exc: Exception, message: str):
        """
        Record an exception caught at an operation boundary.

        The exception is counted in the category it belongs to and its message
        is added to :attr:`errors`. Store failures are also reported to Sentry
        when it is enabled.
        """
        if isinstance(exc, MissingContextError):
            self.missing_context += 1
        elif isinstance(exc, MalformedReferenceError):
            self.malformed_references += 1
        elif isinstance(exc, StoreError):
            self.store_failures += 1
            if settings.SENTRY_ENABLED:
                capture_exception(exc)
        self.add_error(f"{message}: {exc}")

    @property
    def records_created(self) -> int:
        return (
            self.sections_created
            + self.edges_created
            + self.products_created
            + self.packaging_levels_created
            + self.characteristics_created
        )

    def summary(self) -> str:
        return (
            f"{self.sections_created} sections, {self.edges_created} hierarchy edges, "
            f"{self.products_created} products, "
            f"{self.packaging_levels_created} packaging levels, "
            f"{self.characteristics_created} characteristics created; "
            f"{len(self.errors)} errors"
        )
