import pytest

from common.tests import factories
from importer.context import ParseContext
from importer.sections import SectionParser
from importer.store import DjangoStore


@pytest.fixture
def store() -> DjangoStore:
    return DjangoStore()


@pytest.fixture
def document(db):
    return factories.DocumentFactory.create()


@pytest.fixture(params=[False, True], ids=["incremental", "batch"])
def use_bulk_operations(request) -> bool:
    return request.param


@pytest.fixture
def context(store, document, use_bulk_operations) -> ParseContext:
    return ParseContext(
        store=store,
        document=document,
        use_bulk_operations=use_bulk_operations,
    )


@pytest.fixture
def section_parser() -> SectionParser:
    return SectionParser()


@pytest.fixture
def persisted_section(context, section_parser):
    """Saves a section element without linking anything below it and returns
    the saved section."""

    def persist(element):
        section, _ = section_parser.parse_section(element, context)
        return section

    return persist
