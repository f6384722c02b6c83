import uuid
from datetime import date

import pytest

from common.tests.util import E
from common.tests.util import make_product
from common.tests.util import make_section
from importer.exceptions import MalformedReferenceError
from importer.parsers import parse_element
from importer.sections import SectionElement
from labels.models import Product
from labels.models import Section

pytestmark = pytest.mark.django_db


def test_section_element():
    guid = uuid.uuid4()
    element = make_section(guid, make_section(), title="1 INDICATIONS AND USAGE")
    element.set("ID", "s1")

    data = parse_element(SectionElement(), element)

    assert data == {
        "raw_id": str(guid),
        "section_link_id": "s1",
        "title": "1 INDICATIONS AND USAGE",
        "code": "34067-9",
        "code_system": "2.16.840.1.113883.6.1",
        "code_system_name": None,
        "display_name": "1 INDICATIONS AND USAGE",
        "effective_time": date(2021, 4, 15),
        "effective_time_low": None,
        "effective_time_high": None,
    }


def test_parse_section_saves_the_section_and_its_products(context, section_parser):
    guid = uuid.uuid4()
    element = make_section(guid, products=[make_product(code="0591-0405")])

    section, result = section_parser.parse_section(element, context)

    assert result.sections_created == 1
    assert result.products_created == 1
    assert section.section_guid == guid
    assert section.document == context.document
    assert Product.objects.get().section == section
    assert context.section is None


def test_parse_section_updates_existing_sections(context, section_parser):
    guid = uuid.uuid4()
    section_parser.parse_section(make_section(guid, title="Old"), context)

    section, result = section_parser.parse_section(
        make_section(guid, title="New"),
        context,
    )

    assert result.sections_created == 0
    assert Section.objects.get().title == "New"


def test_parse_section_rejects_malformed_ids(context, section_parser):
    with pytest.raises(MalformedReferenceError):
        section_parser.parse_section(make_section("not-a-guid"), context)


def test_resolve_child_section_reports_malformed_ids(context, section_parser):
    section, result = section_parser.resolve_child_section(
        make_section("not-a-guid", make_section()),
        context,
    )

    assert section is None
    assert result.malformed_references == 1
    assert not Section.objects.exists()


def test_section_without_id(context, section_parser):
    element = E.section(E.title("No id"))

    section, result = section_parser.resolve_child_section(element, context)

    assert section is None
    assert "is not a valid GUID" in result.errors[0]


def test_resolve_subtree_saves_sections_depth_first(context, section_parser):
    a, b, c = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    element = make_section(None, make_section(a, make_section(b)), make_section(c))

    result = section_parser.resolve_subtree(element, context)

    assert result.sections_created == 3
    guids = Section.objects.order_by("pk").values_list("section_guid", flat=True)
    assert list(guids) == [a, b, c]


def test_resolve_subtree_shallow(context, section_parser):
    element = make_section(None, make_section(None, make_section()), make_section())

    result = section_parser.resolve_subtree(element, context, deep=False)

    assert result.sections_created == 2
