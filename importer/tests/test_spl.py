import io
import uuid

import pytest
from lxml import etree

from common.tests.util import E
from common.tests.util import make_characteristic
from common.tests.util import make_document
from common.tests.util import make_package
from common.tests.util import make_product
from common.tests.util import make_section
from common.tests.util import to_bytes
from importer.spl import import_spl
from labels.models import Characteristic
from labels.models import Document
from labels.models import PackagingLevel
from labels.models import Product
from labels.models import Section
from labels.models import SectionHierarchy

pytestmark = pytest.mark.django_db


@pytest.fixture
def spl_document():
    return make_document(
        make_section(
            None,
            make_section(
                None,
                title="1.1 Hypertension",
                products=[
                    make_product(
                        packages=[
                            make_package(
                                "0591-0405-01",
                                characteristics=[
                                    make_characteristic("SPLIMPRINT", "ST", "L484"),
                                ],
                            ),
                        ],
                        characteristics=[
                            make_characteristic("SPLCOLOR", "PQ", value="10", unit="mg"),
                            make_characteristic("SPLCOLOR", "PQ", value="20", unit="mg"),
                            make_characteristic("SPLIMPRINT", "ST", "L484"),
                            make_characteristic("SPLIMPRINT", "ST", "L484"),
                        ],
                    ),
                ],
            ),
            make_section(None, title="1.2 Heart Failure"),
            title="1 INDICATIONS AND USAGE",
        ),
        make_section(None, title="2 DOSAGE AND ADMINISTRATION"),
        version="3",
    )


def graph():
    """The imported rows, described by natural values rather than ids."""
    return {
        "sections": set(Section.objects.values_list("section_guid", "title")),
        "edges": set(
            SectionHierarchy.objects.values_list(
                "parent_section__section_guid",
                "child_section__section_guid",
                "sequence_number",
            ),
        ),
        "products": set(Product.objects.values_list("product_code", "section__title")),
        "packaging": set(PackagingLevel.objects.values_list("package_code", "product__name")),
        "characteristics": set(
            Characteristic.objects.values_list(
                "packaging_level__package_code",
                "characteristic_code",
                "quantity_value",
                "string_value",
            ),
        ),
    }


@pytest.mark.parametrize("use_bulk_operations", [False, True], ids=["incremental", "batch"])
def test_import_spl(spl_document, use_bulk_operations):
    result = import_spl(
        io.BytesIO(to_bytes(spl_document)),
        use_bulk_operations=use_bulk_operations,
    )

    assert result.success, result.errors
    assert result.sections_created == 4
    assert result.edges_created == 2
    assert result.products_created == 1
    assert result.packaging_levels_created == 1
    assert result.characteristics_created == 4

    document = Document.objects.get()
    assert document.version_number == 3
    assert document.title == "Lisinopril Tablets"
    assert document.effective_time.isoformat() == "2021-04-15"

    parent = Section.objects.get(title="1 INDICATIONS AND USAGE")
    assert list(
        parent.child_edges.order_by("sequence_number").values_list(
            "child_section__title",
            flat=True,
        ),
    ) == ["1.1 Hypertension", "1.2 Heart Failure"]
    assert not Section.objects.get(title="2 DOSAGE AND ADMINISTRATION").parent_edges.exists()


@pytest.mark.parametrize("use_bulk_operations", [False, True], ids=["incremental", "batch"])
def test_import_spl_twice_creates_nothing(spl_document, use_bulk_operations):
    source = to_bytes(spl_document)
    import_spl(io.BytesIO(source), use_bulk_operations=use_bulk_operations)
    before = graph()

    result = import_spl(io.BytesIO(source), use_bulk_operations=use_bulk_operations)

    assert result.success
    assert result.records_created == 0
    assert graph() == before
    assert Document.objects.count() == 1


def test_strategies_import_the_same_graph(spl_document):
    source = to_bytes(spl_document)

    import_spl(io.BytesIO(source), use_bulk_operations=False)
    incremental = graph()
    Document.objects.all().delete()

    import_spl(io.BytesIO(source), use_bulk_operations=True)
    batch = graph()

    assert incremental == batch


def test_use_bulk_operations_setting(spl_document, settings):
    settings.SPL_USE_BULK_OPERATIONS = True

    result = import_spl(io.BytesIO(to_bytes(spl_document)))

    assert result.success
    assert result.edges_created == 2


def test_import_document_with_malformed_id(spl_document):
    spl_document.find(str(E.id().tag)).set("root", "not-a-guid")

    result = import_spl(io.BytesIO(to_bytes(spl_document)))

    assert not result.success
    assert result.malformed_references == 1
    assert not Document.objects.exists()
    assert not Section.objects.exists()


def test_import_document_without_body():
    document = E.document(E.id(root=str(uuid.uuid4())), E.title("Empty"))

    result = import_spl(io.BytesIO(to_bytes(document)))

    assert result.success
    assert Document.objects.get().title == "Empty"
    assert not Section.objects.exists()


def test_import_malformed_xml():
    with pytest.raises(etree.XMLSyntaxError):
        import_spl(io.BytesIO(b"<document><section></document>"))


def test_malformed_sections_do_not_stop_the_import():
    document = make_document(
        make_section("not-a-guid", make_section()),
        make_section(None, make_section(), make_section()),
    )

    result = import_spl(io.BytesIO(to_bytes(document)))

    assert not result.success
    assert result.malformed_references == 1
    assert result.sections_created == 3
    assert result.edges_created == 2
