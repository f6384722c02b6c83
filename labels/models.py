from typing import Sequence

from django.db import models

from common.models import EffectiveTimeMixin
from common.models import TimestampedMixin

DECIMAL_MAX_DIGITS = 28
DECIMAL_PLACES = 10
"""Precision of every decimal column; decoded values are fitted to it."""


class Document(EffectiveTimeMixin, TimestampedMixin):
    """
    An SPL document.

    ``document_guid`` is the ``id/@root`` of the document and identifies this
    version of the label; ``set_guid`` groups all versions of the same label.
    """

    identifying_fields: Sequence[str] = ("document_guid",)
    """
    The fields which together form a composite unique key for each model.

    Importing the same document twice updates the rows found through these
    fields instead of inserting new ones.
    """

    document_guid = models.UUIDField(unique=True)
    set_guid = models.UUIDField(blank=True, null=True)
    version_number = models.IntegerField(blank=True, null=True)
    code = models.CharField(max_length=50, blank=True, null=True)
    code_system = models.CharField(max_length=100, blank=True, null=True)
    title = models.TextField(blank=True, null=True)

    def __str__(self):
        return str(self.document_guid)


class Section(EffectiveTimeMixin, TimestampedMixin):
    """
    A ``<section>`` of an SPL document.

    The natural key of a section is its ``section_guid`` (the ``id/@root`` of
    the element), unique within its document. The store assigned primary key
    only exists once the section has been saved.
    """

    identifying_fields: Sequence[str] = ("document", "section_guid")

    document = models.ForeignKey(
        Document,
        on_delete=models.CASCADE,
        related_name="sections",
    )
    section_guid = models.UUIDField()
    section_link_id = models.CharField(max_length=255, blank=True, null=True)
    title = models.TextField(blank=True, null=True)
    code = models.CharField(max_length=50, blank=True, null=True)
    code_system = models.CharField(max_length=100, blank=True, null=True)
    code_system_name = models.CharField(max_length=255, blank=True, null=True)
    display_name = models.TextField(blank=True, null=True)

    children = models.ManyToManyField(
        "self",
        through="SectionHierarchy",
        through_fields=("parent_section", "child_section"),
        symmetrical=False,
        related_name="parents",
    )

    class Meta:
        constraints = (
            models.UniqueConstraint(
                fields=("document", "section_guid"),
                name="unique_section_guid_per_document",
            ),
        )

    def __str__(self):
        return f"{self.section_guid} ({self.title or self.code})"


class SectionHierarchy(TimestampedMixin):
    """
    A directed, ordered edge from a parent section to a child section.

    Edges are created once and never updated. ``sequence_number`` starts at 1
    and gives the position of the child below its parent.
    """

    parent_section = models.ForeignKey(
        Section,
        on_delete=models.CASCADE,
        related_name="child_edges",
    )
    child_section = models.ForeignKey(
        Section,
        on_delete=models.CASCADE,
        related_name="parent_edges",
    )
    sequence_number = models.PositiveIntegerField()

    class Meta:
        constraints = (
            models.UniqueConstraint(
                fields=("parent_section", "child_section"),
                name="unique_section_hierarchy_edge",
            ),
        )
        ordering = ("parent_section", "sequence_number")

    def __str__(self):
        return (
            f"{self.parent_section_id} -> {self.child_section_id} "
            f"#{self.sequence_number}"
        )


class Product(TimestampedMixin):
    """A ``manufacturedProduct`` declared in a section of a document."""

    identifying_fields: Sequence[str] = (
        "document",
        "section",
        "product_code",
        "name",
        "form_code",
    )

    document = models.ForeignKey(
        Document,
        on_delete=models.CASCADE,
        related_name="products",
    )
    section = models.ForeignKey(
        Section,
        on_delete=models.SET_NULL,
        related_name="products",
        blank=True,
        null=True,
    )
    product_code = models.CharField(max_length=50, blank=True, null=True)
    product_code_system = models.CharField(max_length=100, blank=True, null=True)
    name = models.TextField(blank=True, null=True)
    form_code = models.CharField(max_length=50, blank=True, null=True)
    form_display_name = models.CharField(max_length=255, blank=True, null=True)

    def __str__(self):
        return f"{self.name} ({self.product_code})"


class PackagingLevel(TimestampedMixin):
    """
    One level of packaging of a product, from an ``asContent`` /
    ``containerPackagedProduct`` pair.

    Packages nested inside another package point at the outer level through
    :attr:`parent_packaging_level`.
    """

    identifying_fields: Sequence[str] = (
        "product",
        "parent_packaging_level",
        "package_code",
        "package_form_code",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="packaging_levels",
    )
    parent_packaging_level = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        related_name="inner_packaging_levels",
        blank=True,
        null=True,
    )
    package_code = models.CharField(max_length=50, blank=True, null=True)
    package_code_system = models.CharField(max_length=100, blank=True, null=True)
    quantity_numerator = models.DecimalField(
        max_digits=DECIMAL_MAX_DIGITS,
        decimal_places=DECIMAL_PLACES,
        blank=True,
        null=True,
    )
    quantity_unit = models.CharField(max_length=50, blank=True, null=True)
    package_form_code = models.CharField(max_length=50, blank=True, null=True)
    package_form_display_name = models.CharField(
        max_length=255,
        blank=True,
        null=True,
    )

    def __str__(self):
        return f"{self.package_code} ({self.package_form_display_name})"


class Characteristic(TimestampedMixin):
    """
    A typed attribute of a product, or of one packaging level of a product.

    The shape of the value depends on :attr:`value_type` (the ``xsi:type`` of
    the source ``<value>`` element); only the columns of that variant are
    filled, see :mod:`importer.values`.
    """

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="characteristics",
    )
    packaging_level = models.ForeignKey(
        PackagingLevel,
        on_delete=models.CASCADE,
        related_name="characteristics",
        blank=True,
        null=True,
    )
    characteristic_code = models.CharField(max_length=50, blank=True, null=True)
    characteristic_code_system = models.CharField(
        max_length=100,
        blank=True,
        null=True,
    )
    value_type = models.CharField(max_length=20, blank=True, null=True)
    original_text = models.TextField(blank=True, null=True)

    quantity_value = models.DecimalField(
        max_digits=DECIMAL_MAX_DIGITS,
        decimal_places=DECIMAL_PLACES,
        blank=True,
        null=True,
    )
    quantity_unit = models.CharField(max_length=50, blank=True, null=True)

    integer_value = models.IntegerField(blank=True, null=True)
    null_flavor = models.CharField(max_length=20, blank=True, null=True)

    interval_low_value = models.DecimalField(
        max_digits=DECIMAL_MAX_DIGITS,
        decimal_places=DECIMAL_PLACES,
        blank=True,
        null=True,
    )
    interval_low_unit = models.CharField(max_length=50, blank=True, null=True)
    interval_high_value = models.DecimalField(
        max_digits=DECIMAL_MAX_DIGITS,
        decimal_places=DECIMAL_PLACES,
        blank=True,
        null=True,
    )
    interval_high_unit = models.CharField(max_length=50, blank=True, null=True)

    coded_code = models.CharField(max_length=50, blank=True, null=True)
    coded_code_system = models.CharField(max_length=100, blank=True, null=True)
    coded_display_name = models.TextField(blank=True, null=True)

    string_value = models.TextField(blank=True, null=True)

    media_type = models.CharField(max_length=100, blank=True, null=True)
    media_content = models.TextField(blank=True, null=True)

    boolean_value = models.BooleanField(blank=True, null=True)

    @property
    def is_package_level(self) -> bool:
        return self.packaging_level_id is not None

    def __str__(self):
        return f"{self.characteristic_code} [{self.value_type}]"
