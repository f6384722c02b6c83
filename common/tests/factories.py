"""Factory classes for the label models."""

import string
import uuid
from itertools import cycle
from itertools import product

import factory

from labels import models


def string_generator(length=1, characters=string.ascii_uppercase + string.digits):
    g = cycle(product(characters, repeat=length))
    return lambda *_: "".join(next(g))[::-1]


def string_sequence(length=1, characters=string.ascii_uppercase + string.digits):
    return factory.Sequence(string_generator(length, characters))


def guid():
    return factory.LazyFunction(uuid.uuid4)


class DocumentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = models.Document

    document_guid = guid()
    set_guid = guid()
    version_number = 1
    code = "34391-3"
    code_system = "2.16.840.1.113883.6.1"
    title = factory.Faker("sentence", nb_words=4)


class SectionFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = models.Section

    document = factory.SubFactory(DocumentFactory)
    section_guid = guid()
    title = factory.Faker("sentence", nb_words=3)
    code = string_sequence(5, string.digits)
    code_system = "2.16.840.1.113883.6.1"


class SectionHierarchyFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = models.SectionHierarchy

    parent_section = factory.SubFactory(SectionFactory)
    child_section = factory.SubFactory(
        SectionFactory,
        document=factory.SelfAttribute("..parent_section.document"),
    )
    sequence_number = factory.Sequence(lambda n: n + 1)


class ProductFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = models.Product

    section = factory.SubFactory(SectionFactory)
    document = factory.SelfAttribute("section.document")
    product_code = string_sequence(4, string.digits)
    product_code_system = "2.16.840.1.113883.6.69"
    name = factory.Faker("word")
    form_code = "C42998"
    form_display_name = "TABLET"


class PackagingLevelFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = models.PackagingLevel

    product = factory.SubFactory(ProductFactory)
    package_code = string_sequence(6, string.digits)
    package_code_system = "2.16.840.1.113883.6.69"
    quantity_numerator = 30
    quantity_unit = "1"
    package_form_code = "C43165"
    package_form_display_name = "BOTTLE"


class CharacteristicFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = models.Characteristic

    product = factory.SubFactory(ProductFactory)
    packaging_level = None
    characteristic_code = "SPLCOLOR"
    characteristic_code_system = "2.16.840.1.113883.1.11.19255"
    value_type = "CE"
    coded_code = "C48325"
    coded_code_system = "2.16.840.1.113883.3.26.1.1"
    coded_display_name = "WHITE"

    class Params:
        quantity = factory.Trait(
            characteristic_code="SPLSIZE",
            value_type="PQ",
            coded_code=None,
            coded_code_system=None,
            coded_display_name=None,
            quantity_value=12,
            quantity_unit="mm",
        )
        imprint = factory.Trait(
            characteristic_code="SPLIMPRINT",
            value_type="ST",
            coded_code=None,
            coded_code_system=None,
            coded_display_name=None,
            string_value="L484",
        )
