from decimal import Decimal

import pytest

from common.tests.util import E
from common.tests.util import make_characteristic
from common.tests.util import make_value
from importer import values


@pytest.mark.parametrize(
    "element, expected",
    [
        (
            make_value("PQ", value="12", unit="mm"),
            values.QuantityValue(value=Decimal("12"), unit="mm"),
        ),
        (
            make_value("REAL", value="0.5"),
            values.QuantityValue(value=Decimal("0.5"), unit=None),
        ),
        (
            make_value("PQ", value="twelve", unit="mm"),
            values.QuantityValue(value=None, unit="mm"),
        ),
        (
            make_value("INT", value="2"),
            values.IntegerValue(value=2, null_flavor=None),
        ),
        (
            make_value("INT", nullFlavor="PINF"),
            values.IntegerValue(value=None, null_flavor="PINF"),
        ),
        (
            make_value(
                "CE",
                code="C48325",
                codeSystem="2.16.840.1.113883.3.26.1.1",
                displayName="WHITE",
            ),
            values.CodedValue(
                code="C48325",
                code_system="2.16.840.1.113883.3.26.1.1",
                display_name="WHITE",
            ),
        ),
        (
            make_value("CV", code="C48348"),
            values.CodedValue(code="C48348"),
        ),
        (
            make_value("CD", code="C48336", displayName="CAPSULE"),
            values.CodedValue(code="C48336", display_name="CAPSULE"),
        ),
        (
            make_value("ST", "  L484\n  ", E.originalText("L 484")),
            values.StringValue(text="L484"),
        ),
        (
            make_value(
                "ST",
                "SCORED",
                code="C48346",
                codeSystem="2.16.840.1.113883.3.26.1.1",
            ),
            values.StringValue(
                text="SCORED",
                code="C48346",
                code_system="2.16.840.1.113883.3.26.1.1",
            ),
        ),
        (
            make_value(
                "IVL_PQ",
                None,
                E.low(value="1", unit="mg"),
                E.high(value="5", unit="mg"),
            ),
            values.IntervalValue(
                low_value=Decimal("1"),
                low_unit="mg",
                high_value=Decimal("5"),
                high_unit="mg",
            ),
        ),
        (
            make_value("IVL_PQ", None, E.high(value="5", unit="mg")),
            values.IntervalValue(high_value=Decimal("5"), high_unit="mg"),
        ),
        (
            make_value("ED", mediaType="image/jpeg", displayName="tablet.jpg"),
            values.EncodedMediaValue(media_type="image/jpeg", content="tablet.jpg"),
        ),
        (
            make_value("ED", "R0lGODlh", mediaType="image/gif"),
            values.EncodedMediaValue(media_type="image/gif", content="R0lGODlh"),
        ),
        (
            make_value("BL", value="true"),
            values.BooleanValue(value=True),
        ),
        (
            make_value("BL", value="0"),
            values.BooleanValue(value=False),
        ),
        (
            make_value("BL", value="maybe"),
            values.BooleanValue(value=None),
        ),
        (make_value("SC", code="X"), values.UnknownValue()),
        (make_value(None, value="1"), values.UnknownValue()),
    ],
)
def test_decode_value(element, expected):
    assert values.decode_value(element) == expected


def test_decode_value_of_missing_element():
    assert values.decode_value(None) == values.UnknownValue()


@pytest.mark.parametrize("xsi_type", ["pq", "v3:PQ", " PQ "])
def test_value_type_is_case_and_prefix_insensitive(xsi_type):
    element = make_value(xsi_type, value="1", unit="g")

    assert values.decode_value(element) == values.QuantityValue(Decimal("1"), "g")


def test_malformed_tokens_are_logged(caplog):
    values.decode_value(make_value("PQ", value="twelve"))

    assert "Ignoring malformed decimal value='twelve'" in caplog.text


def test_decode_characteristic():
    element = make_characteristic(
        "SPLIMPRINT",
        "ST",
        "L484",
        E.originalText("L 484"),
    )

    characteristic = values.decode_characteristic(element)

    assert characteristic == values.DecodedCharacteristic(
        code="SPLIMPRINT",
        code_system="2.16.840.1.113883.1.11.19255",
        value_type="ST",
        original_text="L 484",
        value=values.StringValue(text="L484"),
    )


def test_as_fields_fills_only_the_variant_columns():
    characteristic = values.decode_characteristic(
        make_characteristic("SPLSIZE", "PQ", value="12", unit="mm"),
    )

    fields = characteristic.as_fields()

    assert fields["quantity_value"] == Decimal("12")
    assert fields["quantity_unit"] == "mm"
    assert fields["characteristic_code"] == "SPLSIZE"
    assert fields["value_type"] == "PQ"
    assert {
        column: value
        for column, value in fields.items()
        if column in values.VALUE_COLUMNS and value is not None
    } == {"quantity_value": Decimal("12"), "quantity_unit": "mm"}


def test_unknown_value_keeps_its_type():
    characteristic = values.decode_characteristic(
        make_characteristic("SPLOTHER", "SC", code="X"),
    )

    assert characteristic.value_type == "SC"
    assert characteristic.value == values.UnknownValue()
    assert all(
        characteristic.as_fields()[column] is None for column in values.VALUE_COLUMNS
    )


def test_decimals_are_fitted_to_the_column_scale(caplog):
    quantity = values.decode_value(make_value("PQ", value="0.12345678916", unit="mm"))
    interval = values.decode_value(
        make_value("IVL_PQ", None, E.low(value="1E+20"), E.high(value="2.5")),
    )

    assert str(quantity.value) == "0.1234567892"
    assert interval.low_value is None
    assert str(interval.high_value) == "2.5000000000"
    assert "Ignoring malformed decimal value='1E+20'" in caplog.text
