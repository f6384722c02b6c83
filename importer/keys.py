"""
Deduplication keys for characteristics.

Two characteristics in the same owner scope are duplicates when their keys
are equal. The key covers every field that makes a characteristic's value
distinct, so two records that differ only in their unit are not duplicates.

Missing strings and empty strings produce the same key: both normalize to
``""``. Missing numbers and booleans stay ``None``.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any
from typing import Mapping
from typing import NamedTuple
from typing import Optional
from typing import Union


class CharacteristicKey(NamedTuple):
    characteristic_code: str
    value_type: str
    coded_code: str
    string_value: str
    quantity_value: Optional[Decimal]
    quantity_unit: str
    integer_value: Optional[int]
    boolean_value: Optional[bool]
    media_type: str
    media_content: str
    null_flavor: str
    original_text: str


STRING_FIELDS = frozenset(
    (
        "characteristic_code",
        "value_type",
        "coded_code",
        "string_value",
        "quantity_unit",
        "media_type",
        "media_content",
        "null_flavor",
        "original_text",
    ),
)


def characteristic_key(record: Union[Mapping[str, Any], Any]) -> CharacteristicKey:
    """
    Compute the deduplication key of a characteristic.

    ``record`` may be a mapping of column values (as returned by
    :meth:`importer.values.DecodedCharacteristic.as_fields`) or any object
    with those attributes, such as a :class:`labels.models.Characteristic`.
    """
    if isinstance(record, Mapping):
        get = record.get
    else:

        def get(name):
            return getattr(record, name, None)

    values = []
    for name in CharacteristicKey._fields:
        value = get(name)
        if name in STRING_FIELDS and value is None:
            value = ""
        values.append(value)

    return CharacteristicKey(*values)
