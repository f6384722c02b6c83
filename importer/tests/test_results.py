from unittest import mock

import pytest

from importer import results
from importer.exceptions import MalformedReferenceError
from importer.exceptions import MissingContextError
from importer.exceptions import StoreError
from importer.results import ParseResult


def test_merge_adds_counters_and_errors():
    first = ParseResult(sections_created=2, edges_created=1)
    second = ParseResult(sections_created=1, characteristics_created=4)
    second.add_error("Error parsing section: bad id")

    merged = first.merge(second)

    assert merged is first
    assert merged.sections_created == 3
    assert merged.edges_created == 1
    assert merged.characteristics_created == 4
    assert merged.records_created == 8
    assert not merged.success
    assert merged.errors == ["Error parsing section: bad id"]


def test_merge_keeps_success():
    assert ParseResult().merge(ParseResult()).success


@pytest.mark.parametrize(
    "exc, counter",
    [
        (MissingContextError("no section"), "missing_context"),
        (MalformedReferenceError("bad id"), "malformed_references"),
        (StoreError("disk full"), "store_failures"),
    ],
)
def test_record_exception(exc, counter):
    result = ParseResult()

    result.record_exception(exc, "Error parsing section hierarchy")

    assert getattr(result, counter) == 1
    assert not result.success
    assert result.errors == [f"Error parsing section hierarchy: {exc}"]


def test_store_failures_are_sent_to_sentry(settings):
    settings.SENTRY_ENABLED = True
    exc = StoreError("disk full")

    with mock.patch.object(
        results,
        "capture_exception",
        create=True,
    ) as capture_exception:
        ParseResult().record_exception(exc, "Error parsing characteristics")

    capture_exception.assert_called_once_with(exc)


def test_summary():
    result = ParseResult(sections_created=3, edges_created=2, products_created=1)
    result.add_error("oops")

    assert result.summary() == (
        "3 sections, 2 hierarchy edges, 1 products, 0 packaging levels, "
        "0 characteristics created; 1 errors"
    )
