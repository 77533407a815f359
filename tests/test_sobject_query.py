"""Tests for SOQL predicate and SELECT construction."""

from __future__ import annotations

import pytest

from src.sobject.exceptions import SchemaError
from src.sobject.query import build_select, build_where, quote_value
from tests.models import SampleObject

SCHEMA = SampleObject.schema


def test_construction_of_single_value_where_conditions():
    assert build_where(SCHEMA, {"my_field1": "foo"}) == "MyField1 = 'foo'"


def test_construction_of_multi_value_where_conditions():
    query = build_where(SCHEMA, {"my_field1": "foo", "my_field2": "bar"})
    assert query == "MyField1 = 'foo' AND Test__MyField2__c = 'bar'"


def test_where_conditions_keep_given_order():
    query = build_where(SCHEMA, {"my_field2": "bar", "external_id": "abc"})
    assert query == "Test__MyField2__c = 'bar' AND Id = 'abc'"


def test_empty_conditions_build_empty_predicate():
    assert build_where(SCHEMA, {}) == ""


def test_argument_checking_for_construction_of_where_conditions():
    with pytest.raises(SchemaError) as exc_info:
        build_where(SCHEMA, {"invalid_field": "foo"})

    assert "invalid_field" in str(exc_info.value)
    assert "TestObject" in str(exc_info.value)
    assert exc_info.value.field_name == "invalid_field"
    assert exc_info.value.api_name == "TestObject"


def test_non_string_values_are_quoted_literally():
    assert build_where(SCHEMA, {"my_field1": 42}) == "MyField1 = '42'"


def test_none_value_builds_empty_literal():
    assert build_where(SCHEMA, {"my_field1": None}) == "MyField1 = ''"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("plain", "'plain'"),
        ("O'Brien", "'O\\'Brien'"),
        ("back\\slash", "'back\\\\slash'"),
        (None, "''"),
    ],
)
def test_quote_value_escapes(value, expected):
    assert quote_value(value) == expected


class TestBuildSelect:
    """Test full SELECT statement construction."""

    def test_selects_all_mapped_fields(self):
        assert build_select(SCHEMA) == "SELECT Id,MyField1,Test__MyField2__c FROM TestObject"

    def test_with_conditions(self):
        assert build_select(SCHEMA, {"my_field1": "foo"}) == (
            "SELECT Id,MyField1,Test__MyField2__c FROM TestObject WHERE MyField1 = 'foo'"
        )

    def test_with_fields_and_limit(self):
        soql = build_select(SCHEMA, {"my_field1": "foo"}, fields=["Id"], limit=1)
        assert soql == "SELECT Id FROM TestObject WHERE MyField1 = 'foo' LIMIT 1"
