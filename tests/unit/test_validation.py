# tests/unit/test_validation.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from decimal import Decimal

import jsonschema
import pytest

from ledger_client.errors import InvalidParametersError
from ledger_client.validation import MAX_AMOUNT, MAX_SAFE_INTEGER, SCHEMAS, normalize_amount, validate


# =========================
# СУММЫ
# =========================

@pytest.mark.parametrize(
    "value, expected",
    [
        (0, 0),
        (100, 100),
        (MAX_SAFE_INTEGER, MAX_SAFE_INTEGER),
        (50.0, 50),
        ("9223372036854775807", MAX_AMOUNT),
        (Decimal(MAX_AMOUNT), MAX_AMOUNT),
        (Decimal("12.000"), 12),
    ],
)
def test_amount_accepted(value, expected):
    assert normalize_amount(value) == expected


@pytest.mark.parametrize(
    "value",
    [
        MAX_SAFE_INTEGER + 1,
        -1,
        True,
        1.5,
        Decimal(MAX_AMOUNT + 1),
        Decimal("1.5"),
        Decimal("NaN"),
        str(MAX_AMOUNT + 1),
        "-5",
        "1e3",
        "\u00b2",
        "\u0661\u0662",
        None,
        [1],
    ],
)
def test_amount_rejected(value):
    with pytest.raises(InvalidParametersError):
        normalize_amount(value)


# =========================
# СХЕМЫ
# =========================

@pytest.mark.parametrize("name", sorted(SCHEMAS))
def test_schemas_are_valid_draft7(name):
    jsonschema.Draft7Validator.check_schema(SCHEMAS[name])
    assert SCHEMAS[name]["additionalProperties"] is False


def test_validate_accepts_either_casing():
    validate({"keyIds": ["k1"], "quorum": 1, "tags": {"anyKey": 1}}, "CreateAccountSchema")
    validate({"key_ids": ["k1"]}, "CreateAccountSchema")


def test_validate_reports_missing_field():
    with pytest.raises(InvalidParametersError) as ei:
        validate({"quorum": 1}, "CreateAccountSchema")
    assert ei.value.schema == "CreateAccountSchema"
    assert "key_ids" in ei.value.message


def test_validate_rejects_unknown_field():
    with pytest.raises(InvalidParametersError) as ei:
        validate({"filter": "x", "bogus": 1}, "QueryParamsSchema")
    assert "bogus" in ei.value.message


def test_validate_type_error_has_path():
    with pytest.raises(InvalidParametersError) as ei:
        validate({"pageSize": "ten"}, "QueryParamsSchema")
    assert ei.value.path == ("page_size",)


def test_unknown_schema():
    with pytest.raises(KeyError):
        validate({}, "NoSuchSchema")
