# ledger_client/validation.py
# -*- coding: utf-8 -*-
"""
Local request validation for ledger-client.

Request bodies are checked against JSON Schemas (jsonschema, Draft 7) before
any network call. Schemas describe the wire shape, so bodies are snake-cased
first and callers may use either casing.

Amount rules for actions:
  - int / integral float: [0, 2**53 - 1] (JSON-safe integer range)
  - Decimal / digit string: [0, 2**63 - 1] (arbitrary precision on the wire)
Values outside the range are rejected, never truncated.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any, Callable, Dict, Mapping

import jsonschema
from jsonschema.exceptions import best_match

from .casing import snakeize
from .errors import InvalidParametersError

MAX_SAFE_INTEGER = 2**53 - 1
MAX_AMOUNT = 2**63 - 1

Validator = Callable[[Mapping[str, Any], str], None]

# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

_STRING = {"type": "string"}
_TAGS = {"type": ["object", "null"]}
_FILTER_PARAMS = {"type": "array", "items": {"type": ["string", "number", "boolean"]}}
_STRING_LIST = {"type": "array", "items": _STRING}
_PAGE_SIZE = {"type": "integer", "minimum": 1}


def _object(properties: Dict[str, Any], required=()) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(required),
        "additionalProperties": False,
    }


_QUERY_PROPS = {
    "filter": _STRING,
    "filter_params": _FILTER_PARAMS,
    "page_size": _PAGE_SIZE,
    "cursor": _STRING,
}

# amount is checked by normalize_amount(); the schema only requires it
_AMOUNT: Dict[str, Any] = {}

SCHEMAS: Dict[str, Dict[str, Any]] = {
    "CreateKeySchema": _object({"id": _STRING}),
    "CreateAccountSchema": _object(
        {
            "id": _STRING,
            "key_ids": _STRING_LIST,
            "quorum": {"type": "integer", "minimum": 1},
            "tags": _TAGS,
        },
        required=("key_ids",),
    ),
    "CreateFlavorSchema": _object(
        {
            "id": _STRING,
            "key_ids": _STRING_LIST,
            "quorum": {"type": "integer", "minimum": 1},
            "tags": _TAGS,
        },
        required=("key_ids",),
    ),
    "CreateAssetSchema": _object(
        {
            "alias": _STRING,
            "keys": {"type": "array", "items": {"type": "object"}},
            "quorum": {"type": "integer", "minimum": 1},
            "tags": _TAGS,
        }
    ),
    "UpdateTagsSchema": _object({"id": _STRING, "tags": _TAGS}, required=("id",)),
    "UpdateAssetTagsSchema": _object({"id": _STRING, "alias": _STRING, "tags": _TAGS}),
    "QueryParamsSchema": _object(_QUERY_PROPS),
    "SumParamsSchema": _object({**_QUERY_PROPS, "group_by": _STRING_LIST}),
    "BalanceQueryParamsSchema": _object({**_QUERY_PROPS, "sum_by": _STRING_LIST}),
    "KeyQueryParamsSchema": _object({"ids": _STRING_LIST, "page_size": _PAGE_SIZE, "cursor": _STRING}),
    "IndexQueryParamsSchema": _object({"page_size": _PAGE_SIZE, "cursor": _STRING}),
    "IssueActionSchema": _object(
        {
            "flavor_id": _STRING,
            "amount": _AMOUNT,
            "destination_account_id": _STRING,
            "token_tags": _TAGS,
            "action_tags": _TAGS,
        },
        required=("flavor_id", "amount", "destination_account_id"),
    ),
    "TransferActionSchema": _object(
        {
            "flavor_id": _STRING,
            "amount": _AMOUNT,
            "source_account_id": _STRING,
            "destination_account_id": _STRING,
            "filter": _STRING,
            "filter_params": _FILTER_PARAMS,
            "token_tags": _TAGS,
            "action_tags": _TAGS,
        },
        required=("flavor_id", "amount", "source_account_id", "destination_account_id"),
    ),
    "RetireActionSchema": _object(
        {
            "flavor_id": _STRING,
            "amount": _AMOUNT,
            "source_account_id": _STRING,
            "filter": _STRING,
            "filter_params": _FILTER_PARAMS,
            "action_tags": _TAGS,
        },
        required=("flavor_id", "amount", "source_account_id"),
    ),
    "CreateFeedSchema": _object(
        {
            "id": _STRING,
            "type": {"type": "string", "enum": ["action", "transaction"]},
            "filter": _STRING,
            "filter_params": _FILTER_PARAMS,
        },
        required=("type",),
    ),
    "FeedIdSchema": _object({"id": _STRING}, required=("id",)),
    "CreateIndexSchema": _object(
        {
            "id": _STRING,
            "type": {"type": "string", "enum": ["token", "action"]},
            "method": {"type": "string", "enum": ["sum"]},
            "filter": _STRING,
            "group_by": _STRING_LIST,
        },
        required=("type", "method", "filter"),
    ),
    "DeleteIndexSchema": _object({"id": _STRING}, required=("id",)),
}


@lru_cache(maxsize=None)
def _validator_for(schema_name: str) -> jsonschema.Draft7Validator:
    try:
        schema = SCHEMAS[schema_name]
    except KeyError:
        raise KeyError(f"unknown schema: {schema_name}") from None
    jsonschema.Draft7Validator.check_schema(schema)
    return jsonschema.Draft7Validator(schema)


def validate(body: Mapping[str, Any], schema_name: str) -> None:
    """
    Validate a request body against a named schema.
    Raises InvalidParametersError with the most relevant violation.
    """
    instance = snakeize(dict(body or {}))
    error = best_match(_validator_for(schema_name).iter_errors(instance))
    if error is not None:
        raise InvalidParametersError(
            f"{schema_name}: {error.message}",
            path=tuple(error.absolute_path),
            schema=schema_name,
        )


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------

def normalize_amount(value: Any) -> int:
    """
    Convert an action amount into an exact int, enforcing the range rules.
    """
    if isinstance(value, bool):
        raise InvalidParametersError("amount must be a number, got bool", path=("amount",))

    if isinstance(value, int):
        return _check_range(value, MAX_SAFE_INTEGER)

    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidParametersError(f"amount must be an integer, got {value!r}", path=("amount",))
        return _check_range(int(value), MAX_SAFE_INTEGER)

    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdecimal()):
            raise InvalidParametersError(f"amount must be a non-negative integer string, got {value!r}", path=("amount",))
        return _check_range(int(text), MAX_AMOUNT)

    if isinstance(value, Decimal):
        try:
            integral = value == value.to_integral_value()
        except InvalidOperation:
            integral = False
        if not value.is_finite() or not integral:
            raise InvalidParametersError(f"amount must be an integer, got {value}", path=("amount",))
        return _check_range(int(value), MAX_AMOUNT)

    raise InvalidParametersError(
        f"amount must be int, str or Decimal, got {type(value).__name__}", path=("amount",)
    )


def _check_range(amount: int, upper: int) -> int:
    if amount < 0 or amount > upper:
        raise InvalidParametersError(f"amount {amount} is out of range [0, {upper}]", path=("amount",))
    return amount


__all__ = [
    "MAX_SAFE_INTEGER",
    "MAX_AMOUNT",
    "SCHEMAS",
    "Validator",
    "validate",
    "normalize_amount",
]
