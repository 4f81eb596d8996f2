# tests/unit/test_errors.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import httpx
import pytest

from ledger_client.errors import (
    ApiError,
    AuthError,
    BadRequestError,
    ConnectivityError,
    JsonError,
    LedgerError,
    NoRequestIdError,
    NotFoundError,
    ServerError,
    classify,
    format_error_message,
)


def test_format_error_message_omits_empty_parts():
    assert format_error_message("boom") == "Message: boom"
    assert (
        format_error_message("boom", seq_code="SEQ1", detail="d", request_id="r1")
        == "Code: SEQ1 Message: boom Detail: d Request-ID: r1"
    )


@pytest.mark.parametrize(
    "status, cls",
    [
        (400, BadRequestError),
        (401, AuthError),
        (403, AuthError),
        (404, NotFoundError),
        (409, BadRequestError),
        (500, ServerError),
        (503, ServerError),
    ],
)
def test_classify(status, cls):
    err = classify(status, {"message": "m"}, request_id="r")
    assert type(err) is cls
    assert isinstance(err, ApiError)
    assert isinstance(err, LedgerError)
    assert err.status_code == status


def test_auth_error_is_bad_request():
    assert issubclass(AuthError, BadRequestError)


def test_api_error_fields_and_str():
    err = classify(
        400,
        {"message": "invalid", "seqCode": "SEQ202", "detail": "missing id", "retriable": False},
        request_id="req-9",
    )
    assert err.raw_message == "invalid"
    assert err.seq_code == "SEQ202"
    assert err.detail == "missing id"
    assert err.request_id == "req-9"
    assert err.retriable is False
    assert str(err) == "BadRequestError: Code: SEQ202 Message: invalid Detail: missing id Request-ID: req-9"


def test_action_errors_from_data():
    err = classify(
        400,
        {
            "message": "one or more actions failed",
            "seqCode": "SEQ702",
            "data": {
                "actions": [
                    {"seqCode": "SEQ735", "message": "insufficient", "index": 1},
                    {"seqCode": "SEQ736", "message": "nested", "data": {"index": 3}},
                    {"seqCode": "SEQ737", "message": "positional"},
                ]
            },
        },
    )
    assert [(e.index, e.seq_code) for e in err.action_errors] == [(1, "SEQ735"), (3, "SEQ736"), (2, "SEQ737")]
    assert classify(400, {"message": "x"}).action_errors == ()


def test_transport_level_errors():
    source = httpx.ConnectError("refused")
    err = ConnectivityError(source)
    assert err.source is source
    assert str(err) == "ConnectivityError: Fetch error: refused"

    assert "Chain-Request-Id" in str(NoRequestIdError())

    resp = httpx.Response(200, content=b"<html>", headers={"Chain-Request-Id": "r-7"})
    jerr = JsonError(resp)
    assert jerr.request_id == "r-7"
    assert str(jerr) == "JsonError: Could not parse JSON response Request-ID: r-7"
    assert jerr.response is resp


def test_request_id_rendered_once():
    assert str(LedgerError("boom", request_id="r-1")) == "LedgerError: boom Request-ID: r-1"
    assert str(LedgerError("boom")) == "LedgerError: boom"

    err = classify(500, {"message": "down"}, request_id="r-2")
    assert str(err).count("Request-ID: r-2") == 1
