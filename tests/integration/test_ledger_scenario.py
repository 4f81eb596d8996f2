# tests/integration/test_ledger_scenario.py
# -*- coding: utf-8 -*-
"""
Сквозной сценарий: alice и bob, выпуск 100, перевод 50, погашение 20.
Ожидаемые балансы: alice=50, bob=30. Бэкенд - FakeLedger (MockTransport).
"""

from __future__ import annotations

import json

import pytest

from conftest import FakeLedger


def _issue(b):
    b.issue(flavor_id="usd", amount=100, destination_account_id="alice", token_tags={"Source": "mint"})


def _transfer(b):
    b.transfer(flavorId="usd", amount=50, sourceAccountId="alice", destinationAccountId="bob")
    b.transaction_tags = {"Memo": "rent"}


def _retire(b):
    b.retire(flavor_id="usd", amount="20", source_account_id="bob")


def test_alice_bob_scenario(make_client):
    ledger = FakeLedger()
    client = make_client(ledger)

    key = client.keys.create(id="treasury")
    client.flavors.create(id="usd", key_ids=[key["id"]], quorum=1)
    for name in ("alice", "bob"):
        client.accounts.create(id=name, key_ids=[key["id"]], quorum=1, tags={"Type": "customer"})

    client.transactions.transact(_issue)
    tx = client.transactions.transact(_transfer)
    client.transactions.transact(_retire)

    assert tx["tags"] == {"Memo": "rent"}
    balances = {row["accountId"]: row["amount"] for row in client.balances.list(sum_by=["account_id"]).all()}
    assert balances == {"alice": 50, "bob": 30}

    bob = client.balances.list(filter="account_id=$1", filter_params=["bob"]).page()
    assert [(r["flavorId"], r["amount"]) for r in bob.items] == [("usd", 30)]

    txs = list(client.transactions.list().all(size=1))
    assert len(txs) == 3
    assert ledger.hello_count == 1


def test_pagination_across_many_accounts(make_client):
    ledger = FakeLedger()
    client = make_client(ledger)
    client.keys.create(id="k")
    names = [f"acct-{i}" for i in range(7)]
    for name in names:
        client.accounts.create(id=name, key_ids=["k"], tags={"Group": "g1"})

    query = client.accounts.list(filter="id=$1 AND quorum=$2", filter_params=["acct-3", 1])
    assert [a["id"] for a in query.all()] == ["acct-3"]

    seen = [a["id"] for a in client.accounts.list().all(size=3)]
    assert seen == names

    list_bodies = [json.loads(r.content) for r in ledger.requests if r.url.path.endswith("/list-accounts")]
    # продолжение по курсору не пересылает фильтр
    assert list_bodies[-3] == {"page_size": 3}
    assert all(set(b) == {"cursor", "page_size"} for b in list_bodies[-2:])


@pytest.mark.asyncio
async def test_alice_bob_scenario_async(make_async_client):
    ledger = FakeLedger()
    async with make_async_client(ledger) as client:
        await client.keys.create(id="treasury")
        await client.flavors.create(id="usd", key_ids=["treasury"])
        for name in ("alice", "bob"):
            await client.accounts.create(id=name, key_ids=["treasury"])

        await client.transactions.transact(_issue)
        await client.transactions.transact(_transfer)
        await client.transactions.transact(_retire)

        balances = {
            row["accountId"]: row["amount"]
            async for row in client.balances.list(sum_by=["account_id"]).all(size=1)
        }
    assert balances == {"alice": 50, "bob": 30}
    assert ledger.hello_count == 1
