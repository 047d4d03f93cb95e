from unittest import mock

import pytest
from bson import ObjectId
from pydantic import BaseModel

import database


def test_connect_exits_when_store_unreachable():
    with pytest.raises(SystemExit) as exc:
        database.connect("mongodb://127.0.0.1:1", "E_commerce", timeout_ms=50)
    assert exc.value.code == 1


def test_ensure_indexes():
    db = mock.MagicMock()
    database.ensure_indexes(db)
    calls = db.__getitem__.return_value.create_index.call_args_list
    assert mock.call([("username", 1)], unique=True) in calls
    assert mock.call([("name", 1)], unique=True) in calls
    assert mock.call([("location", "2dsphere")]) in calls
    assert mock.call([("name", "text"), ("description", "text")]) in calls


def test_create_document_accepts_models(db):
    class Item(BaseModel):
        name: str

    new_id = database.create_document(db, "items", Item(name="x"))
    assert db["items"].find_one({"_id": ObjectId(new_id)})["name"] == "x"


def test_create_document_does_not_mutate_input(db):
    data = {"name": "x"}
    database.create_document(db, "items", data)
    assert data == {"name": "x"}


def test_to_public():
    oid = ObjectId()
    assert database.to_public({"_id": oid, "name": "x"}) == {"id": str(oid), "name": "x"}
    assert database.to_public({"name": "x"}) == {"name": "x"}
