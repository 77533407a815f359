"""Tests for lazy parent lookup and child collection proxies.

Covers:
- Parent resolution without memoization
- No client call for an empty foreign key
- CollectionProxy scoping and override of caller-supplied foreign keys
- String relationship targets resolved through the registry
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.sobject.config import Configuration
from src.sobject.exceptions import SchemaError
from src.sobject.record import SObject
from src.sobject.relationships import CollectionProxy, resolve_relationship
from src.sobject.schema import SchemaBuilder
from tests.models import Child, NAMESPACED_CONFIG, Parent


# ── Parent Relationships ─────────────────────────────────────────────────────


class TestParentRelationship:
    """Test lazy loading of parent records."""

    def test_lazy_loading_of_parent_on_attribute_call(self, mock_client):
        mock_client.find.return_value = {"Id": "somefakeid", "Name": "Acme"}
        child = Child({"parent_id": "somefakeid"})

        parent = child.parent

        assert isinstance(parent, Parent)
        assert parent.external_id == "somefakeid"
        assert parent.name == "Acme"
        mock_client.find.assert_called_once_with("Parent", "somefakeid")

    def test_empty_foreign_key_returns_none_without_client(self, mock_client):
        assert Child().parent is None
        assert Child({"parent_id": ""}).parent is None
        mock_client.find.assert_not_called()

    def test_every_access_is_a_fresh_lookup(self, mock_client):
        mock_client.find.return_value = {"Id": "somefakeid"}
        child = Child({"parent_id": "somefakeid"})

        child.parent
        child.parent

        assert mock_client.find.call_count == 2

    def test_relationship_with_explicit_config(self):
        client = MagicMock()
        client.find.return_value = {"Id": "P1"}
        config = Configuration(client_factory=lambda: client)

        parent = Child({"parent_id": "P1"}).relationship("parent", config=config)

        assert parent.external_id == "P1"
        client.find.assert_called_once_with("Parent", "P1")

    def test_unknown_relationship_raises(self):
        with pytest.raises(SchemaError, match="not a relationship"):
            Child().relationship("siblings")

    def test_relationship_is_read_only(self):
        with pytest.raises(AttributeError):
            Child().parent = Parent()


# ── Children Relationships ───────────────────────────────────────────────────


class TestCollectionProxy:
    """Test child collection proxies."""

    def test_lazy_loading_of_children_on_attribute_call(self, mock_client):
        parent = Parent({"external_id": "somefakeid"})

        children = parent.children

        assert isinstance(children, CollectionProxy)
        assert children.sobject_type is Child
        assert children.foreign_key == "parent_id"
        mock_client.query.assert_not_called()

    def test_each_access_builds_a_new_proxy(self):
        parent = Parent({"external_id": "P1"})
        assert parent.children is not parent.children

    def test_where_is_scoped_to_parent(self, mock_client):
        mock_client.query.return_value = [{"Id": "C1", "ParentId": "P1"}]
        parent = Parent({"external_id": "P1"})

        records = parent.children.where({})

        mock_client.query.assert_called_once_with(
            "SELECT Id,Name,ParentId FROM Child WHERE ParentId = 'P1'"
        )
        assert records[0].parent_id == "P1"

    def test_unsaved_parent_scopes_by_empty_id(self, mock_client):
        mock_client.query.return_value = []

        assert Parent().children.where({}) == []

        mock_client.query.assert_called_once_with(
            "SELECT Id,Name,ParentId FROM Child WHERE ParentId = ''"
        )

    def test_caller_foreign_key_is_overridden(self, mock_client):
        mock_client.query.return_value = []
        conditions = {"name": "Bob", "parent_id": "OTHER"}

        Parent({"external_id": "P1"}).children.where(conditions)

        mock_client.query.assert_called_once_with(
            "SELECT Id,Name,ParentId FROM Child WHERE Name = 'Bob' AND ParentId = 'P1'"
        )
        assert conditions["parent_id"] == "OTHER"

    def test_all_and_iteration(self, mock_client):
        mock_client.query.return_value = [{"Id": "C1"}, {"Id": "C2"}]
        children = Parent({"external_id": "P1"}).children

        assert [c.external_id for c in children.all()] == ["C1", "C2"]
        assert [c.external_id for c in children] == ["C1", "C2"]

    def test_find_restricts_to_parent(self, mock_client):
        mock_client.query.return_value = [{"Id": "C1", "ParentId": "P1"}]

        child = Parent({"external_id": "P1"}).children.find("C1")

        mock_client.query.assert_called_once_with(
            "SELECT Id,Name,ParentId FROM Child WHERE Id = 'C1' AND ParentId = 'P1'"
        )
        assert child.external_id == "C1"

    def test_find_by_returns_none(self, mock_client):
        mock_client.query.return_value = []
        assert Parent({"external_id": "P1"}).children.find_by({"name": "Bob"}) is None

    def test_exists_is_scoped(self, mock_client):
        mock_client.query.return_value = [{"Id": "C1"}]
        assert Parent({"external_id": "P1"}).children.exists() is True
        mock_client.query.assert_called_once_with(
            "SELECT Id FROM Child WHERE ParentId = 'P1' LIMIT 1"
        )

    def test_build_prefills_foreign_key(self):
        child = Parent({"external_id": "P1"}).children.build({"name": "Bob"})
        assert isinstance(child, Child)
        assert child.parent_id == "P1"
        assert child.is_new()


# ── Generic Resolver ─────────────────────────────────────────────────────────


def test_resolver_with_class_target(mock_client):
    class Owner(SObject):
        schema = SchemaBuilder("Owner", config=NAMESPACED_CONFIG).build()

    class Pet(SObject):
        schema = SchemaBuilder("Pet", config=NAMESPACED_CONFIG).parent("owner", target=Owner).build()

    mock_client.find.return_value = {"Id": "O1"}
    descriptor = Pet.schema.relationships["owner"]

    owner = resolve_relationship(Pet({"owner_id": "O1"}), descriptor)

    assert isinstance(owner, Owner)
    mock_client.find.assert_called_once_with("Owner", "O1")


def test_unresolvable_target_raises(mock_client):
    class Orphan(SObject):
        schema = SchemaBuilder("Orphan", config=NAMESPACED_CONFIG).parent("ghost").build()

    with pytest.raises(SchemaError, match="GhostSObject"):
        Orphan({"ghost_id": "G1"}).ghost
