"""Tests for the reconciled resource models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from kong_adapter.models.entities import ApiDefinition, ConsumerDefinition
from kong_adapter.models.report import SyncReport


class TestApiDefinition:
    """Tests for ApiDefinition."""

    @pytest.mark.unit
    def test_defaults(self) -> None:
        api = ApiDefinition(name="petstore")

        assert api.id is None
        assert api.config == {}
        assert api.plugins == []

    @pytest.mark.unit
    def test_extra_fields_kept(self) -> None:
        """Gateway metadata survives validation."""
        api = ApiDefinition.model_validate({"name": "petstore", "created_at": 1700000000})

        assert api.model_dump()["created_at"] == 1700000000

    @pytest.mark.unit
    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ApiDefinition(name="")

    @pytest.mark.unit
    def test_unnamed_plugin_rejected(self) -> None:
        with pytest.raises(ValidationError, match="plugin at index 1 has no name"):
            ApiDefinition(name="petstore", plugins=[{"name": "cors"}, {"config": {}}])


class TestConsumerDefinition:
    """Tests for ConsumerDefinition."""

    @pytest.mark.unit
    def test_accepts_alias_and_field_name(self) -> None:
        by_alias = ConsumerDefinition.model_validate(
            {"username": "alice", "apiPlugins": [{"name": "acl"}]}
        )
        by_name = ConsumerDefinition(username="alice", api_plugins=[{"name": "acl"}])

        assert by_alias.api_plugins == by_name.api_plugins == [{"name": "acl"}]

    @pytest.mark.unit
    def test_attributes_skip_unset_custom_id(self) -> None:
        assert ConsumerDefinition(username="alice").attributes() == {"username": "alice"}
        assert ConsumerDefinition(username="alice", custom_id="u-1").attributes() == {
            "username": "alice",
            "custom_id": "u-1",
        }

    @pytest.mark.unit
    def test_unnamed_binding_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ConsumerDefinition(username="alice", api_plugins=[{"service": {"name": "x"}}])


class TestSyncReport:
    """Tests for SyncReport."""

    @pytest.mark.unit
    def test_record_and_count(self) -> None:
        report = SyncReport()
        report.record("api", "create", "petstore")
        report.record("plugin", "create", "cors", parent="petstore")
        report.record("plugin", "delete", "acl", parent="petstore")

        assert report.total == 3
        assert report.count(kind="plugin") == 2
        assert report.count(action="create") == 2
        assert report.count(kind="plugin", action="delete") == 1
        assert report.operations[1].parent == "petstore"
