"""Unit tests for the Kong gateway state provider."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, call

import pytest

from kong_adapter.models.entities import ApiDefinition, ConsumerDefinition
from kong_adapter.services.kong.gateway import KongGateway


@pytest.fixture
def mock_client() -> MagicMock:
    """Create a mock Kong Admin client."""
    return MagicMock()


@pytest.fixture
def gateway(mock_client: MagicMock) -> KongGateway:
    """Create a gateway on the mock client."""
    return KongGateway(mock_client)


def _collections(mock_client: MagicMock, **collections: list[dict[str, Any]]) -> None:
    """Serve list_all() results per endpoint."""

    def list_all(endpoint: str, **kwargs: Any) -> list[dict[str, Any]]:
        return collections.get(endpoint, [])

    mock_client.list_all.side_effect = list_all


SERVICE = {
    "id": "svc-1",
    "name": "petstore",
    "host": "petstore",
    "port": 8080,
    "protocol": "http",
    "path": None,
    "created_at": 1700000000,
    "updated_at": 1700000000,
    "tags": ["wicked"],
}


class TestFetchActualApis:
    """Tests for fetch_actual_apis."""

    @pytest.mark.unit
    def test_maps_services_routes_and_plugins(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
    ) -> None:
        """Each named service becomes an API with its routes and service plugins."""
        route = {"id": "r-1", "name": "pets", "paths": ["/pets"], "service": {"id": "svc-1"}}
        service_plugin = {"id": "p-1", "name": "cors", "service": {"id": "svc-1"}}
        _collections(
            mock_client,
            services=[SERVICE, {"id": "svc-2", "name": None, "host": "anon"}],
            routes=[route, {"id": "r-9", "name": "orphan", "service": None}],
            plugins=[
                service_plugin,
                {"id": "p-2", "name": "acl", "service": {"id": "svc-1"}, "consumer": {"id": "c"}},
                {"id": "p-3", "name": "prometheus", "service": None, "consumer": None},
                {"id": "p-4", "name": "jwt", "service": {"id": "svc-1"}, "route": {"id": "r-1"}},
            ],
        )

        apis = gateway.fetch_actual_apis()

        assert len(apis) == 1
        api = apis[0]
        assert api.name == "petstore"
        assert api.id == "svc-1"
        assert api.plugins == [service_plugin]
        assert api.config["routes"] == [route]
        assert api.config["host"] == "petstore"
        assert "id" not in api.config
        assert "name" not in api.config
        assert "created_at" not in api.config

    @pytest.mark.unit
    def test_scope_filters_services_by_tag(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
    ) -> None:
        _collections(mock_client)

        gateway.fetch_actual_apis(scope="wicked")

        assert call("services", tags=["wicked"]) in mock_client.list_all.call_args_list


class TestCreateApi:
    """Tests for create_api."""

    @pytest.mark.unit
    def test_creates_service_and_routes(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
    ) -> None:
        """The url shorthand is expanded and scope tags are added."""
        created_route = {"id": "r-1", "name": "petstore-0", "paths": ["/pets"]}
        mock_client.post.side_effect = [
            {**SERVICE, "path": "/v1", "tags": ["team-a", "wicked"]},
            created_route,
        ]
        api = ApiDefinition(
            name="petstore",
            config={
                "url": "http://petstore:8080/v1",
                "tags": ["team-a"],
                "routes": [{"paths": ["/pets"]}],
            },
            plugins=[{"name": "cors"}],
        )

        created = gateway.create_api(api, scope="wicked")

        assert mock_client.post.call_args_list == [
            call(
                "services",
                json={
                    "name": "petstore",
                    "protocol": "http",
                    "host": "petstore",
                    "port": 8080,
                    "path": "/v1",
                    "tags": ["team-a", "wicked"],
                },
            ),
            call(
                "services/svc-1/routes",
                json={"paths": ["/pets"], "name": "petstore-0", "tags": ["wicked"]},
            ),
        ]
        assert created.id == "svc-1"
        assert created.plugins == []
        assert created.config["routes"] == [created_route]

    @pytest.mark.unit
    def test_without_scope_sends_no_tags(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
    ) -> None:
        mock_client.post.return_value = SERVICE

        gateway.create_api(ApiDefinition(name="petstore", config={"host": "petstore"}))

        mock_client.post.assert_called_once_with(
            "services", json={"host": "petstore", "name": "petstore"}
        )


class TestUpdateApi:
    """Tests for update_api."""

    @pytest.mark.unit
    def test_no_drift_no_call(self, gateway: KongGateway, mock_client: MagicMock) -> None:
        """An unchanged API is not patched."""
        desired = ApiDefinition(name="petstore", config={"url": "http://petstore:8080"})
        actual = ApiDefinition(
            name="petstore",
            id="svc-1",
            config={"host": "petstore", "port": 8080, "protocol": "http", "path": None},
        )

        assert gateway.update_api(desired, actual) is False
        mock_client.patch.assert_not_called()

    @pytest.mark.unit
    def test_drifted_attributes_are_patched(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
    ) -> None:
        desired = ApiDefinition(name="petstore", config={"read_timeout": 5000})
        actual = ApiDefinition(name="petstore", id="svc-1", config={"read_timeout": 60000})

        assert gateway.update_api(desired, actual) is True
        mock_client.patch.assert_called_once_with("services/svc-1", json={"read_timeout": 5000})

    @pytest.mark.unit
    def test_tags_are_additive(self, gateway: KongGateway, mock_client: MagicMock) -> None:
        """Existing tags such as the scope tag are kept."""
        desired = ApiDefinition(name="petstore", config={"tags": ["team-a"]})
        actual = ApiDefinition(name="petstore", id="svc-1", config={"tags": ["wicked"]})

        assert gateway.update_api(desired, actual) is True
        mock_client.patch.assert_called_once_with(
            "services/svc-1", json={"tags": ["wicked", "team-a"]}
        )

    @pytest.mark.unit
    def test_routes_reconciled_by_name(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
    ) -> None:
        """Missing routes are created, unknown ones deleted, matching ones kept."""
        desired = ApiDefinition(
            name="petstore",
            config={"routes": [{"name": "pets", "paths": ["/pets"]}, {"paths": ["/new"]}]},
        )
        actual = ApiDefinition(
            name="petstore",
            id="svc-1",
            config={
                "routes": [
                    {"id": "r-1", "name": "pets", "paths": ["/pets"], "strip_path": True},
                    {"id": "r-2", "name": "old", "paths": ["/old"]},
                ]
            },
        )

        assert gateway.update_api(desired, actual) is True
        mock_client.post.assert_called_once_with(
            "services/svc-1/routes", json={"paths": ["/new"], "name": "petstore-1"}
        )
        mock_client.delete.assert_called_once_with("routes/r-2")
        mock_client.patch.assert_not_called()

    @pytest.mark.unit
    def test_drifted_route_is_patched(self, gateway: KongGateway, mock_client: MagicMock) -> None:
        desired = ApiDefinition(
            name="petstore",
            config={"routes": [{"name": "pets", "paths": ["/pets", "/v2/pets"]}]},
        )
        actual = ApiDefinition(
            name="petstore",
            id="svc-1",
            config={"routes": [{"id": "r-1", "name": "pets", "paths": ["/pets"]}]},
        )

        assert gateway.update_api(desired, actual) is True
        mock_client.patch.assert_called_once_with(
            "routes/r-1", json={"name": "pets", "paths": ["/pets", "/v2/pets"]}
        )

    @pytest.mark.unit
    def test_url_without_path_resets_path(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
    ) -> None:
        """A dropped path is sent as null so Kong converges."""
        desired = ApiDefinition(name="petstore", config={"url": "http://petstore"})
        actual = ApiDefinition(
            name="petstore",
            id="svc-1",
            config={"protocol": "http", "host": "petstore", "port": 80, "path": "/old"},
        )

        assert gateway.update_api(desired, actual) is True
        mock_client.patch.assert_called_once_with(
            "services/svc-1",
            json={"protocol": "http", "host": "petstore", "port": 80, "path": None},
        )

    @pytest.mark.unit
    def test_route_created_on_update_carries_scope(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
    ) -> None:
        desired = ApiDefinition(name="petstore", config={"routes": [{"paths": ["/pets"]}]})
        actual = ApiDefinition(name="petstore", id="svc-1", config={"routes": []})

        assert gateway.update_api(desired, actual, scope="wicked") is True
        mock_client.post.assert_called_once_with(
            "services/svc-1/routes",
            json={"paths": ["/pets"], "name": "petstore-0", "tags": ["wicked"]},
        )

    @pytest.mark.unit
    def test_routes_left_alone_when_not_declared(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
    ) -> None:
        desired = ApiDefinition(name="petstore")
        actual = ApiDefinition(
            name="petstore",
            id="svc-1",
            config={"routes": [{"id": "r-1", "name": "pets"}]},
        )

        assert gateway.update_api(desired, actual) is False
        mock_client.delete.assert_not_called()


class TestDeleteApi:
    """Tests for delete_api."""

    @pytest.mark.unit
    def test_routes_deleted_before_service(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
    ) -> None:
        api = ApiDefinition(
            name="petstore",
            id="svc-1",
            config={"routes": [{"id": "r-1", "name": "pets"}]},
        )

        gateway.delete_api(api)

        assert mock_client.delete.call_args_list == [call("routes/r-1"), call("services/svc-1")]


class TestApiPlugins:
    """Tests for service plugin operations."""

    @pytest.fixture
    def api(self) -> ApiDefinition:
        return ApiDefinition(name="petstore", id="svc-1")

    @pytest.mark.unit
    def test_create_plugin_scoped_to_service(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
        api: ApiDefinition,
    ) -> None:
        mock_client.post.return_value = {"id": "p-1", "name": "cors"}

        result = gateway.create_plugin(api, {"name": "cors", "config": {"origins": ["*"]}})

        mock_client.post.assert_called_once_with(
            "plugins",
            json={"name": "cors", "config": {"origins": ["*"]}, "service": {"id": "svc-1"}},
        )
        assert result["id"] == "p-1"

    @pytest.mark.unit
    def test_update_plugin_patches_actual_id(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
        api: ApiDefinition,
    ) -> None:
        desired = {"name": "rate-limiting", "config": {"minute": 10}}
        actual = {"id": "p-1", "name": "rate-limiting", "config": {"minute": 20}}

        gateway.update_plugin(api, desired, actual)

        mock_client.patch.assert_called_once_with(
            "plugins/p-1",
            json={"name": "rate-limiting", "config": {"minute": 10}, "service": {"id": "svc-1"}},
        )

    @pytest.mark.unit
    def test_delete_plugin(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
        api: ApiDefinition,
    ) -> None:
        gateway.delete_plugin(api, {"id": "p-1", "name": "cors"})

        mock_client.delete.assert_called_once_with("plugins/p-1")


class TestConsumers:
    """Tests for consumer operations."""

    @pytest.mark.unit
    def test_fetch_resolves_binding_service_names(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
    ) -> None:
        """Bindings carry the API name next to the service id."""
        _collections(
            mock_client,
            consumers=[
                {"id": "c-1", "username": "alice", "custom_id": "u-1"},
                {"id": "c-2", "username": None, "custom_id": "machine"},
            ],
            plugins=[
                {"id": "p-1", "name": "rate-limiting", "service": {"id": "svc-1"},
                 "consumer": {"id": "c-1"}},
                {"id": "p-2", "name": "acl", "service": None, "consumer": {"id": "c-1"}},
                {"id": "p-3", "name": "cors", "service": {"id": "svc-1"}, "consumer": None},
            ],
            services=[SERVICE],
        )

        consumers = gateway.fetch_actual_consumers()

        assert [c.username for c in consumers] == ["alice"]
        alice = consumers[0]
        assert alice.id == "c-1"
        assert alice.custom_id == "u-1"
        assert alice.api_plugins == [
            {
                "id": "p-1",
                "name": "rate-limiting",
                "service": {"id": "svc-1", "name": "petstore"},
                "consumer": {"id": "c-1"},
            },
            {"id": "p-2", "name": "acl", "service": None, "consumer": {"id": "c-1"}},
        ]

    @pytest.mark.unit
    def test_create_consumer_tags_scope(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
    ) -> None:
        mock_client.post.return_value = {"id": "c-1", "username": "alice", "custom_id": "u-1"}
        consumer = ConsumerDefinition(
            username="alice",
            custom_id="u-1",
            api_plugins=[{"name": "acl"}],
        )

        created = gateway.create_consumer(consumer, scope="wicked")

        mock_client.post.assert_called_once_with(
            "consumers",
            json={"username": "alice", "custom_id": "u-1", "tags": ["wicked"]},
        )
        assert created.id == "c-1"
        assert created.api_plugins == []

    @pytest.mark.unit
    def test_update_consumer_without_drift(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
    ) -> None:
        desired = ConsumerDefinition(username="alice")
        actual = ConsumerDefinition(username="alice", id="c-1", custom_id="u-1")

        assert gateway.update_consumer(desired, actual) is False
        mock_client.patch.assert_not_called()

    @pytest.mark.unit
    def test_update_consumer_patches_custom_id(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
    ) -> None:
        desired = ConsumerDefinition(username="alice", custom_id="new")
        actual = ConsumerDefinition(username="alice", id="c-1", custom_id="old")

        assert gateway.update_consumer(desired, actual) is True
        mock_client.patch.assert_called_once_with(
            "consumers/c-1", json={"username": "alice", "custom_id": "new"}
        )

    @pytest.mark.unit
    def test_delete_consumer(self, gateway: KongGateway, mock_client: MagicMock) -> None:
        gateway.delete_consumer(ConsumerDefinition(username="bob", id="c-2"))

        mock_client.delete.assert_called_once_with("consumers/c-2")


class TestConsumerPlugins:
    """Tests for consumer plugin binding operations."""

    @pytest.fixture
    def consumer(self) -> ConsumerDefinition:
        return ConsumerDefinition(username="alice", id="c-1")

    @pytest.mark.unit
    def test_create_binding_by_api_name(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
        consumer: ConsumerDefinition,
    ) -> None:
        plugin = {"name": "rate-limiting", "service": {"name": "petstore"}, "config": {"minute": 5}}

        gateway.create_consumer_plugin(consumer, plugin)

        mock_client.post.assert_called_once_with(
            "plugins",
            json={
                "name": "rate-limiting",
                "service": {"name": "petstore"},
                "config": {"minute": 5},
                "consumer": {"id": "c-1"},
            },
        )

    @pytest.mark.unit
    def test_patch_binding(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
        consumer: ConsumerDefinition,
    ) -> None:
        desired = {"name": "rate-limiting", "service": {"name": "petstore"}, "config": {"minute": 5}}
        actual = {
            "id": "p-1",
            "name": "rate-limiting",
            "service": {"id": "svc-1", "name": "petstore"},
            "config": {"minute": 50},
        }

        gateway.patch_consumer_plugin(consumer, desired, actual)

        mock_client.patch.assert_called_once_with(
            "plugins/p-1",
            json={
                "name": "rate-limiting",
                "config": {"minute": 5},
                "service": {"name": "petstore"},
                "consumer": {"id": "c-1"},
            },
        )

    @pytest.mark.unit
    def test_delete_binding(
        self,
        gateway: KongGateway,
        mock_client: MagicMock,
        consumer: ConsumerDefinition,
    ) -> None:
        gateway.delete_consumer_plugin(consumer, {"id": "p-1", "name": "acl"})

        mock_client.delete.assert_called_once_with("plugins/p-1")
