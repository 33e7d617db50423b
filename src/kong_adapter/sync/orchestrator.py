"""Reconciliation orchestrator.

Each entry point is a linear pipeline: fetch (desired and actual state in
parallel) -> diff -> apply adds -> apply updates/patches -> apply deletes.
Child resources are reconciled by nested pipelines that run during the
parent's add and update stages, so an API exists before its plugins are
created and a consumer exists before its bindings are.

Apply steps never run concurrently. The first failing step aborts the
rest of its pipeline and every enclosing one; steps already applied are
not rolled back.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import TYPE_CHECKING, TypeVar

import structlog

from kong_adapter.integrations.kong.exceptions import KongAPIError
from kong_adapter.models.entities import ApiDefinition, ConsumerDefinition
from kong_adapter.models.report import SyncReport
from kong_adapter.models.todo import ApiSyncPlan, ConsumerSyncPlan
from kong_adapter.sync.diff import (
    assemble_api_todo_lists,
    assemble_consumer_plugin_todo_lists,
    assemble_consumer_todo_lists,
    assemble_plugin_todo_lists,
)
from kong_adapter.sync.exceptions import SyncAbortedError

if TYPE_CHECKING:
    from kong_adapter.models.report import ResourceKind
    from kong_adapter.sync.protocols import DesiredStateProvider, GatewayStateProvider

logger = structlog.get_logger()

D = TypeVar("D")
A = TypeVar("A")


class SyncOrchestrator:
    """Reconciles the gateway against the portal.

    Example:
        >>> orchestrator = SyncOrchestrator(portal_provider, kong_gateway)
        >>> report = orchestrator.sync_all(scope="wicked")
        >>> report.count(kind="api", action="create")
        2
    """

    def __init__(
        self,
        portal: DesiredStateProvider,
        gateway: GatewayStateProvider,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            portal: Provider of the desired state.
            gateway: Provider (and mutator) of the actual state.
        """
        self._portal = portal
        self._gateway = gateway
        self._log = logger.bind(service="sync_orchestrator")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _fetch_both(
        self,
        fetch_desired: Callable[[str | None], D],
        fetch_actual: Callable[[str | None], A],
        scope: str | None,
    ) -> tuple[D, A]:
        """Fetch desired and actual state concurrently and wait for both."""
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="sync-fetch") as executor:
            desired_future = executor.submit(fetch_desired, scope)
            actual_future = executor.submit(fetch_actual, scope)
            return desired_future.result(), actual_future.result()

    @contextmanager
    def _applying(
        self,
        stage: str,
        kind: ResourceKind,
        identity: str,
        report: SyncReport,
    ) -> Iterator[None]:
        """Turn a gateway failure into a SyncAbortedError for this step."""
        try:
            yield
        except KongAPIError as e:
            self._log.error(
                "apply_failed",
                stage=stage,
                kind=kind,
                identity=identity,
                applied=report.total,
                error=str(e),
            )
            raise SyncAbortedError(stage, kind, identity, report, str(e)) from e

    # =========================================================================
    # APIs and their plugins
    # =========================================================================

    def sync_apis(self, scope: str | None = None) -> SyncReport:
        """Reconcile all APIs, and the plugins of each, in one cycle.

        Args:
            scope: Restrict the cycle to one portal scope / gateway tag.

        Returns:
            SyncReport of the operations applied.

        Raises:
            SyncAbortedError: If an apply step failed.
            DuplicateIdentityError: If a fetched collection has duplicates.
        """
        log = self._log.bind(kind="api", scope=scope)
        log.info("syncing_apis")

        desired_apis, actual_apis = self._fetch_both(
            self._portal.fetch_desired_apis,
            self._gateway.fetch_actual_apis,
            scope,
        )
        todo = assemble_api_todo_lists(desired_apis, actual_apis)
        log.info("api_changes_planned", **todo.summary())

        report = SyncReport()

        for desired in todo.add_list:
            self._add_api(desired, scope, report)

        for pair in todo.update_list:
            self._update_api(pair.desired, pair.actual, scope, report)

        for actual in todo.delete_list:
            with self._applying("delete", "api", actual.name, report):
                self._gateway.delete_api(actual)
            report.record("api", "delete", actual.name)

        log.info("apis_synced", operations=report.total)
        return report

    def _add_api(self, desired: ApiDefinition, scope: str | None, report: SyncReport) -> None:
        with self._applying("add", "api", desired.name, report):
            created = self._gateway.create_api(desired, scope)
        report.record("api", "create", desired.name)
        # A new API has no plugins yet; reconcile them now rather than next cycle
        self.sync_plugins(desired, created, report=report)

    def _update_api(
        self,
        desired: ApiDefinition,
        actual: ApiDefinition,
        scope: str | None,
        report: SyncReport,
    ) -> None:
        with self._applying("update", "api", desired.name, report):
            changed = self._gateway.update_api(desired, actual, scope)
        if changed:
            report.record("api", "update", desired.name)
        self.sync_plugins(desired, actual, report=report)

    def sync_plugins(
        self,
        desired_api: ApiDefinition,
        actual_api: ApiDefinition,
        *,
        report: SyncReport | None = None,
    ) -> SyncReport:
        """Reconcile the plugins of one API present on both sides.

        Args:
            desired_api: The API as declared by the portal.
            actual_api: The same API as it exists in the gateway.
            report: Report to append to (a new one when None).

        Returns:
            The report with this API's plugin operations appended.
        """
        report = report if report is not None else SyncReport()
        todo = assemble_plugin_todo_lists(desired_api, actual_api)
        if todo.is_empty:
            return report

        api_name = desired_api.name
        log = self._log.bind(kind="plugin", api=api_name)
        log.info("syncing_plugins", **todo.summary())

        for plugin in todo.add_list:
            name = str(plugin["name"])
            with self._applying("add", "plugin", name, report):
                self._gateway.create_plugin(actual_api, plugin)
            report.record("plugin", "create", name, parent=api_name)

        for pair in todo.update_list:
            with self._applying("update", "plugin", pair.name, report):
                self._gateway.update_plugin(actual_api, pair.desired, pair.actual)
            report.record("plugin", "update", pair.name, parent=api_name)

        for plugin in todo.delete_list:
            name = str(plugin["name"])
            with self._applying("delete", "plugin", name, report):
                self._gateway.delete_plugin(actual_api, plugin)
            report.record("plugin", "delete", name, parent=api_name)

        log.debug("plugins_synced")
        return report

    # =========================================================================
    # Consumers and their per-API plugin bindings
    # =========================================================================

    def sync_consumers(self, scope: str | None = None) -> SyncReport:
        """Reconcile all consumers, and the plugin bindings of each.

        Args:
            scope: Restrict the cycle to one portal scope / gateway tag.

        Returns:
            SyncReport of the operations applied.

        Raises:
            SyncAbortedError: If an apply step failed.
            DuplicateIdentityError: If a fetched collection has duplicates.
        """
        log = self._log.bind(kind="consumer", scope=scope)
        log.info("syncing_consumers")

        desired_consumers, actual_consumers = self._fetch_both(
            self._portal.fetch_desired_consumers,
            self._gateway.fetch_actual_consumers,
            scope,
        )
        todo = assemble_consumer_todo_lists(desired_consumers, actual_consumers)
        log.info("consumer_changes_planned", **todo.summary())

        report = SyncReport()

        for desired in todo.add_list:
            self._add_consumer(desired, scope, report)

        for pair in todo.update_list:
            self._update_consumer(pair.desired, pair.actual, report)

        for actual in todo.delete_list:
            with self._applying("delete", "consumer", actual.username, report):
                self._gateway.delete_consumer(actual)
            report.record("consumer", "delete", actual.username)

        log.info("consumers_synced", operations=report.total)
        return report

    def _add_consumer(
        self,
        desired: ConsumerDefinition,
        scope: str | None,
        report: SyncReport,
    ) -> None:
        with self._applying("add", "consumer", desired.username, report):
            created = self._gateway.create_consumer(desired, scope)
        report.record("consumer", "create", desired.username)
        self.sync_consumer_plugins(desired, created, report=report)

    def _update_consumer(
        self,
        desired: ConsumerDefinition,
        actual: ConsumerDefinition,
        report: SyncReport,
    ) -> None:
        with self._applying("update", "consumer", desired.username, report):
            changed = self._gateway.update_consumer(desired, actual)
        if changed:
            report.record("consumer", "update", desired.username)
        self.sync_consumer_plugins(desired, actual, report=report)

    def sync_consumer_plugins(
        self,
        desired_consumer: ConsumerDefinition,
        actual_consumer: ConsumerDefinition,
        *,
        report: SyncReport | None = None,
    ) -> SyncReport:
        """Reconcile the per-API plugin bindings of one consumer.

        Args:
            desired_consumer: The consumer as declared by the portal.
            actual_consumer: The same consumer as it exists in the gateway.
            report: Report to append to (a new one when None).

        Returns:
            The report with this consumer's binding operations appended.
        """
        report = report if report is not None else SyncReport()
        todo = assemble_consumer_plugin_todo_lists(desired_consumer, actual_consumer)
        if todo.is_empty:
            return report

        username = desired_consumer.username
        log = self._log.bind(kind="consumer_plugin", username=username)
        log.info("syncing_consumer_plugins", **todo.summary())

        for plugin in todo.add_list:
            name = str(plugin["name"])
            with self._applying("add", "consumer_plugin", name, report):
                self._gateway.create_consumer_plugin(actual_consumer, plugin)
            report.record("consumer_plugin", "create", name, parent=username)

        for pair in todo.patch_list:
            with self._applying("patch", "consumer_plugin", pair.name, report):
                self._gateway.patch_consumer_plugin(actual_consumer, pair.desired, pair.actual)
            report.record("consumer_plugin", "patch", pair.name, parent=username)

        for plugin in todo.delete_list:
            name = str(plugin["name"])
            with self._applying("delete", "consumer_plugin", name, report):
                self._gateway.delete_consumer_plugin(actual_consumer, plugin)
            report.record("consumer_plugin", "delete", name, parent=username)

        log.debug("consumer_plugins_synced")
        return report

    # =========================================================================
    # Whole-gateway sync and dry runs
    # =========================================================================

    def sync_all(self, scope: str | None = None) -> SyncReport:
        """Reconcile APIs, then consumers (bindings reference APIs)."""
        report = self.sync_apis(scope)
        report.operations.extend(self.sync_consumers(scope).operations)
        return report

    def plan_apis(self, scope: str | None = None) -> ApiSyncPlan:
        """Compute the API changes a sync would make, without applying them."""
        desired_apis, actual_apis = self._fetch_both(
            self._portal.fetch_desired_apis,
            self._gateway.fetch_actual_apis,
            scope,
        )
        plan = ApiSyncPlan(todo=assemble_api_todo_lists(desired_apis, actual_apis))

        pairs = [(api, ApiDefinition(name=api.name)) for api in plan.todo.add_list]
        pairs += [(pair.desired, pair.actual) for pair in plan.todo.update_list]
        for desired, actual in pairs:
            plugins = assemble_plugin_todo_lists(desired, actual)
            if not plugins.is_empty:
                plan.plugins[desired.name] = plugins

        return plan

    def plan_consumers(self, scope: str | None = None) -> ConsumerSyncPlan:
        """Compute the consumer changes a sync would make, without applying them."""
        desired_consumers, actual_consumers = self._fetch_both(
            self._portal.fetch_desired_consumers,
            self._gateway.fetch_actual_consumers,
            scope,
        )
        plan = ConsumerSyncPlan(
            todo=assemble_consumer_todo_lists(desired_consumers, actual_consumers)
        )

        pairs = [
            (consumer, ConsumerDefinition(username=consumer.username))
            for consumer in plan.todo.add_list
        ]
        pairs += [(pair.desired, pair.actual) for pair in plan.todo.update_list]
        for desired, actual in pairs:
            bindings = assemble_consumer_plugin_todo_lists(desired, actual)
            if not bindings.is_empty:
                plan.api_plugins[desired.username] = bindings

        return plan
