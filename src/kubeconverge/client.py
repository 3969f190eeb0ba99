import json
from collections.abc import Iterable
from typing import Any

from kubernetes.dynamic.exceptions import NotFoundError
from loguru import logger

from kubeconverge.connection import ClusterConnection
from kubeconverge.discovery import ResourceTypeMapping
from kubeconverge.errors import (
    CreateError,
    DeleteError,
    ListError,
    PatchError,
    ReplaceError,
    ResolutionError,
    ResourceLookupError,
)
from kubeconverge.gateway import PatchStrategy
from kubeconverge.result import OperationResult, created_result, full_result
from kubeconverge.scoping import effective_namespace, is_namespace_kind
from kubeconverge.tools.types import (
    Manifest,
    Manifests,
    get_api_version,
    get_kind,
    get_name,
    get_namespace,
    set_namespace,
)

PatchBody = bytes | str | dict[str, Any] | list[Any]
""" A patch document, either as JSON text or already decoded. """


class KubeClient:
    """
    Converges resource manifests against the live state of a cluster.

    All operations are synchronous and are never retried; a failure surfaces as a subclass of `KubeClientError`
    immediately. Re-invoking an operation is the responsibility of the caller's reconciliation loop.
    """

    def __init__(self, connection: ClusterConnection) -> None:
        self._connection = connection

    @property
    def connection(self) -> ClusterConnection:
        return self._connection

    def _write_options(self) -> dict[str, Any]:
        if self._connection.config.field_manager:
            return {"field_manager": self._connection.config.field_manager}
        return {}

    def resolve_kind(self, name: str, group: str | None = None) -> ResourceTypeMapping:
        """
        Resolve a kind or resource name (e.g. `Pod`, `pods` or `po`) to its resource type.
        """

        return self._connection.discovery.resolve_kind(name, group)

    # Apply

    def apply(self, manifest: Manifest, namespace_override: str = "") -> OperationResult:
        """
        Create the resource described by the *manifest*, or replace it entirely if it already exists. This is not a
        three-way merge: fields that other actors set on the existing resource are overwritten.

        The effective namespace is written into the *manifest*, and after a replace the *manifest* is updated with the
        document returned by the API server. The *namespace_override* is only used if the manifest does not declare a
        namespace; namespaced resources without either end up in `default`. A manifest without an `apiVersion` is
        resolved by its kind alone, and the resolved `apiVersion` is written into it.

        Raises:
            ResolutionError: If the manifest's type is unknown or the manifest has no name.
            ResourceLookupError: If checking for the existing resource failed for any reason but it not existing.
            CreateError: If the resource did not exist and creating it failed.
            ReplaceError: If the resource existed and replacing it failed.
        """

        kind, api_version, name = get_kind(manifest), get_api_version(manifest), get_name(manifest)
        if not kind:
            raise ResolutionError("<unknown>", name, message="manifest has no kind")
        if not name:
            raise ResolutionError(kind, message="manifest has no metadata.name")

        if api_version:
            mapping = self._connection.discovery.resolve_gvk(api_version, kind)
        else:
            mapping = self._connection.discovery.resolve_kind(kind)
            manifest["apiVersion"] = mapping.api_version

        namespace = effective_namespace(mapping, get_namespace(manifest), namespace_override)
        set_namespace(manifest, namespace)

        try:
            existing = self._connection.gateway.get(mapping, name, namespace)
        except NotFoundError:
            logger.debug("{} '{}' does not exist in namespace '{}'", mapping.kind, name, namespace)
            return self._create(mapping, manifest, namespace)
        except Exception as exc:
            raise ResourceLookupError(mapping.kind, name, namespace, cause=exc) from exc

        return self._replace(mapping, manifest, existing, namespace)

    def apply_all(self, manifests: Iterable[Manifest], namespace_override: str = "") -> list[OperationResult]:
        """
        Apply the manifests one after another. The first failure is raised and the remaining manifests are not
        applied.
        """

        return [self.apply(manifest, namespace_override) for manifest in manifests]

    def _create(self, mapping: ResourceTypeMapping, manifest: Manifest, namespace: str) -> OperationResult:
        name = get_name(manifest)
        try:
            self._connection.gateway.create(mapping, manifest, namespace, **self._write_options())
        except Exception as exc:
            raise CreateError(mapping.kind, name, namespace, cause=exc) from exc

        logger.info("Created {} '{}'{}", mapping.group_kind, name, f" in namespace '{namespace}'" if namespace else "")
        return created_result(manifest, mapping)

    def _replace(
        self, mapping: ResourceTypeMapping, manifest: Manifest, existing: Manifest, namespace: str
    ) -> OperationResult:
        name = get_name(manifest)

        # Always overwrite with the version of the object that we just looked up.
        body = manifest
        resource_version = (existing.get("metadata") or {}).get("resourceVersion")
        if resource_version:
            body = Manifest({**manifest, "metadata": {**manifest["metadata"], "resourceVersion": resource_version}})

        try:
            replaced = self._connection.gateway.replace(mapping, body, name, namespace, **self._write_options())
        except Exception as exc:
            raise ReplaceError(mapping.kind, name, namespace, cause=exc) from exc

        logger.info("Replaced {} '{}'{}", mapping.group_kind, name, f" in namespace '{namespace}'" if namespace else "")

        try:
            refreshed = dict(replaced)
            refreshed_name = refreshed["metadata"]["name"]
            refreshed_namespace = refreshed["metadata"].get("namespace") or ""
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            logger.warning("Could not refresh {} '{}' from the server response: {}", mapping.kind, name, exc)
        else:
            manifest.clear()
            manifest.update(refreshed)
            name, namespace = refreshed_name, refreshed_namespace

        return full_result(mapping, name, namespace)

    # Get & Patch

    def get(self, kind: str, name: str, namespace: str = "") -> Manifest:
        """
        Fetch a resource by kind or resource name (e.g. `pod` or `pods`), name and namespace. Namespaced resources
        are looked up in `default` if no *namespace* is given.

        Raises:
            ResolutionError: If the kind can not be resolved.
            ResourceLookupError: If the resource does not exist (`KubeClientError.not_found`) or fetching it failed.
        """

        mapping = self.resolve_kind(kind)
        namespace = effective_namespace(mapping, namespace)
        try:
            return self._connection.gateway.get(mapping, name, namespace)
        except Exception as exc:
            raise ResourceLookupError(mapping.kind, name, namespace, cause=exc) from exc

    def patch(
        self,
        kind: str,
        name: str,
        namespace: str,
        patch: PatchBody,
        strategy: PatchStrategy = PatchStrategy.STRATEGIC_MERGE,
    ) -> tuple[OperationResult, Manifest]:
        """
        Apply a partial update to an existing resource. The *namespace* is ignored for cluster-scoped resource types.
        The patch is not validated locally, the API server rejects malformed patches. A missing resource is never
        created.

        Returns:
            The operation result and the updated resource as returned by the API server.
        Raises:
            ResolutionError: If the kind can not be resolved.
            PatchError: If the patch failed, including when the resource does not exist.
        """

        mapping = self.resolve_kind(kind)
        namespace = effective_namespace(mapping, namespace)
        try:
            body = json.loads(patch) if isinstance(patch, (bytes, str)) else patch
            updated = self._connection.gateway.patch(
                mapping, name, namespace, body, PatchStrategy(strategy), **self._write_options()
            )
        except Exception as exc:
            raise PatchError(mapping.kind, name, namespace, cause=exc) from exc

        logger.info("Patched {} '{}' ({})", mapping.group_kind, name, PatchStrategy(strategy).name.lower())
        return full_result(mapping, get_name(updated) or name, get_namespace(updated)), updated

    # Delete

    def delete(
        self,
        kind: str,
        name: str,
        namespace: str = "",
        options: dict[str, Any] | None = None,
    ) -> OperationResult:
        """
        Delete a resource by kind or resource name, name and namespace. Returns as soon as the API server accepted
        the deletion, without waiting for finalizers.

        For namespaces themselves the *namespace* argument is ignored. Other namespaced resources are deleted from
        `default` if no *namespace* is given.

        Args:
            options: Delete options such as `{"propagationPolicy": "Foreground"}` to send as the request body.
        Raises:
            ResolutionError: If the kind can not be resolved.
            DeleteError: If the deletion failed, including when the resource does not exist.
        """

        mapping = self.resolve_kind(kind)
        if is_namespace_kind(mapping):
            namespace = ""
        else:
            namespace = effective_namespace(mapping, namespace)

        if options is None and self._connection.config.delete_propagation_policy:
            options = {"propagationPolicy": self._connection.config.delete_propagation_policy}

        try:
            self._connection.gateway.delete(mapping, name, namespace, options)
        except Exception as exc:
            raise DeleteError(mapping.kind, name, namespace, cause=exc) from exc

        logger.info("Deleted {} '{}'{}", mapping.group_kind, name, f" in namespace '{namespace}'" if namespace else "")
        return full_result(mapping, name, namespace)

    def delete_namespace(self, namespace: str) -> None:
        """
        Delete the *namespace*, but only if it no longer contains any resources that `kubectl get all` would show.
        If it still does, nothing is deleted and no error is raised.

        Raises:
            ListError: If listing the namespace's contents failed. Nothing is deleted in that case.
            DeleteError: If the *namespace* is empty or deleting the namespace failed.
        """

        if not namespace:
            raise DeleteError("Namespace", message="no namespace name given")

        remaining = self._namespace_contents(namespace)
        if remaining:
            logger.info(
                "Namespace '{}' still contains {} resource(s), not deleting it",
                namespace,
                len(remaining),
            )
            return

        mapping = self._connection.discovery.resolve_gvk("v1", "Namespace")
        try:
            self._connection.gateway.delete(mapping, namespace, "")
        except Exception as exc:
            raise DeleteError(mapping.kind, namespace, cause=exc) from exc
        logger.info("Deleted namespace '{}'", namespace)

    def _namespace_contents(self, namespace: str) -> Manifests:
        chunk_size = self._connection.config.list_chunk_size
        result = Manifests([])
        for mapping in self._connection.discovery.with_category("all"):
            token: str | None = None
            while True:
                options: dict[str, Any] = {"limit": chunk_size}
                if token:
                    options["_continue"] = token
                try:
                    page = self._connection.gateway.list(mapping, namespace, **options)
                except Exception as exc:
                    raise ListError(mapping.kind, namespace=namespace, cause=exc) from exc
                result.extend(page.get("items") or [])
                token = (page.get("metadata") or {}).get("continue")
                if not token:
                    break
        logger.debug("Namespace '{}' contains {} resource(s)", namespace, len(result))
        return result

    # List

    def list_resource(self, kind_or_resource: str, **list_options: Any) -> Manifest:
        """
        List all resources of a kind or resource name (e.g. `replicaset` or `replicasets`) across all namespaces.

        Args:
            list_options: Passed to the API server as-is, e.g. `label_selector`, `field_selector`, `limit` and
                `_continue`.
        Returns:
            The list document, with the resources in `items` and the token for the next page in `metadata.continue`.
        Raises:
            ResolutionError: If the kind can not be resolved.
            ListError: If the listing failed.
        """

        mapping = self.resolve_kind(kind_or_resource)
        try:
            return self._connection.gateway.list(mapping, "", **list_options)
        except Exception as exc:
            raise ListError(mapping.kind, cause=exc) from exc
