"""
The gateway is the transport through which the `KubeClient` talks to the cluster. The production implementation,
`DynamicClientGateway`, is backed by the dynamic client of the official `kubernetes` package. Gateways report failures
by raising `kubernetes.dynamic.exceptions.DynamicApiError` subclasses, with `NotFoundError` signalling that the
addressed resource does not exist.
"""

from enum import Enum
from typing import Any, Protocol

from kubernetes.client.api_client import ApiClient
from kubernetes.dynamic import DynamicClient
from kubernetes.dynamic.resource import Resource, ResourceList
from loguru import logger

from kubeconverge.discovery import ResourceTypeMapping
from kubeconverge.tools.types import Manifest


class PatchStrategy(str, Enum):
    """
    Selects how a partial update is merged into a resource. The value is the content type sent to the API server.
    """

    STRATEGIC_MERGE = "application/strategic-merge-patch+json"
    JSON_MERGE = "application/merge-patch+json"
    JSON_PATCH = "application/json-patch+json"


class ClusterGateway(Protocol):
    """
    Generic CRUD transport against resource types of a cluster. An empty *namespace* addresses the cluster-scoped
    endpoint of a type.
    """

    def discover(self) -> list[ResourceTypeMapping]: ...

    def get(self, mapping: ResourceTypeMapping, name: str, namespace: str) -> Manifest: ...

    def create(self, mapping: ResourceTypeMapping, body: Manifest, namespace: str, **kwargs: Any) -> Manifest: ...

    def replace(
        self, mapping: ResourceTypeMapping, body: Manifest, name: str, namespace: str, **kwargs: Any
    ) -> Manifest: ...

    def patch(
        self,
        mapping: ResourceTypeMapping,
        name: str,
        namespace: str,
        body: Any,
        strategy: PatchStrategy,
        **kwargs: Any,
    ) -> Manifest: ...

    def delete(
        self, mapping: ResourceTypeMapping, name: str, namespace: str, body: dict[str, Any] | None = None
    ) -> Manifest | None: ...

    def list(self, mapping: ResourceTypeMapping, namespace: str = "", **options: Any) -> Manifest:
        """
        List resources of a type, returning the list document (with `items` and `metadata.continue`). The *options*
        (`label_selector`, `field_selector`, `limit`, `_continue`, ...) are passed to the API server as-is.
        """
        ...


class DynamicClientGateway:
    """
    A `ClusterGateway` backed by `kubernetes.dynamic.DynamicClient`.
    """

    def __init__(self, client: DynamicClient) -> None:
        self._client = client

    @staticmethod
    def from_api_client(api_client: ApiClient) -> "DynamicClientGateway":
        """
        Create a gateway for an already configured API client. Note that creating the dynamic client contacts the
        API server to retrieve its version.
        """

        return DynamicClientGateway(DynamicClient(api_client))

    def _handle(self, mapping: ResourceTypeMapping) -> Resource:
        return Resource(
            prefix="apis" if mapping.group else "api",
            group=mapping.group,
            api_version=mapping.version,
            kind=mapping.kind,
            namespaced=mapping.namespaced,
            verbs=list(mapping.verbs),
            name=mapping.resource,
            client=self._client,
        )

    def discover(self) -> list[ResourceTypeMapping]:
        self._client.resources.invalidate_cache()
        result = []
        for resource in self._client.resources.search():
            if isinstance(resource, ResourceList) or not resource.name or "/" in resource.name:
                continue
            result.append(
                ResourceTypeMapping(
                    group=resource.group or "",
                    version=resource.api_version,
                    kind=resource.kind,
                    resource=resource.name,
                    namespaced=bool(resource.namespaced),
                    singular_name=resource.singular_name or "",
                    short_names=tuple(resource.short_names or ()),
                    categories=tuple(resource.categories or ()),
                    verbs=tuple(resource.verbs or ()),
                    preferred=bool(resource.preferred),
                )
            )
        return result

    def get(self, mapping: ResourceTypeMapping, name: str, namespace: str) -> Manifest:
        logger.trace("GET {} {} (namespace: '{}')", mapping.resource, name, namespace)
        return Manifest(self._client.get(self._handle(mapping), name=name, namespace=namespace or None).to_dict())

    def create(self, mapping: ResourceTypeMapping, body: Manifest, namespace: str, **kwargs: Any) -> Manifest:
        logger.trace("POST {} (namespace: '{}'): {}", mapping.resource, namespace, body)
        instance = self._client.create(self._handle(mapping), body=body, namespace=namespace or None, **kwargs)
        return Manifest(instance.to_dict())

    def replace(
        self, mapping: ResourceTypeMapping, body: Manifest, name: str, namespace: str, **kwargs: Any
    ) -> Manifest:
        logger.trace("PUT {} {} (namespace: '{}'): {}", mapping.resource, name, namespace, body)
        instance = self._client.replace(
            self._handle(mapping), body=body, name=name, namespace=namespace or None, **kwargs
        )
        return Manifest(instance.to_dict())

    def patch(
        self,
        mapping: ResourceTypeMapping,
        name: str,
        namespace: str,
        body: Any,
        strategy: PatchStrategy,
        **kwargs: Any,
    ) -> Manifest:
        logger.trace("PATCH {} {} (namespace: '{}', {}): {}", mapping.resource, name, namespace, strategy.value, body)
        instance = self._client.patch(
            self._handle(mapping),
            body=body,
            name=name,
            namespace=namespace or None,
            content_type=strategy.value,
            **kwargs,
        )
        return Manifest(instance.to_dict())

    def delete(
        self, mapping: ResourceTypeMapping, name: str, namespace: str, body: dict[str, Any] | None = None
    ) -> Manifest | None:
        logger.trace("DELETE {} {} (namespace: '{}')", mapping.resource, name, namespace)
        instance = self._client.delete(self._handle(mapping), name=name, namespace=namespace or None, body=body)
        if instance is None:
            return None
        return Manifest(instance.to_dict())

    def list(self, mapping: ResourceTypeMapping, namespace: str = "", **options: Any) -> Manifest:
        logger.trace("LIST {} (namespace: '{}', options: {})", mapping.resource, namespace, options)
        return Manifest(self._client.get(self._handle(mapping), namespace=namespace or None, **options).to_dict())
