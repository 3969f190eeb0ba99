"""
An in-memory `ClusterGateway` that behaves like a small Kubernetes API server. It is useful for testing code that
uses the `KubeClient` without access to a cluster.
"""

import copy
import itertools
from collections.abc import Iterable
from typing import Any

import jsonpatch
from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic.exceptions import (
    BadRequestError,
    ConflictError,
    DynamicApiError,
    NotFoundError,
    UnprocessibleEntityError,
)

from kubeconverge.discovery import ResourceTypeMapping
from kubeconverge.gateway import PatchStrategy
from kubeconverge.tools.types import Manifest, get_name


def _mapping(
    group: str,
    version: str,
    kind: str,
    resource: str,
    namespaced: bool = True,
    short_names: tuple[str, ...] = (),
    categories: tuple[str, ...] = (),
    preferred: bool = True,
) -> ResourceTypeMapping:
    return ResourceTypeMapping(
        group=group,
        version=version,
        kind=kind,
        resource=resource,
        namespaced=namespaced,
        singular_name=kind.lower(),
        short_names=short_names,
        categories=categories,
        verbs=("create", "delete", "get", "list", "patch", "update"),
        preferred=preferred,
    )


DEFAULT_MAPPINGS: tuple[ResourceTypeMapping, ...] = (
    _mapping("", "v1", "Pod", "pods", short_names=("po",), categories=("all",)),
    _mapping("", "v1", "Service", "services", short_names=("svc",), categories=("all",)),
    _mapping("", "v1", "ConfigMap", "configmaps", short_names=("cm",)),
    _mapping("", "v1", "Secret", "secrets"),
    _mapping("", "v1", "ServiceAccount", "serviceaccounts", short_names=("sa",)),
    _mapping("", "v1", "Event", "events", short_names=("ev",)),
    _mapping("", "v1", "Namespace", "namespaces", namespaced=False, short_names=("ns",)),
    _mapping("apps", "v1", "Deployment", "deployments", short_names=("deploy",), categories=("all",)),
    _mapping("apps", "v1", "ReplicaSet", "replicasets", short_names=("rs",), categories=("all",)),
    _mapping("apps", "v1", "StatefulSet", "statefulsets", short_names=("sts",), categories=("all",)),
    _mapping("apps", "v1", "DaemonSet", "daemonsets", short_names=("ds",), categories=("all",)),
    _mapping("batch", "v1", "Job", "jobs", categories=("all",)),
    _mapping("batch", "v1", "CronJob", "cronjobs", short_names=("cj",), categories=("all",)),
    _mapping("autoscaling", "v2", "HorizontalPodAutoscaler", "horizontalpodautoscalers", short_names=("hpa",),
             categories=("all",)),
    _mapping("autoscaling", "v1", "HorizontalPodAutoscaler", "horizontalpodautoscalers", short_names=("hpa",),
             categories=("all",), preferred=False),
    _mapping("events.k8s.io", "v1", "Event", "events", short_names=("ev",)),
    _mapping("rbac.authorization.k8s.io", "v1", "Role", "roles"),
    _mapping("rbac.authorization.k8s.io", "v1", "RoleBinding", "rolebindings"),
    _mapping("rbac.authorization.k8s.io", "v1", "ClusterRole", "clusterroles", namespaced=False),
    _mapping("rbac.authorization.k8s.io", "v1", "ClusterRoleBinding", "clusterrolebindings", namespaced=False),
    _mapping("apiextensions.k8s.io", "v1", "CustomResourceDefinition", "customresourcedefinitions",
             namespaced=False, short_names=("crd", "crds")),
)
""" A discovery document with a selection of the built-in Kubernetes resource types. """


def api_error(cls: type[DynamicApiError], status: int, reason: str) -> DynamicApiError:
    """
    Create a dynamic client API error the same way the dynamic client does when the API server responds with an
    error status.
    """

    return cls(ApiException(status=status, reason=reason))


def merge_patch(target: Any, patch: Any) -> Any:
    """
    Apply a JSON merge patch (RFC 7386) to *target* and return the result. The *target* is not modified.
    """

    if not isinstance(patch, dict):
        return copy.deepcopy(patch)
    result = copy.deepcopy(target) if isinstance(target, dict) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = merge_patch(result.get(key), value)
    return result


class InMemoryGateway:
    """
    A `ClusterGateway` that stores resources in memory.

    Strategic merge patches are applied like JSON merge patches, i.e. lists are replaced rather than merged by key.
    Every call is recorded in `calls` as a tuple of the verb, the resource name and the namespace.
    """

    def __init__(self, mappings: Iterable[ResourceTypeMapping] = DEFAULT_MAPPINGS) -> None:
        self.mappings = list(mappings)
        self.objects: dict[tuple[str, str, str, str], Manifest] = {}
        self.calls: list[tuple[str, str, str]] = []
        self.failures: dict[str, BaseException] = {}
        self.discover_count = 0
        self._versions = itertools.count(1)

    def fail_on(self, verb: str, error: BaseException) -> None:
        """
        Make every subsequent call of the given *verb* (e.g. `get` or `replace`) raise the *error*.
        """

        self.failures[verb] = error

    def _record(self, verb: str, mapping: ResourceTypeMapping, namespace: str) -> None:
        self.calls.append((verb, mapping.resource, namespace))
        if verb in self.failures:
            raise self.failures[verb]

    def _key(self, mapping: ResourceTypeMapping, name: str, namespace: str) -> tuple[str, str, str, str]:
        return (mapping.group, mapping.resource, namespace if mapping.namespaced else "", name)

    def _store(self, mapping: ResourceTypeMapping, body: Manifest, name: str, namespace: str) -> Manifest:
        stored = Manifest(copy.deepcopy(dict(body)))
        stored["apiVersion"] = mapping.api_version
        stored["kind"] = mapping.kind
        metadata = stored.setdefault("metadata", {})
        metadata["name"] = name
        if mapping.namespaced:
            metadata["namespace"] = namespace
        else:
            metadata.pop("namespace", None)
        metadata["resourceVersion"] = str(next(self._versions))
        self.objects[self._key(mapping, name, namespace)] = stored
        return Manifest(copy.deepcopy(dict(stored)))

    def _existing(self, mapping: ResourceTypeMapping, name: str, namespace: str) -> Manifest:
        try:
            return self.objects[self._key(mapping, name, namespace)]
        except KeyError:
            raise api_error(NotFoundError, 404, f'{mapping.resource} "{name}" not found') from None

    def add(self, mapping: ResourceTypeMapping, manifest: Manifest) -> Manifest:
        """
        Store a resource directly, bypassing the call log and the failure injection.
        """

        namespace = manifest.get("metadata", {}).get("namespace") or ""
        return self._store(mapping, manifest, get_name(manifest), namespace)

    # ClusterGateway

    def discover(self) -> list[ResourceTypeMapping]:
        self.discover_count += 1
        if "discover" in self.failures:
            raise self.failures["discover"]
        return list(self.mappings)

    def get(self, mapping: ResourceTypeMapping, name: str, namespace: str) -> Manifest:
        self._record("get", mapping, namespace)
        return Manifest(copy.deepcopy(dict(self._existing(mapping, name, namespace))))

    def create(self, mapping: ResourceTypeMapping, body: Manifest, namespace: str, **kwargs: Any) -> Manifest:
        self._record("create", mapping, namespace)
        name = get_name(body)
        if not name:
            raise api_error(UnprocessibleEntityError, 422, "metadata.name: Required value")
        if mapping.namespaced and not namespace:
            raise api_error(BadRequestError, 400, "the namespace of the object does not match the request")
        if self._key(mapping, name, namespace) in self.objects:
            raise api_error(ConflictError, 409, f'{mapping.resource} "{name}" already exists')
        return self._store(mapping, body, name, namespace)

    def replace(
        self, mapping: ResourceTypeMapping, body: Manifest, name: str, namespace: str, **kwargs: Any
    ) -> Manifest:
        self._record("replace", mapping, namespace)
        existing = self._existing(mapping, name, namespace)
        version = body.get("metadata", {}).get("resourceVersion")
        if version is not None and version != existing["metadata"]["resourceVersion"]:
            raise api_error(ConflictError, 409, "the object has been modified")
        return self._store(mapping, body, name, namespace)

    def patch(
        self,
        mapping: ResourceTypeMapping,
        name: str,
        namespace: str,
        body: Any,
        strategy: PatchStrategy,
        **kwargs: Any,
    ) -> Manifest:
        self._record("patch", mapping, namespace)
        existing = self._existing(mapping, name, namespace)
        if strategy == PatchStrategy.JSON_PATCH:
            if not isinstance(body, list):
                raise api_error(BadRequestError, 400, "json patch must be a list of operations")
            try:
                patched = jsonpatch.apply_patch(existing, body, in_place=False)
            except (jsonpatch.JsonPatchException, jsonpatch.JsonPointerException) as exc:
                raise api_error(UnprocessibleEntityError, 422, str(exc)) from exc
        else:
            if not isinstance(body, dict):
                raise api_error(BadRequestError, 400, "merge patch must be an object")
            patched = merge_patch(existing, body)
        return self._store(mapping, Manifest(patched), name, namespace)

    def delete(
        self, mapping: ResourceTypeMapping, name: str, namespace: str, body: dict[str, Any] | None = None
    ) -> Manifest | None:
        self._record("delete", mapping, namespace)
        self._existing(mapping, name, namespace)
        return Manifest(copy.deepcopy(dict(self.objects.pop(self._key(mapping, name, namespace)))))

    def list(self, mapping: ResourceTypeMapping, namespace: str = "", **options: Any) -> Manifest:
        self._record("list", mapping, namespace)
        items = [
            copy.deepcopy(dict(obj))
            for (group, resource, obj_namespace, _), obj in sorted(self.objects.items())
            if group == mapping.group and resource == mapping.resource and (not namespace or obj_namespace == namespace)
        ]
        if label_selector := options.get("label_selector"):
            wanted = dict(part.split("=", 1) for part in label_selector.split(","))
            items = [
                item
                for item in items
                if all(item["metadata"].get("labels", {}).get(k) == v for k, v in wanted.items())
            ]

        # Pages are addressed by the index of their first item.
        start = int(options.get("_continue") or 0)
        limit = options.get("limit")
        end = start + limit if limit else len(items)
        metadata: dict[str, Any] = {"resourceVersion": str(next(self._versions))}
        if end < len(items):
            metadata["continue"] = str(end)
        return Manifest(
            {
                "apiVersion": mapping.api_version,
                "kind": f"{mapping.kind}List",
                "metadata": metadata,
                "items": items[start:end],
            }
        )
