from typing import Any, NewType


Manifest = NewType("Manifest", dict[str, Any])
""" Represents a Kubernetes manifest. """

Manifests = NewType("Manifests", list[Manifest])
""" Represents a list of Kubernetes manifests. """


def get_api_version(manifest: Manifest) -> str:
    return str(manifest.get("apiVersion") or "")


def get_kind(manifest: Manifest) -> str:
    return str(manifest.get("kind") or "")


def get_name(manifest: Manifest) -> str:
    return str((manifest.get("metadata") or {}).get("name") or "")


def get_namespace(manifest: Manifest) -> str:
    return str((manifest.get("metadata") or {}).get("namespace") or "")


def set_namespace(manifest: Manifest, namespace: str) -> None:
    """
    Set the `metadata.namespace` field of the manifest in place. An empty *namespace* removes the field, as
    cluster-scoped resources must not carry one.
    """

    metadata = manifest.get("metadata")
    if metadata is None:
        metadata = manifest["metadata"] = {}
    if namespace:
        metadata["namespace"] = namespace
    else:
        metadata.pop("namespace", None)


def split_api_version(api_version: str) -> tuple[str, str]:
    """
    Split an `apiVersion` into its group and version. The core group is represented by an empty string.

    >>> split_api_version("apps/v1")
    ('apps', 'v1')
    >>> split_api_version("v1")
    ('', 'v1')
    """

    group, _, version = api_version.rpartition("/")
    return group, version
