import pytest

from kubeconverge.discovery import ResourceTypeMapping
from kubeconverge.scoping import effective_namespace, is_namespace_kind

POD = ResourceTypeMapping(group="", version="v1", kind="Pod", resource="pods", namespaced=True)
CLUSTER_ROLE = ResourceTypeMapping(
    group="rbac.authorization.k8s.io", version="v1", kind="ClusterRole", resource="clusterroles", namespaced=False
)
NAMESPACE = ResourceTypeMapping(group="", version="v1", kind="Namespace", resource="namespaces", namespaced=False)


@pytest.mark.parametrize("manifest_namespace", ["", "foo", None])
@pytest.mark.parametrize("override_namespace", ["", "bar", None])
def test__effective_namespace__cluster_scoped_is_always_empty(
    manifest_namespace: str | None, override_namespace: str | None
) -> None:
    assert effective_namespace(CLUSTER_ROLE, manifest_namespace, override_namespace) == ""


def test__effective_namespace__defaults_to_default() -> None:
    assert effective_namespace(POD, "", "") == "default"
    assert effective_namespace(POD, None) == "default"


def test__effective_namespace__override_fills_missing_namespace() -> None:
    assert effective_namespace(POD, "", "bar") == "bar"


def test__effective_namespace__override_never_replaces_explicit_namespace() -> None:
    assert effective_namespace(POD, "foo", "bar") == "foo"
    assert effective_namespace(POD, "foo", "") == "foo"


def test__is_namespace_kind() -> None:
    assert is_namespace_kind(NAMESPACE)
    assert not is_namespace_kind(POD)
    assert not is_namespace_kind(CLUSTER_ROLE)
