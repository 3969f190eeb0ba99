from kubeconverge.tools.types import Manifest, get_name, get_namespace, set_namespace, split_api_version


def test__split_api_version() -> None:
    assert split_api_version("v1") == ("", "v1")
    assert split_api_version("apps/v1") == ("apps", "v1")
    assert split_api_version("rbac.authorization.k8s.io/v1") == ("rbac.authorization.k8s.io", "v1")


def test__set_namespace__creates_and_removes_field() -> None:
    manifest = Manifest({"kind": "ConfigMap"})
    set_namespace(manifest, "foo")
    assert manifest == {"kind": "ConfigMap", "metadata": {"namespace": "foo"}}
    assert get_namespace(manifest) == "foo"

    set_namespace(manifest, "")
    assert manifest == {"kind": "ConfigMap", "metadata": {}}
    assert get_namespace(manifest) == ""


def test__get_name__tolerates_missing_metadata() -> None:
    assert get_name(Manifest({})) == ""
    assert get_name(Manifest({"metadata": {"name": "cm1"}})) == "cm1"
