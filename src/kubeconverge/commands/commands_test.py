from collections.abc import Iterator
from pathlib import Path
import sys

import pytest
import yaml
from loguru import logger
from typer.testing import CliRunner

from kubeconverge.client import KubeClient
from kubeconverge.commands import CommandContext, app
from kubeconverge.connection import ClusterConnection
from kubeconverge.errors import PatchError
from kubeconverge.testing import InMemoryGateway
from kubeconverge.tools.types import Manifest

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_logger() -> Iterator[None]:
    yield
    # The CLI callback redirects the logger to the runner's (now closed) stderr.
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def gateway() -> InMemoryGateway:
    return InMemoryGateway()


@pytest.fixture
def obj(gateway: InMemoryGateway) -> CommandContext:
    return CommandContext(_client=KubeClient(ClusterConnection(gateway)))


def test__apply__applies_all_documents(tmp_path: Path, obj: CommandContext, gateway: InMemoryGateway) -> None:
    file = tmp_path / "manifests.yaml"
    file.write_text(
        yaml.safe_dump_all(
            [
                {"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "cm1"}},
                {"apiVersion": "rbac.authorization.k8s.io/v1", "kind": "ClusterRole", "metadata": {"name": "cr1"}},
            ]
        )
    )

    result = runner.invoke(app, ["-l", "error", "apply", str(file), "--namespace", "team-a"], obj=obj)

    assert result.exit_code == 0, result.output
    assert list(yaml.safe_load_all(result.stdout)) == [
        {"name": "cm1", "namespace": "team-a", "kind": "ConfigMap", "group": "", "version": "", "resource": ""},
        {"name": "cr1", "namespace": "", "kind": "ClusterRole", "group": "", "version": "", "resource": ""},
    ]
    assert len(gateway.objects) == 2


def test__resolve(obj: CommandContext) -> None:
    result = runner.invoke(app, ["-l", "error", "resolve", "deploy"], obj=obj)

    assert result.exit_code == 0, result.output
    assert yaml.safe_load(result.stdout) == {
        "group": "apps",
        "version": "v1",
        "kind": "Deployment",
        "resource": "deployments",
        "namespaced": True,
    }


def test__patch__missing_resource_fails(obj: CommandContext) -> None:
    patch = '{"metadata": {"labels": {"a": "b"}}}'
    result = runner.invoke(app, ["-l", "error", "patch", "pod", "p1", patch, "-n", "ns1"], obj=obj)

    assert result.exit_code == 1
    assert isinstance(result.exception, PatchError)


def test__get_list_and_delete(obj: CommandContext, gateway: InMemoryGateway) -> None:
    obj.client().apply(Manifest({"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "cm1"}}))

    result = runner.invoke(app, ["-l", "error", "get", "cm", "cm1"], obj=obj)
    assert result.exit_code == 0, result.output
    assert yaml.safe_load(result.stdout)["metadata"]["namespace"] == "default"

    result = runner.invoke(app, ["-l", "error", "list", "configmaps", "--limit", "10"], obj=obj)
    assert result.exit_code == 0, result.output
    assert [item["metadata"]["name"] for item in yaml.safe_load(result.stdout)["items"]] == ["cm1"]

    result = runner.invoke(app, ["-l", "error", "delete", "configmap", "cm1", "--cascade", "Foreground"], obj=obj)
    assert result.exit_code == 0, result.output
    assert yaml.safe_load(result.stdout)["resource"] == "configmaps"
    assert gateway.objects == {}
