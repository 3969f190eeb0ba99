from kubernetes.dynamic.exceptions import NotFoundError

from kubeconverge.errors import DeleteError, ListError, PatchError
from kubeconverge.testing import api_error


def test__KubeClientError__str() -> None:
    error = PatchError("Pod", "p1", "ns1", cause=api_error(NotFoundError, 404, "Not Found"))
    assert str(error) == "Patch of Pod/p1 in namespace 'ns1' failed: 404 Not Found"
    assert error.not_found
    assert error.status == 404


def test__KubeClientError__str__without_name_and_namespace() -> None:
    error = ListError("Pod", cause=RuntimeError("connection reset"))
    assert str(error) == "List of Pod failed: connection reset"
    assert not error.not_found
    assert error.status is None


def test__KubeClientError__str__message_takes_precedence() -> None:
    assert str(DeleteError("Namespace", "ns1", message="gone")) == "Delete of Namespace/ns1 failed: gone"
