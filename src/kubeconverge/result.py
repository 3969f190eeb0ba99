from dataclasses import asdict, dataclass

from kubeconverge.discovery import ResourceTypeMapping
from kubeconverge.tools.types import Manifest, get_name, get_namespace


@dataclass
class OperationResult:
    """
    Describes the resource that a mutating operation was performed on. Fields that the producing operation does not
    populate are empty strings.
    """

    name: str = ""
    namespace: str = ""
    kind: str = ""
    group: str = ""
    version: str = ""
    resource: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def created_result(manifest: Manifest, mapping: ResourceTypeMapping) -> OperationResult:
    """
    The result of creating a resource from a manifest. Only the name, namespace and kind are populated.
    """

    return OperationResult(name=get_name(manifest), namespace=get_namespace(manifest), kind=mapping.kind)


def full_result(mapping: ResourceTypeMapping, name: str, namespace: str) -> OperationResult:
    return OperationResult(
        name=name,
        namespace=namespace,
        kind=mapping.kind,
        group=mapping.group,
        version=mapping.version,
        resource=mapping.resource,
    )
