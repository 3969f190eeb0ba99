"""
kubeconverge converges Kubernetes resource manifests against the live state of a cluster. It resolves kind and
resource names of arbitrary resource types through the discovery API and offers idempotent apply, patch, delete and
list operations for reconciliation loops to call repeatedly.
"""

from kubeconverge.client import KubeClient
from kubeconverge.config import ClientConfig
from kubeconverge.connection import ClusterConnection
from kubeconverge.discovery import DiscoveryCache, ResourceTypeMapping
from kubeconverge.errors import (
    CreateError,
    DeleteError,
    KubeClientError,
    ListError,
    PatchError,
    ReplaceError,
    ResolutionError,
    ResourceLookupError,
)
from kubeconverge.gateway import ClusterGateway, DynamicClientGateway, PatchStrategy
from kubeconverge.result import OperationResult
from kubeconverge.scoping import DEFAULT_NAMESPACE, effective_namespace

__all__ = [
    "ClientConfig",
    "ClusterConnection",
    "ClusterGateway",
    "CreateError",
    "DEFAULT_NAMESPACE",
    "DeleteError",
    "DiscoveryCache",
    "DynamicClientGateway",
    "KubeClient",
    "KubeClientError",
    "ListError",
    "OperationResult",
    "PatchError",
    "PatchStrategy",
    "ReplaceError",
    "ResolutionError",
    "ResourceLookupError",
    "ResourceTypeMapping",
    "effective_namespace",
]
