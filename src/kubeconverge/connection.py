from dataclasses import dataclass, field

from kubernetes.client.api_client import ApiClient

from kubeconverge.config import ClientConfig
from kubeconverge.discovery import DiscoveryCache
from kubeconverge.gateway import ClusterGateway, DynamicClientGateway


@dataclass(frozen=True)
class ClusterConnection:
    """
    A handle to a single cluster. Holds the gateway to the cluster's API, the client configuration and the cache of
    the cluster's discovery document. Connections do not share any state with each other.
    """

    gateway: ClusterGateway
    config: ClientConfig = field(default_factory=ClientConfig)
    discovery: DiscoveryCache = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "discovery", DiscoveryCache(self.gateway.discover))

    @staticmethod
    def from_api_client(api_client: ApiClient, config: ClientConfig | None = None) -> "ClusterConnection":
        """
        Create a connection for an already configured Kubernetes API client.
        """

        return ClusterConnection(DynamicClientGateway.from_api_client(api_client), config or ClientConfig())
