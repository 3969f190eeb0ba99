"""
kubeconverge applies, patches, deletes and lists Kubernetes resources of any kind, creating or replacing resources
so that they converge to the given manifests.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
import sys
from typing import Any, Optional

from loguru import logger
from typer import Context, Option, Typer
import yaml

from kubeconverge.client import KubeClient

app = Typer(help=__doc__, no_args_is_help=True, pretty_exceptions_enable=False)


@dataclass
class CommandContext:
    """
    Connection settings shared by all commands, collected by the root callback.
    """

    kubeconfig: Path | None = None
    context: str | None = None
    in_cluster: bool = False
    _client: KubeClient | None = None

    def client(self) -> KubeClient:
        """
        Connect to the cluster on first use.
        """

        if self._client is not None:
            return self._client

        from kubernetes.client.api_client import ApiClient
        from kubernetes.config.incluster_config import load_incluster_config
        from kubernetes.config.kube_config import load_kube_config

        from kubeconverge.config import ClientConfig
        from kubeconverge.connection import ClusterConnection

        if self.in_cluster:
            logger.info("Using in-cluster configuration.")
            load_incluster_config()
        else:
            logger.debug("Using kubeconfig '{}' (context: {})", self.kubeconfig or "<default>", self.context)
            load_kube_config(config_file=str(self.kubeconfig) if self.kubeconfig else None, context=self.context)

        self._client = KubeClient(ClusterConnection.from_api_client(ApiClient(), ClientConfig.load()))
        return self._client


def get_client(ctx: Context) -> KubeClient:
    return ctx.ensure_object(CommandContext).client()


def print_yaml(data: Any) -> None:
    print("---")
    print(yaml.safe_dump(data, sort_keys=False), end="")


class LogLevel(str, Enum):
    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@app.callback()
def _callback(
    ctx: Context,
    log_level: LogLevel = Option(LogLevel.INFO, "--log-level", "-l", help="The log level to use."),
    kubeconfig: Optional[Path] = Option(
        None, help="Path to the kubeconfig file. Defaults to `$KUBECONFIG` or `~/.kube/config`."
    ),
    context: Optional[str] = Option(None, help="The kubeconfig context to use. Defaults to the current context."),
    in_cluster: bool = Option(
        False, help="Use the in-cluster Kubernetes configuration. The --kubeconfig and --context options are ignored."
    ),
) -> None:
    logger.remove()
    logger.add(sys.stderr, level=log_level.name)
    if ctx.obj is None:
        ctx.obj = CommandContext(kubeconfig, context, in_cluster)


from . import apply  # noqa: F401,E402
from . import delete  # noqa: F401,E402
from . import get  # noqa: F401,E402
from . import patch  # noqa: F401,E402
