from dataclasses import dataclass
from pathlib import Path

from loguru import logger


@dataclass
class ClientConfig:
    """
    Configuration for a `KubeClient`, stored in a `kubeconverge.yaml` file.
    """

    FILENAME = "kubeconverge.yaml"

    field_manager: str | None = None
    """
    The field manager name to send with create, replace and patch requests. If not set, the API server derives one
    from the user agent.
    """

    list_chunk_size: int = 500
    """
    The page size used when listing the contents of a namespace before deleting it.
    """

    delete_propagation_policy: str | None = None
    """
    The `propagationPolicy` (`Orphan`, `Background` or `Foreground`) to send with delete requests that don't specify
    their own delete options. If not set, the API server's default for the resource type applies.
    """

    @staticmethod
    def find_config_file(cwd: Path | None = None) -> Path | None:
        """
        Find the `kubeconverge.yaml` in the given *cwd* or any of its parent directories.
        """

        if cwd is None:
            cwd = Path.cwd()

        for directory in [cwd] + list(cwd.parents):
            file = directory / ClientConfig.FILENAME
            if file.exists():
                return file

        return None

    @staticmethod
    def load(file: Path | None = None, /) -> "ClientConfig":
        """
        Load the client configuration from the given or the default configuration file. If no configuration file
        exists, the default configuration is returned.
        """

        from databind.json import load as deser
        from yaml import safe_load

        if file is None:
            file = ClientConfig.find_config_file()
        if file is None:
            return ClientConfig()

        logger.debug("Loading client configuration from '{}'", file)
        config = deser(safe_load(file.read_text()) or {}, ClientConfig, filename=str(file))

        if config.list_chunk_size <= 0:
            raise ValueError(f"{file}: list_chunk_size must be positive, got {config.list_chunk_size}")

        return config
