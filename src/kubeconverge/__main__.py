import sys

from loguru import logger

from kubeconverge.commands import app
from kubeconverge.errors import KubeClientError


def main() -> None:
    try:
        app()
    except KubeClientError as exc:
        logger.error("{}", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
