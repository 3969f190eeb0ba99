from pathlib import Path

from loguru import logger
from typer import Argument, Context, Option
import yaml

from kubeconverge.tools.types import Manifest, Manifests

from . import app, get_client, print_yaml


@app.command()
def apply(
    ctx: Context,
    paths: list[Path] = Argument(..., help="The YAML file(s) to apply. Can be a directory."),
    namespace: str = Option(
        "",
        "--namespace",
        "-n",
        help="The namespace to apply namespaced resources to that don't declare one. Resources with an explicit "
        "namespace are never moved.",
    ),
) -> None:
    """
    Create the resources in the given manifests, or replace them if they already exist.
    """

    client = get_client(ctx)
    for manifest in load_manifests(paths):
        print_yaml(client.apply(manifest, namespace).to_dict())


def load_manifests(paths: list[Path]) -> Manifests:
    """
    Load all manifests from the given files and directories. Directories are searched for `.yaml` files
    (non-recursively).
    """

    files = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(item for item in path.iterdir() if item.suffix == ".yaml" and item.is_file()))
        else:
            files.append(path)

    logger.trace("Files to load: {}", files)

    result = Manifests([])
    for file in files:
        result.extend(Manifest(doc) for doc in yaml.safe_load_all(file.read_text()) if doc)
    logger.debug("Loaded {} manifest(s) from {} file(s)", len(result), len(files))
    return result
