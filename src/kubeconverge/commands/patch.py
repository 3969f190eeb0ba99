from enum import Enum

from typer import Argument, Context, Option

from kubeconverge.gateway import PatchStrategy

from . import app, get_client, print_yaml


class PatchType(str, Enum):
    STRATEGIC = "strategic"
    MERGE = "merge"
    JSON = "json"


STRATEGIES = {
    PatchType.STRATEGIC: PatchStrategy.STRATEGIC_MERGE,
    PatchType.MERGE: PatchStrategy.JSON_MERGE,
    PatchType.JSON: PatchStrategy.JSON_PATCH,
}


@app.command()
def patch(
    ctx: Context,
    kind: str = Argument(..., help="The kind or resource name, e.g. `pod`, `pods` or `po`."),
    name: str = Argument(..., help="The name of the resource."),
    patch: str = Argument(..., help="The patch as a JSON document."),
    namespace: str = Option(
        "", "--namespace", "-n", help="The namespace of the resource. Ignored for cluster-scoped resources."
    ),
    patch_type: PatchType = Option(PatchType.STRATEGIC, "--type", help="How the patch is merged into the resource."),
) -> None:
    """
    Update fields of an existing resource.
    """

    _, resource = get_client(ctx).patch(kind, name, namespace, patch, STRATEGIES[patch_type])
    print_yaml(resource)
