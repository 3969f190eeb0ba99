from typing import Optional

from typer import Argument, Context, Option

from . import app, get_client, print_yaml


@app.command()
def delete(
    ctx: Context,
    kind: str = Argument(..., help="The kind or resource name, e.g. `pod`, `pods` or `po`."),
    name: str = Argument(..., help="The name of the resource."),
    namespace: str = Option("", "--namespace", "-n", help="The namespace of the resource. Defaults to `default`."),
    cascade: Optional[str] = Option(
        None, help="The propagation policy for dependents: `Background`, `Foreground` or `Orphan`."
    ),
) -> None:
    """
    Delete a resource. Does not wait for the resource to be gone.
    """

    options = {"propagationPolicy": cascade} if cascade else None
    print_yaml(get_client(ctx).delete(kind, name, namespace, options).to_dict())


@app.command(name="delete-namespace")
def delete_namespace(
    ctx: Context,
    namespace: str = Argument(..., help="The namespace to delete."),
) -> None:
    """
    Delete a namespace, but only if it no longer contains any workloads or services.
    """

    get_client(ctx).delete_namespace(namespace)
