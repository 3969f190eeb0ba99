from typing import Optional

from typer import Argument, Context, Option

from . import app, get_client, print_yaml


@app.command()
def get(
    ctx: Context,
    kind: str = Argument(..., help="The kind or resource name, e.g. `pod`, `pods` or `po`."),
    name: str = Argument(..., help="The name of the resource."),
    namespace: str = Option("", "--namespace", "-n", help="The namespace of the resource. Defaults to `default`."),
) -> None:
    """
    Print a single resource.
    """

    print_yaml(get_client(ctx).get(kind, name, namespace))


@app.command(name="list")
def list_(
    ctx: Context,
    kind: str = Argument(..., help="The kind or resource name, e.g. `replicaset` or `replicasets`."),
    selector: Optional[str] = Option(None, "--selector", help="A label selector to filter by."),
    field_selector: Optional[str] = Option(None, "--field-selector", help="A field selector to filter by."),
    limit: Optional[int] = Option(None, help="The maximum number of resources to return."),
    continue_: Optional[str] = Option(None, "--continue", help="The continue token of the previous page."),
) -> None:
    """
    List resources of a kind across all namespaces.
    """

    options = {
        "label_selector": selector,
        "field_selector": field_selector,
        "limit": limit,
        "_continue": continue_,
    }
    result = get_client(ctx).list_resource(kind, **{k: v for k, v in options.items() if v is not None})
    print_yaml(result)


@app.command()
def resolve(
    ctx: Context,
    name: str = Argument(..., help="The kind or resource name, optionally qualified with a group."),
) -> None:
    """
    Print the resource type that a kind or resource name resolves to.
    """

    mapping = get_client(ctx).resolve_kind(name)
    print_yaml(
        {
            "group": mapping.group,
            "version": mapping.version,
            "kind": mapping.kind,
            "resource": mapping.resource,
            "namespaced": mapping.namespaced,
        }
    )
