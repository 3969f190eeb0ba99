from kubeconverge.discovery import ResourceTypeMapping

DEFAULT_NAMESPACE = "default"
""" The namespace that namespaced resources are placed in when no namespace is given. """


def effective_namespace(
    mapping: ResourceTypeMapping,
    manifest_namespace: str | None,
    override_namespace: str | None = None,
) -> str:
    """
    Compute the namespace a manifest is applied to.

    Cluster-scoped types never have a namespace. For namespaced types, the namespace declared on the manifest always
    wins; the *override_namespace* only fills in a missing namespace, falling back to `default` if it is empty, too.
    An explicitly namespaced resource is thus never relocated by an override.

    Args:
        mapping: The resolved resource type of the manifest.
        manifest_namespace: The `metadata.namespace` of the manifest.
        override_namespace: The namespace to use if the manifest does not declare one.
    """

    if not mapping.namespaced:
        return ""
    if manifest_namespace:
        return manifest_namespace
    return override_namespace or DEFAULT_NAMESPACE


def is_namespace_kind(mapping: ResourceTypeMapping) -> bool:
    """
    Check if the resource type is the core `Namespace` type.
    """

    return mapping.group == "" and mapping.kind.lower() == "namespace"
