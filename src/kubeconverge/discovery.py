"""
Resolution of kind and resource names to fully qualified resource types, backed by a connection-scoped cache of the
cluster's discovery document.
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from loguru import logger

from kubeconverge.errors import ResolutionError
from kubeconverge.tools.types import split_api_version


@dataclass(frozen=True)
class ResourceTypeMapping:
    """
    The identity of a resource type as reported by the discovery API.
    """

    group: str
    """ The API group. The core group is represented by an empty string. """

    version: str
    kind: str

    resource: str
    """ The plural collection name of the resource type (e.g. `pods`). """

    namespaced: bool

    singular_name: str = ""
    short_names: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    verbs: tuple[str, ...] = ()

    preferred: bool = True
    """ Whether *version* is the preferred version of the API group. """

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def group_kind(self) -> str:
        """
        The canonical `Kind.group` name of the type (just `Kind` for the core group).
        """

        return f"{self.kind}.{self.group}" if self.group else self.kind

    def names(self) -> set[str]:
        """
        All lower-cased names that the type can be referred to by.
        """

        names = {self.kind.lower(), self.resource.lower(), *(name.lower() for name in self.short_names)}
        if self.singular_name:
            names.add(self.singular_name.lower())
        return names


class DiscoveryCache:
    """
    Caches the discovery document of a single cluster connection and resolves names against it.

    The document is fetched lazily on the first lookup and served from memory afterwards until it is explicitly
    refreshed or invalidated. Concurrent lookups that miss the cache may fetch the document more than once; the
    cached value is an immutable tuple that is replaced as a whole, so a redundant fetch never corrupts it.
    """

    def __init__(self, fetch: Callable[[], Iterable[ResourceTypeMapping]]) -> None:
        """
        Args:
            fetch: A function that queries the discovery API and returns all known resource types.
        """

        self._fetch = fetch
        self._mappings: tuple[ResourceTypeMapping, ...] | None = None

    def mappings(self) -> tuple[ResourceTypeMapping, ...]:
        mappings = self._mappings
        if mappings is None:
            mappings = self.refresh()
        return mappings

    def refresh(self) -> tuple[ResourceTypeMapping, ...]:
        """
        Fetch the discovery document now and replace the cached copy.
        """

        logger.debug("Fetching discovery document")
        try:
            mappings = tuple(self._fetch())
        except Exception as exc:
            raise ResolutionError("<discovery>", cause=exc) from exc
        logger.debug("Discovered {} resource type(s)", len(mappings))
        self._mappings = mappings
        return mappings

    def invalidate(self) -> None:
        """
        Drop the cached discovery document. The next lookup will fetch it again.
        """

        logger.debug("Invalidating discovery cache")
        self._mappings = None

    def resolve_kind(self, name: str, group: str | None = None) -> ResourceTypeMapping:
        """
        Resolve a kind or resource name to a resource type. The match is case-insensitive and considers the kind, the
        plural and singular resource names and the short names of every type. The *name* may be qualified with a
        group the way `kubectl` accepts it (e.g. `deployments.apps` or `Deployment.apps`).

        Args:
            name: The kind or resource name, e.g. `Pod`, `pods` or `po`.
            group: Restrict the lookup to this API group. Takes precedence over a group qualifier in *name*.
        Raises:
            ResolutionError: If no type matches, or if types of more than one group match and no group was given.
        """

        mappings = self.mappings()
        key = name.lower()
        candidates = [m for m in mappings if key in m.names()]
        if not candidates and group is None and "." in key:
            key, _, qualifier = key.partition(".")
            group = qualifier
            candidates = [m for m in mappings if key in m.names()]
        if group is not None:
            candidates = [m for m in candidates if m.group.lower() == group.lower()]

        if not candidates:
            raise ResolutionError(name, message="no matching resource type found in discovery")

        groups = sorted({m.group for m in candidates})
        if len(groups) > 1:
            choices = ", ".join(sorted({m.group_kind for m in candidates}))
            raise ResolutionError(name, message=f"name is ambiguous, matches {choices}")

        mapping = _pick_preferred(candidates)
        logger.debug("Resolved '{}' to {}/{} ({})", name, mapping.api_version, mapping.kind, mapping.resource)
        return mapping

    def resolve_gvk(self, api_version: str, kind: str) -> ResourceTypeMapping:
        """
        Resolve the exact group, version and kind of a manifest to a resource type.

        Raises:
            ResolutionError: If the type is unknown to the cluster.
        """

        group, version = split_api_version(api_version)
        for mapping in self.mappings():
            if mapping.group == group and mapping.version == version and mapping.kind.lower() == kind.lower():
                logger.debug("Resolved {}/{} ({})", api_version, mapping.kind, mapping.resource)
                return mapping
        raise ResolutionError(kind, message=f"no resource type for apiVersion '{api_version}' found in discovery")

    def with_category(self, category: str) -> list[ResourceTypeMapping]:
        """
        Return the preferred version of every namespaced, listable resource type that belongs to the *category*.
        """

        seen: set[tuple[str, str]] = set()
        result = []
        for mapping in sorted(self.mappings(), key=lambda m: not m.preferred):
            if not mapping.namespaced or category not in mapping.categories:
                continue
            if mapping.verbs and "list" not in mapping.verbs:
                continue
            if (mapping.group, mapping.resource) in seen:
                continue
            seen.add((mapping.group, mapping.resource))
            result.append(mapping)
        return result


def _pick_preferred(candidates: Sequence[ResourceTypeMapping]) -> ResourceTypeMapping:
    for mapping in candidates:
        if mapping.preferred:
            return mapping
    return candidates[0]
