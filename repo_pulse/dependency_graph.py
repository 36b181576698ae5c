"""
Dependency graph construction from a parsed manifest.

The graph is a star: one root node for the repository and one ``direct`` edge
to every declared dependency. Manifests carry no transitive information, so no
transitive edges are produced.
"""

from typing import NamedTuple

from repo_pulse.dependency_parsers.base import NormalizedManifest

DEFAULT_MAX_NODES = 100
ROOT_VERSION = "1.0.0"

# (manifest field, node id prefix, node type)
_SECTIONS = (
    ("dependencies", "dep", "dependency"),
    ("dev_dependencies", "dev", "devDependency"),
    ("peer_dependencies", "peer", "peerDependency"),
)


class DependencyNode(NamedTuple):
    """A vertex of the dependency graph."""

    id: str
    name: str
    version: str
    type: str  # "root", "dependency", "devDependency", "peerDependency"
    ecosystem: str

    def to_dict(self) -> dict[str, str]:
        return self._asdict()


class DependencyEdge(NamedTuple):
    """A root -> dependency edge."""

    source: str
    target: str
    type: str = "direct"

    def to_dict(self) -> dict[str, str]:
        return self._asdict()


class DependencyGraphReport(NamedTuple):
    """Dependency graph as shown in the dashboard."""

    nodes: list[DependencyNode]
    edges: list[DependencyEdge]
    total_dependencies: int
    total_dev_dependencies: int
    ecosystems: list[str]

    def to_dict(self) -> dict[str, object]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "totalDependencies": self.total_dependencies,
            "totalDevDependencies": self.total_dev_dependencies,
            "ecosystems": list(self.ecosystems),
        }


def build_dependency_graph(
    manifest: NormalizedManifest, repo_name: str
) -> tuple[list[DependencyNode], list[DependencyEdge]]:
    """
    Build the full (uncapped) dependency graph of a manifest.

    Node ids are ``root-{repo}``, ``dep-{name}``, ``dev-{name}`` and
    ``peer-{name}``; a duplicate id keeps its first node but still gets an
    edge, mirroring how the manifest declared it.

    Args:
        manifest: Parsed manifest.
        repo_name: Display name of the repository, used for the root node.

    Returns:
        Tuple of (nodes, edges).
    """
    root_id = f"root-{repo_name}"
    nodes = [
        DependencyNode(
            id=root_id,
            name=repo_name,
            version=ROOT_VERSION,
            type="root",
            ecosystem=manifest.ecosystem,
        )
    ]
    edges: list[DependencyEdge] = []
    seen = {root_id}

    for field, prefix, node_type in _SECTIONS:
        for name, version in (getattr(manifest, field) or {}).items():
            node_id = f"{prefix}-{name}"
            if node_id not in seen:
                seen.add(node_id)
                nodes.append(
                    DependencyNode(
                        id=node_id,
                        name=name,
                        version=version,
                        type=node_type,
                        ecosystem=manifest.ecosystem,
                    )
                )
            edges.append(DependencyEdge(source=root_id, target=node_id))

    return nodes, edges


def limit_graph(
    nodes: list[DependencyNode],
    edges: list[DependencyEdge],
    max_nodes: int = DEFAULT_MAX_NODES,
) -> tuple[list[DependencyNode], list[DependencyEdge]]:
    """
    Keep the first ``max_nodes`` nodes and only edges between kept nodes.

    The edge count can drop below the dependency count for large manifests.
    """
    limited_nodes = nodes[:max_nodes]
    kept_ids = {node.id for node in limited_nodes}
    limited_edges = [
        edge
        for edge in edges
        if edge.source in kept_ids and edge.target in kept_ids
    ]
    return limited_nodes, limited_edges


def build_dependency_report(
    manifest: NormalizedManifest | None,
    repo_name: str,
    max_nodes: int = DEFAULT_MAX_NODES,
) -> DependencyGraphReport:
    """
    Build the capped dependency graph report for a repository.

    A missing manifest yields an empty report rather than an error.
    """
    if manifest is None:
        return DependencyGraphReport(
            nodes=[],
            edges=[],
            total_dependencies=0,
            total_dev_dependencies=0,
            ecosystems=[],
        )

    nodes, edges = build_dependency_graph(manifest, repo_name)
    nodes, edges = limit_graph(nodes, edges, max_nodes=max_nodes)

    return DependencyGraphReport(
        nodes=nodes,
        edges=edges,
        total_dependencies=len(manifest.dependencies or {}),
        total_dev_dependencies=len(manifest.dev_dependencies or {}),
        ecosystems=[manifest.ecosystem],
    )
