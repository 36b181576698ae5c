"""
Tests for dependency graph construction.
"""

from repo_pulse.dependency_graph import (
    build_dependency_graph,
    build_dependency_report,
    limit_graph,
)
from repo_pulse.dependency_parsers.base import NormalizedManifest


def make_manifest(count, dev=None, peer=None):
    return NormalizedManifest(
        dependencies={f"pkg{i}": "1.0.0" for i in range(count)},
        dev_dependencies=dev,
        peer_dependencies=peer,
        ecosystem="npm",
    )


def test_star_graph():
    """Test every dependency is linked from the root."""
    manifest = make_manifest(2, dev={"jest": "^29.0.0"}, peer={"react": ">=18"})
    nodes, edges = build_dependency_graph(manifest, "web")

    assert [node.id for node in nodes] == [
        "root-web",
        "dep-pkg0",
        "dep-pkg1",
        "dev-jest",
        "peer-react",
    ]
    assert nodes[0].type == "root"
    assert nodes[0].version == "1.0.0"
    assert nodes[3].type == "devDependency"
    assert nodes[4].type == "peerDependency"
    assert all(edge.source == "root-web" and edge.type == "direct" for edge in edges)
    assert len(edges) == 4


def test_same_name_in_two_sections_gets_two_nodes():
    manifest = make_manifest(0, dev={"typescript": "5.4.0"}, peer={"typescript": ">=5"})
    nodes, _ = build_dependency_graph(manifest, "lib")
    assert {node.id for node in nodes} == {"root-lib", "dev-typescript", "peer-typescript"}


def test_limit_graph_drops_dangling_edges():
    """Test capping keeps edges only between surviving nodes."""
    nodes, edges = build_dependency_graph(make_manifest(120), "big")
    limited_nodes, limited_edges = limit_graph(nodes, edges)

    assert len(limited_nodes) == 100
    assert len(limited_edges) == 99
    kept = {node.id for node in limited_nodes}
    assert all(edge.source in kept and edge.target in kept for edge in limited_edges)


def test_report_counts_declared_dependencies():
    report = build_dependency_report(make_manifest(120, dev={"a": "1.0.0"}), "big")
    assert len(report.nodes) == 100
    assert report.total_dependencies == 120
    assert report.total_dev_dependencies == 1
    assert report.ecosystems == ["npm"]


def test_report_without_manifest():
    report = build_dependency_report(None, "empty")
    assert report.to_dict() == {
        "nodes": [],
        "edges": [],
        "totalDependencies": 0,
        "totalDevDependencies": 0,
        "ecosystems": [],
    }


def test_report_to_dict():
    data = build_dependency_report(make_manifest(1), "web").to_dict()
    assert data["nodes"][1] == {
        "id": "dep-pkg0",
        "name": "pkg0",
        "version": "1.0.0",
        "type": "dependency",
        "ecosystem": "npm",
    }
    assert data["edges"] == [{"source": "root-web", "target": "dep-pkg0", "type": "direct"}]
