"""
Collaboration network construction.

People are nodes; an edge links a PR author and a reviewer of that PR. Edges
are undirected: a pair of people shares one edge whatever the direction of the
reviews, with the orientation of the first review kept for display.
"""

from typing import NamedTuple

from repo_pulse.models import Contributor, PullRequestRecord

DEFAULT_MAX_NODES = 50
DEFAULT_MAX_EDGES = 100
REVIEW_EDGE = "review"


class RepositoryActivity(NamedTuple):
    """Contributors and reviewed PRs fetched for one repository."""

    full_name: str
    contributors: list[Contributor]
    pull_requests: list[PullRequestRecord]


class CollaborationNode(NamedTuple):
    id: str
    login: str
    avatar_url: str
    contributions: int
    repos: list[str]
    type: str = "user"

    def to_dict(self) -> dict[str, object]:
        return {**self._asdict(), "repos": list(self.repos)}


class CollaborationEdge(NamedTuple):
    source: str
    target: str
    weight: int
    repos: list[str]
    types: list[str]

    def to_dict(self) -> dict[str, object]:
        return {**self._asdict(), "repos": list(self.repos), "types": list(self.types)}


class CollaborationNetwork(NamedTuple):
    nodes: list[CollaborationNode]
    edges: list[CollaborationEdge]
    total_collaborators: int
    total_repos: int
    most_active_collaborator: dict[str, object] | None

    def to_dict(self) -> dict[str, object]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "totalCollaborators": self.total_collaborators,
            "totalRepos": self.total_repos,
            "mostActiveCollaborator": self.most_active_collaborator,
        }


EMPTY_NETWORK = CollaborationNetwork(
    nodes=[], edges=[], total_collaborators=0, total_repos=0, most_active_collaborator=None
)


class _NodeState:
    __slots__ = ("login", "avatar_url", "contributions", "repos")

    def __init__(self, login: str, avatar_url: str):
        self.login = login
        self.avatar_url = avatar_url
        self.contributions = 0
        self.repos: list[str] = []

    def add_repo(self, repo: str) -> None:
        if repo not in self.repos:
            self.repos.append(repo)

    def freeze(self) -> CollaborationNode:
        return CollaborationNode(
            id=self.login,
            login=self.login,
            avatar_url=self.avatar_url,
            contributions=self.contributions,
            repos=list(self.repos),
        )


class _EdgeState:
    __slots__ = ("source", "target", "weight", "repos", "types")

    def __init__(self, source: str, target: str):
        self.source = source
        self.target = target
        self.weight = 0
        self.repos: list[str] = []
        self.types: list[str] = []

    def record(self, repo: str, edge_type: str) -> None:
        self.weight += 1
        if repo not in self.repos:
            self.repos.append(repo)
        if edge_type not in self.types:
            self.types.append(edge_type)

    def freeze(self) -> CollaborationEdge:
        return CollaborationEdge(
            source=self.source,
            target=self.target,
            weight=self.weight,
            repos=list(self.repos),
            types=list(self.types),
        )


def _default_avatar(login: str) -> str:
    return f"https://github.com/{login}.png"


def build_collaboration_network(
    repositories: list[RepositoryActivity],
    max_nodes: int = DEFAULT_MAX_NODES,
    max_edges: int = DEFAULT_MAX_EDGES,
) -> CollaborationNetwork:
    """
    Build the author/reviewer collaboration network across repositories.

    Contributors sum their contribution counts across repositories. PR
    authors and reviewers missing from the contributor lists join with zero
    contributions. Self-reviews and reviews without a login are ignored.

    Args:
        repositories: Per-repository activity, in analysis order.
        max_nodes: Nodes kept after sorting by contributions.
        max_edges: Edges kept after sorting by weight.

    Returns:
        CollaborationNetwork; ``total_repos`` counts every analyzed
        repository, ``total_collaborators`` only the kept nodes.
    """
    nodes: dict[str, _NodeState] = {}
    edges: dict[tuple[str, str], _EdgeState] = {}

    def touch(login: str, repo: str, avatar_url: str | None = None) -> _NodeState:
        node = nodes.get(login)
        if node is None:
            node = nodes[login] = _NodeState(login, avatar_url or _default_avatar(login))
        node.add_repo(repo)
        return node

    for activity in repositories:
        repo = activity.full_name
        for contributor in activity.contributors:
            node = touch(contributor.login, repo, contributor.avatar_url)
            node.contributions += contributor.contributions

        for pr in activity.pull_requests:
            author = pr.author_login
            if not author:
                continue
            touch(author, repo)

            for review in pr.reviews:
                reviewer = review.reviewer_login
                if not reviewer or reviewer == author:
                    continue
                touch(reviewer, repo)

                key = tuple(sorted((author, reviewer)))
                edge = edges.get(key)
                if edge is None:
                    edge = edges[key] = _EdgeState(author, reviewer)
                edge.record(repo, REVIEW_EDGE)

    ranked = sorted(
        (node.freeze() for node in nodes.values()),
        key=lambda node: node.contributions,
        reverse=True,
    )[:max_nodes]
    kept = {node.id for node in ranked}

    ranked_edges = sorted(
        (
            edge.freeze()
            for edge in edges.values()
            if edge.source in kept and edge.target in kept
        ),
        key=lambda edge: edge.weight,
        reverse=True,
    )[:max_edges]

    most_active = None
    if ranked:
        most_active = {"login": ranked[0].login, "contributions": ranked[0].contributions}

    return CollaborationNetwork(
        nodes=ranked,
        edges=ranked_edges,
        total_collaborators=len(ranked),
        total_repos=len(repositories),
        most_active_collaborator=most_active,
    )
