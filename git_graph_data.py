# git_graph_data.py

from dataclasses import dataclass, field
from typing import Any, Optional

CONNECTION_STRAIGHT = "straight"
CONNECTION_MERGE_LEFT = "merge-left"
CONNECTION_MERGE_RIGHT = "merge-right"

SHORT_HASH_LENGTH = 7


class CommitSourceError(Exception):
    """A page of commits could not be fetched."""


@dataclass(frozen=True)
class Commit:
    hash: str
    short_hash: str = ""
    message: str = ""
    author: str = ""
    date: str = ""
    parents: tuple[str, ...] = ()
    refs: tuple[str, ...] = ()  # e.g., ('HEAD -> main', 'origin/main', 'tag: v1.0')
    author_email: str = ""

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Commit":
        """Build a Commit from the JSON shape served by the graph endpoint.

        Both ``parents`` and ``parentHashes`` are accepted, missing or null
        lists become empty tuples.
        """
        commit_hash = data["hash"]
        parents = data.get("parents")
        if parents is None:
            parents = data.get("parentHashes")
        return cls(
            hash=commit_hash,
            short_hash=data.get("shortHash") or data.get("short_hash") or commit_hash[:SHORT_HASH_LENGTH],
            message=data.get("message") or "",
            author=data.get("author") or "",
            date=data.get("date") or "",
            parents=tuple(parents or ()),
            refs=tuple(data.get("refs") or ()),
            author_email=data.get("authorEmail") or data.get("author_email") or "",
        )

    def __repr__(self) -> str:
        return (
            f"Commit(hash='{self.hash[:7]}', "
            f"parents={[p[:7] for p in self.parents]}, "
            f"refs={list(self.refs)}, "
            f"message='{self.message[:20]}')"
        )


@dataclass(frozen=True)
class GraphNode:
    """A commit placed on the graph: rail is the column, row the list position."""

    hash: str
    short_hash: str
    message: str
    author: str
    date: str
    parents: tuple[str, ...]
    refs: tuple[str, ...]
    rail: int
    row: int
    author_email: str = ""

    @classmethod
    def from_commit(cls, commit: Commit, rail: int, row: int) -> "GraphNode":
        return cls(
            hash=commit.hash,
            short_hash=commit.short_hash,
            message=commit.message,
            author=commit.author,
            date=commit.date,
            parents=tuple(commit.parents or ()),
            refs=tuple(commit.refs or ()),
            rail=rail,
            row=row,
            author_email=commit.author_email,
        )


@dataclass(frozen=True)
class GraphConnection:
    from_hash: str
    to_hash: str
    from_rail: int
    to_rail: int
    from_row: int
    to_row: int
    kind: str


@dataclass(frozen=True)
class GraphLayout:
    nodes: tuple[GraphNode, ...] = ()
    connections: tuple[GraphConnection, ...] = ()
    rail_count: int = 0

    @classmethod
    def empty(cls) -> "GraphLayout":
        return cls()

    def node_for(self, commit_hash: str) -> Optional[GraphNode]:
        """Node of a commit, or None. Linear scan (O(n)); build a dict when looking up every node."""
        for node in self.nodes:
            if node.hash == commit_hash:
                return node
        return None


@dataclass(frozen=True)
class CommitPage:
    """One page returned by a commit source."""

    commits: tuple[Commit, ...] = field(default_factory=tuple)
    has_more: bool = False
