# git_graph_layout.py

from typing import Iterable

from git_graph_data import (
    CONNECTION_MERGE_LEFT,
    CONNECTION_MERGE_RIGHT,
    CONNECTION_STRAIGHT,
    Commit,
    GraphConnection,
    GraphLayout,
    GraphNode,
)


def connection_kind(from_rail: int, to_rail: int) -> str:
    if from_rail == to_rail:
        return CONNECTION_STRAIGHT
    if from_rail > to_rail:
        return CONNECTION_MERGE_LEFT
    return CONNECTION_MERGE_RIGHT


def _first_free_rail(active_rails: dict[int, str]) -> int:
    rail = 0
    while rail in active_rails:
        rail += 1
    return rail


def calculate_graph_layout(commits: Iterable[Commit]) -> GraphLayout:
    """
    Assigns every commit a rail (column) and a row and lists the connections
    between each commit and its parents.

    The input is expected to be ordered children-before-parents (as `git log
    --topo-order` prints it); it is never re-sorted. Commits at the beginning
    of the list get the lowest rows. Hashes must be unique within one call,
    the caller deduplicates.

    Rail assignment:
    - A commit that one or more rails are waiting for takes the leftmost of
      them; the other waiting rails are released (branches converging).
    - A commit nobody waits for takes the first free rail.
    - The first parent continues on the commit's rail, every further parent
      of a merge is given the first free rail.

    Parents that are not in the list (not fetched yet, or never) produce no
    connection.
    """
    commits = list(commits)
    if not commits:
        return GraphLayout.empty()

    nodes: list[GraphNode] = []
    # hash -> rails waiting for that commit to show up
    expected_parents: dict[str, list[int]] = {}
    # rail -> hash the rail is reserved for
    active_rails: dict[int, str] = {}
    positions: dict[str, tuple[int, int]] = {}  # hash -> (rail, row)

    max_rail = 0

    for row, commit in enumerate(commits):
        waiting_rails = expected_parents.pop(commit.hash, None)
        if waiting_rails:
            rail = min(waiting_rails)
            for other_rail in waiting_rails:
                if other_rail != rail:
                    active_rails.pop(other_rail, None)
        else:
            rail = _first_free_rail(active_rails)

        max_rail = max(max_rail, rail)
        positions[commit.hash] = (rail, row)
        nodes.append(GraphNode.from_commit(commit, rail, row))

        parents = commit.parents or ()
        if not parents:
            # Root commit, the line ends here
            active_rails.pop(rail, None)
            continue

        first_parent = parents[0]
        active_rails[rail] = first_parent
        expected_parents.setdefault(first_parent, []).append(rail)

        for parent_hash in parents[1:]:
            new_rail = _first_free_rail(active_rails)
            active_rails[new_rail] = parent_hash
            max_rail = max(max_rail, new_rail)
            expected_parents.setdefault(parent_hash, []).append(new_rail)

    connections: list[GraphConnection] = []
    for node in nodes:
        for parent_hash in node.parents:
            parent_position = positions.get(parent_hash)
            if parent_position is None:
                continue
            parent_rail, parent_row = parent_position
            connections.append(
                GraphConnection(
                    from_hash=node.hash,
                    to_hash=parent_hash,
                    from_rail=node.rail,
                    to_rail=parent_rail,
                    from_row=node.row,
                    to_row=parent_row,
                    kind=connection_kind(node.rail, parent_rail),
                )
            )

    return GraphLayout(nodes=tuple(nodes), connections=tuple(connections), rail_count=max_rail + 1)
