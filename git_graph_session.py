# git_graph_session.py

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from git_graph_data import Commit, CommitPage, GraphLayout
from git_graph_layout import calculate_graph_layout


@dataclass(frozen=True)
class PageRequest:
    """A page load handed out by the session; `generation` identifies the session state it belongs to."""

    generation: int
    offset: int
    append: bool


class GraphSession:
    """
    Pagination state of one graph view.

    Keeps the commits fetched so far (in fetch order, one entry per hash), the
    offset of the next page and the layout of everything accumulated. The
    layout is recomputed over the whole list after every page.

    Only one page may be in flight. `reset()` bumps `generation`, so a page
    requested before the reset is dropped when it finally arrives.
    """

    def __init__(self):
        self.commits: list[Commit] = []
        self.layout: GraphLayout = GraphLayout.empty()
        self.cursor: int = 0
        self.has_more: bool = True
        self.loading: bool = False
        self.loading_more: bool = False
        self.error: Optional[str] = None
        self.generation: int = 0
        self._hashes: set[str] = set()

    def reset(self):
        self.generation += 1
        self.commits = []
        self._hashes = set()
        self.layout = GraphLayout.empty()
        self.cursor = 0
        self.has_more = True
        self.loading = False
        self.loading_more = False
        self.error = None

    def load_page(self, commits: Iterable[Commit], append: bool, has_more: bool) -> int:
        """Merge one page into the buffer and recompute the layout.

        Returns the number of commits that were not already present.
        """
        if append:
            new_commits = []
            for commit in commits:
                if commit.hash in self._hashes:
                    continue
                self._hashes.add(commit.hash)
                new_commits.append(commit)
            self.commits = self.commits + new_commits
            self.cursor += len(new_commits)
        else:
            # Same hash twice in one page is not expected from git log; keep the first.
            new_commits = []
            seen: set[str] = set()
            for commit in commits:
                if commit.hash in seen:
                    continue
                seen.add(commit.hash)
                new_commits.append(commit)
            self.commits = new_commits
            self._hashes = seen
            self.cursor = len(new_commits)

        self.has_more = has_more
        self.layout = calculate_graph_layout(self.commits)
        logging.debug(
            "Graph session: %d new commits, %d total, %d rails, has_more=%s",
            len(new_commits),
            len(self.commits),
            self.layout.rail_count,
            has_more,
        )
        return len(new_commits)

    @property
    def in_flight(self) -> bool:
        return self.loading or self.loading_more

    def begin_load(self, append: bool) -> Optional[PageRequest]:
        """Reserve the next page load, or return None when it must not start.

        A refresh (append=False) starts over from offset 0; loading more is
        refused while a load is outstanding or when the source has no more.
        """
        if not append:
            self.reset()
            self.loading = True
            return PageRequest(generation=self.generation, offset=0, append=False)

        if self.in_flight or not self.has_more:
            return None
        self.loading_more = True
        return PageRequest(generation=self.generation, offset=self.cursor, append=True)

    def is_stale(self, request: PageRequest) -> bool:
        return request.generation != self.generation

    def apply_page(self, request: PageRequest, page: CommitPage) -> bool:
        if self.is_stale(request):
            logging.info("Graph session: dropping stale page at offset %d", request.offset)
            return False
        self.loading = False
        self.loading_more = False
        self.error = None
        self.load_page(page.commits, request.append, page.has_more)
        return True

    def fail(self, request: PageRequest, message: str) -> bool:
        """Record a failed fetch; the commits and layout loaded so far are kept."""
        if self.is_stale(request):
            return False
        self.loading = False
        self.loading_more = False
        self.error = message
        logging.error("Graph session: failed to load page at offset %d: %s", request.offset, message)
        return True
