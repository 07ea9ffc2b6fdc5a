import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtGui import QPainterPath

from git_graph_data import CommitPage, GraphLayout
from git_graph_items import NODE_RADIUS, RAIL_WIDTH, ROW_HEIGHT, connection_path, graph_size
from git_graph_session import GraphSession, PageRequest
from git_manager import GitManager
from graph_api_client import GraphApiClient
from settings import Settings, settings
from threads import PageLoadThread


class GitGraphLoader(QObject):
    """
    Drives a GraphSession from a commit source on a background thread.

    `source` is anything with `fetch_page(limit, offset)` returning a
    CommitPage, or a coroutine producing one (GitManager, GraphApiClient).
    One page is fetched at a time; `load_more()` while a page is in flight is
    ignored. `refresh()` and `reset()` make any outstanding page stale.
    """

    layout_changed = pyqtSignal(object)  # GraphLayout
    load_failed = pyqtSignal(str)
    loading_changed = pyqtSignal(bool)

    def __init__(
        self,
        source,
        page_size: int = 50,
        geometry: tuple[float, float, float] = (ROW_HEIGHT, RAIL_WIDTH, NODE_RADIUS),
        parent=None,
    ):
        super().__init__(parent)
        self.source = source
        self.page_size = page_size
        self.row_height, self.rail_width, self.node_radius = geometry
        self.session = GraphSession()
        self._threads: list[PageLoadThread] = []

    @classmethod
    def for_repository(cls, repo_path: str, use_api: bool = False, app_settings: Settings = settings, parent=None):
        """Loader for a repository, read locally with GitPython or through the graph HTTP endpoint."""
        if use_api:
            source = GraphApiClient(app_settings.get_api_url(), repo_path, timeout=app_settings.get_request_timeout())
        else:
            source = GitManager(repo_path)
        return cls(
            source,
            page_size=app_settings.get_page_size(),
            geometry=app_settings.get_geometry(),
            parent=parent,
        )

    def graph_size(self) -> tuple[float, float]:
        return graph_size(self.session.layout, self.rail_width, self.row_height)

    def connection_paths(self) -> list[QPainterPath]:
        """Paths of the current layout's connections, in the loader's geometry."""
        return [
            connection_path(connection, self.rail_width, self.row_height, self.node_radius)
            for connection in self.session.layout.connections
        ]

    @property
    def layout(self) -> GraphLayout:
        return self.session.layout

    @property
    def has_more(self) -> bool:
        return self.session.has_more

    @property
    def is_loading(self) -> bool:
        return self.session.in_flight

    def refresh(self) -> bool:
        """Start over from the first page."""
        request = self.session.begin_load(append=False)
        self.layout_changed.emit(self.session.layout)
        return self._start(request)

    def load_more(self) -> bool:
        request = self.session.begin_load(append=True)
        if request is None:
            logging.debug("GitGraphLoader: load_more ignored (in flight or no more pages)")
            return False
        return self._start(request)

    def reset(self):
        self.session.reset()
        self.loading_changed.emit(False)
        self.layout_changed.emit(self.session.layout)

    def _start(self, request: PageRequest) -> bool:
        # Threads made stale by a refresh keep running until their fetch returns
        self._threads = [t for t in self._threads if t.isRunning()]
        thread = PageLoadThread(self.source, request, self.page_size)
        thread.finished.connect(self._on_page_finished)
        self._threads.append(thread)
        self.loading_changed.emit(True)
        thread.start()
        return True

    def _on_page_finished(self, request: PageRequest, page: Optional[CommitPage], error_message: str):
        if page is None:
            if self.session.fail(request, error_message or "Failed to fetch git graph"):
                self.loading_changed.emit(False)
                self.load_failed.emit(self.session.error)
            return

        if self.session.apply_page(request, page):
            self.loading_changed.emit(False)
            self.layout_changed.emit(self.session.layout)
