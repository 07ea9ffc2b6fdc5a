import asyncio
import inspect
import logging

from PyQt6.QtCore import QThread, pyqtSignal

from git_graph_session import PageRequest


class PageLoadThread(QThread):
    """在后台获取一页提交的线程"""

    finished = pyqtSignal(object, object, str)  # (request, page or None, error_message)

    def __init__(self, source, request: PageRequest, limit: int, parent=None):
        super().__init__(parent)
        self.source = source
        self.request = request
        self.limit = limit

    def run(self):
        """执行获取操作，协程形式的来源在独立事件循环中运行"""
        try:
            result = self.source.fetch_page(self.limit, self.request.offset)
            if inspect.isawaitable(result):
                loop = asyncio.new_event_loop()
                try:
                    asyncio.set_event_loop(loop)
                    result = loop.run_until_complete(result)
                finally:
                    asyncio.set_event_loop(None)
                    loop.close()
            self.finished.emit(self.request, result, "")
        except Exception as e:
            logging.exception("获取提交页失败 (offset=%d)", self.request.offset)
            self.finished.emit(self.request, None, str(e))
