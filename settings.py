import json
import logging
import os
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(filename)s:%(lineno)d - %(message)s"

DEFAULT_SETTINGS = {
    "page_size": 50,  # 每页提交数量
    "row_height": 40,  # 行高
    "rail_width": 20,  # 列宽
    "node_radius": 6,  # 提交圆点半径
    "api_url": "http://localhost:8130",  # 提交图接口地址
    "request_timeout": 15,  # 请求超时（秒）
}


class Settings:
    def __init__(self, config_dir: Optional[str] = None):
        # 配置目录，默认在用户主目录下
        self.config_dir = config_dir or os.path.join(str(Path.home()), ".git_graph")
        self.config_file = os.path.join(self.config_dir, "settings.json")

        self.settings = dict(DEFAULT_SETTINGS)

        # 加载已有设置
        self.load_settings()

    def load_settings(self):
        """加载设置，文件损坏时保留默认值"""
        if not os.path.exists(self.config_file):
            return
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                saved_settings = json.load(f)
        except (OSError, ValueError) as e:
            logging.warning("加载设置失败：%s", e)
            return
        if not isinstance(saved_settings, dict):
            logging.warning("加载设置失败：%s 不是 JSON 对象", self.config_file)
            return
        self.settings.update(saved_settings)

    def save_settings(self):
        """保存设置"""
        try:
            os.makedirs(self.config_dir, exist_ok=True)
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self.settings, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logging.error("保存设置失败：%s", e)

    def get(self, key: str):
        return self.settings.get(key, DEFAULT_SETTINGS.get(key))

    def set(self, key: str, value):
        self.settings[key] = value
        self.save_settings()

    def get_page_size(self) -> int:
        return int(self.get("page_size"))

    def get_geometry(self) -> tuple[float, float, float]:
        """获取 (row_height, rail_width, node_radius)"""
        return float(self.get("row_height")), float(self.get("rail_width")), float(self.get("node_radius"))

    def get_api_url(self) -> str:
        return self.get("api_url")

    def get_request_timeout(self) -> float:
        return float(self.get("request_timeout"))


def setup_logging():
    """根据环境变量设置日志级别：DEBUG=1 输出调试日志，LOG_TO_FILE=1 同时写入 git_graph.log"""
    log_level = logging.DEBUG if os.getenv("DEBUG") == "1" else logging.INFO
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    if os.getenv("LOG_TO_FILE") == "1":
        file_handler = logging.FileHandler("git_graph.log")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(file_handler)


# 创建全局settings实例
settings = Settings()
