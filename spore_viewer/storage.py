"""
持久化存储 (键值接口)
标定列表、当前标定名称以及显示偏好都保存在一个 JSON 文档中，启动时读取，修改时立即写入。
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields

from .config import DEFAULT_BACKGROUND, DEFAULT_SCALE_BAR_COLOR, KEY_PREFERENCES
from .errors import StorageFailure

logger = logging.getLogger(__name__)


class MemoryStore:
    """基于 dict 的存储，用于测试或不需要落盘的场景。"""

    def __init__(self, data=None):
        self._data = dict(data or {})

    def load(self):
        return dict(self._data)

    def get(self, key, default=None):
        return self._data.get(key, default)

    def set(self, key, value):
        self._data[key] = value

    def remove(self, key):
        self._data.pop(key, None)


class JsonFileStore(MemoryStore):
    """写入单个 JSON 文件的存储。每次 set/remove 都整体重写文件。"""

    def __init__(self, path):
        super().__init__()
        self.path = path

    def load(self):
        """从文件读取；文件不存在时视为空。"""
        if not os.path.exists(self.path):
            self._data = {}
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.error("Failed to read settings %s: %s", self.path, exc)
            raise StorageFailure(f"cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageFailure(f"{self.path} does not contain a JSON object")
        self._data = data
        return dict(data)

    def set(self, key, value):
        self._data[key] = value
        self._flush()

    def remove(self, key):
        if key in self._data:
            del self._data[key]
            self._flush()

    def _flush(self):
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to write settings %s: %s", self.path, exc)
            raise StorageFailure(f"cannot write {self.path}: {exc}") from exc


# ---------------------------------------------------------------------------
# 显示偏好
# ---------------------------------------------------------------------------

@dataclass
class Preferences:
    background_color: str = DEFAULT_BACKGROUND
    scale_bar_color: str = DEFAULT_SCALE_BAR_COLOR
    notes: str = ""


def load_preferences(store):
    raw = store.get(KEY_PREFERENCES) or {}
    if not isinstance(raw, dict):
        logger.warning("Ignoring malformed preferences: %r", raw)
        return Preferences()
    known = {f.name for f in fields(Preferences)}
    return Preferences(**{k: v for k, v in raw.items() if k in known})


def save_preferences(store, prefs):
    store.set(KEY_PREFERENCES, asdict(prefs))
