"""
标定管理
每个标定记录一个名称和 px/μm 比值；最多一个标定处于激活状态，未激活时长度以像素显示。
所有修改先更新内存，再立即写入存储。
"""

import json
import logging
import math
import numbers

from .config import KEY_ACTIVE_CALIBRATION, KEY_CALIBRATIONS
from .errors import DuplicateNameError, MalformedImportError

logger = logging.getLogger(__name__)


class Calibration:
    """一个命名标定: value 为每微米的像素数 (px/μm)"""
    __slots__ = ("name", "value")

    def __init__(self, name, value):
        self.name = name
        self.value = float(value)

    def to_dict(self):
        return {"name": self.name, "value": self.value}

    def __eq__(self, other):
        if not isinstance(other, Calibration):
            return NotImplemented
        return self.name == other.name and self.value == other.value

    def __repr__(self):
        return f"Calibration({self.name!r}, {self.value:g} px/μm)"


def pixels_per_micrometer(line_length_px, true_length_um):
    """由参考线段长度和实际长度计算 px/μm，保留 3 位小数 (四舍五入)。"""
    if not true_length_um > 0:
        raise ValueError("true length must be a positive number")
    raw = line_length_px / true_length_um
    return math.floor(raw * 1000 + 0.5) / 1000


def parse_calibrations(data):
    """校验导入数据: 必须是 [{name: str, value: number}, ...] 且名称不重复。"""
    if not isinstance(data, list):
        raise MalformedImportError("calibration file must contain a JSON array")
    result = []
    seen = set()
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise MalformedImportError(f"entry {i} is not an object")
        name = item.get("name")
        value = item.get("value")
        if not isinstance(name, str) or not name:
            raise MalformedImportError(f"entry {i} has no valid name")
        if isinstance(value, bool) or not isinstance(value, numbers.Real) or not value > 0:
            raise MalformedImportError(f"entry {i} ({name}) has no valid value")
        if name in seen:
            raise MalformedImportError(f"duplicate calibration name: {name}")
        seen.add(name)
        result.append(Calibration(name, value))
    return result


class CalibrationRegistry:
    """按插入顺序保存的标定集合。"""

    def __init__(self, store, calibrations=(), active_name=None):
        self._store = store
        self._items = {}
        for c in calibrations:
            self._items[c.name] = c
        self._active = active_name if active_name in self._items else None

    # -- 读取 --
    def load(self):
        """启动时从存储读取一次。存储中的激活名称若已不存在则丢弃。"""
        raw = self._store.get(KEY_CALIBRATIONS)
        if raw is None:
            self._items = {}
            self._store.set(KEY_CALIBRATIONS, [])
        else:
            try:
                self._items = {c.name: c for c in parse_calibrations(raw)}
            except MalformedImportError as exc:
                logger.warning("Stored calibrations are malformed, ignoring: %s", exc)
                self._items = {}
        active = self._store.get(KEY_ACTIVE_CALIBRATION)
        self._active = active if active in self._items else None
        logger.info("Loaded %d calibration(s), active: %s", len(self._items), self._active)
        return self

    def get(self, name):
        return self._items.get(name)

    def names(self):
        return list(self._items)

    @property
    def active_name(self):
        return self._active

    @property
    def active(self):
        return self._items.get(self._active) if self._active else None

    def active_ratio(self):
        """当前激活标定的 px/μm；未激活时为 1.0 (即保持像素单位)。"""
        cal = self.active
        return cal.value if cal is not None else 1.0

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items.values()))

    def __contains__(self, name):
        return name in self._items

    # -- 修改 --
    def add(self, name, value, overwrite=False):
        if not name:
            raise ValueError("calibration name must not be empty")
        if not value > 0:
            raise ValueError("calibration value must be positive")
        if name in self._items:
            if not overwrite:
                raise DuplicateNameError(name)
            del self._items[name]
        cal = Calibration(name, value)
        self._items[name] = cal
        logger.info("Calibration %s set to %.3f px/um", name, cal.value)
        self._persist_calibrations()
        return cal

    def create_from_line(self, name, line, true_length_um, overwrite=False):
        """由参考线段创建 (或覆盖) 标定。"""
        value = pixels_per_micrometer(line.length, true_length_um)
        return self.add(name, value, overwrite=overwrite)

    def remove(self, name):
        if name not in self._items:
            raise KeyError(name)
        del self._items[name]
        logger.info("Calibration %s removed", name)
        was_active = self._active == name
        if was_active:
            self._active = None
        self._persist_calibrations()
        if was_active:
            self._persist_active()

    def set_active(self, name):
        if name is not None and name not in self._items:
            raise KeyError(name)
        self._active = name
        self._persist_active()

    def clear(self):
        """删除所有标定和激活状态。"""
        self._items = {}
        self._active = None
        self._store.remove(KEY_CALIBRATIONS)
        self._store.remove(KEY_ACTIVE_CALIBRATION)
        logger.info("All calibrations cleared")

    # -- 导入/导出 --
    def import_json(self, text):
        """用 JSON 数组整体替换现有标定。格式错误时不做任何修改。"""
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise MalformedImportError(f"not valid JSON: {exc}") from exc
        calibrations = parse_calibrations(data)

        self._items = {c.name: c for c in calibrations}
        if self._active not in self._items:
            self._active = None
        logger.info("Imported %d calibration(s)", len(calibrations))
        self._persist_calibrations()
        self._persist_active()
        return calibrations

    def export_json(self):
        return json.dumps([c.to_dict() for c in self._items.values()],
                          ensure_ascii=False, indent=2)

    # -- 存储 --
    def _persist_calibrations(self):
        self._store.set(KEY_CALIBRATIONS, [c.to_dict() for c in self._items.values()])

    def _persist_active(self):
        if self._active is None:
            self._store.remove(KEY_ACTIVE_CALIBRATION)
        else:
            self._store.set(KEY_ACTIVE_CALIBRATION, self._active)
