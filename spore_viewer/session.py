"""
测量会话 (状态机)
把一连串点击变成经过校验的长轴/短轴线段，第 4 次点击时生成 Blob。

    点击 1 -> 长轴起点        (线段跟随鼠标)
    点击 2 -> 长轴终点        (标定模式下在此请求标定)
    点击 3 -> 短轴起点        必须落在长轴的垂线带内
    点击 4 -> 短轴终点        短轴必须与长轴相交

所有状态转换在事件处理函数内同步完成；标定请求未处理前忽略所有鼠标事件。
"""

import enum
import logging
import math
from dataclasses import dataclass
from typing import Iterable, Protocol

from .calibration import pixels_per_micrometer
from .errors import DuplicateNameError, StorageFailure, ValidationRejection
from .geometry import Blob, Line, Point, is_between_perpendiculars, lines_intersect, \
    perpendicular_endpoint
from .strings import translate

logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    IDLE = "idle"                          # 无点
    LONG_AXIS = "long_axis"                # 1 点，长轴终点跟随鼠标
    SHORT_AXIS_START = "short_axis_start"  # 2 点，等待短轴起点
    SHORT_AXIS = "short_axis"              # 3 点，短轴终点垂直吸附
    CALIBRATING = "calibrating"            # 2 点，等待标定输入


class ClickOutcome(enum.Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    BLOB_CREATED = "blob_created"
    CALIBRATION_REQUESTED = "calibration_requested"
    IGNORED = "ignored"


@dataclass(frozen=True)
class CalibrationRequest:
    """标定模式下第二次点击后发出，等待宿主提供实际长度和名称。"""
    reference_line: Line

    @property
    def length(self):
        return self.reference_line.length


class Prompt(Protocol):
    def ask_number(self, message): ...
    def ask_text(self, message): ...
    def confirm(self, message): ...


class BlobDetector(Protocol):
    """外部检测器: 输入栅格图像，输出候选 Blob。"""
    def detect(self, image) -> Iterable[Blob]: ...


class MeasurementSession:

    def __init__(self, registry=None, to_image_space=None, blobs=(),
                 snap_perpendicular=True, calibration_mode=False):
        self.registry = registry
        self.to_image_space = to_image_space
        self.snap_perpendicular = snap_perpendicular
        self._calibration_mode = calibration_mode

        self._blobs: list[Blob] = list(blobs)
        self._points: list[Point] = []
        self._long_axis = None
        self._pending_line = None
        self._pending_calibration = None
        self._phase = Phase.IDLE

    # ------------------------------------------------------------ 只读快照
    @property
    def phase(self):
        return self._phase

    @property
    def points(self):
        return tuple(Point(p.x, p.y, p.index) for p in self._points)

    @property
    def lines(self):
        """已完成的长轴加上正在绘制的线段"""
        result = []
        if self._long_axis is not None:
            result.append(self._long_axis.copy())
        if self._pending_line is not None:
            result.append(self._pending_line.copy())
        return tuple(result)

    @property
    def pending_line(self):
        return self._pending_line.copy() if self._pending_line is not None else None

    @property
    def blobs(self):
        return tuple(b.copy() for b in self._blobs)

    @property
    def pending_calibration(self):
        return self._pending_calibration

    @property
    def in_progress(self):
        return bool(self._points)

    @property
    def calibration_mode(self):
        return self._calibration_mode

    def set_calibration_mode(self, enabled):
        """切换模式时丢弃未完成的测量。"""
        enabled = bool(enabled)
        if enabled != self._calibration_mode:
            self._calibration_mode = enabled
            self.reset()

    # ------------------------------------------------------------ 鼠标事件
    def click_device(self, x, y):
        p = self._device_to_image(x, y)
        return self.click(p.x, p.y)

    def move_device(self, x, y):
        p = self._device_to_image(x, y)
        return self.move(p.x, p.y)

    def secondary_click_device(self, x, y):
        p = self._device_to_image(x, y)
        return self.secondary_click(p.x, p.y)

    def click(self, x, y):
        if self._phase is Phase.CALIBRATING:
            logger.debug("Click ignored while a calibration is pending")
            return ClickOutcome.IGNORED

        pt = Point(x, y, len(self._points))
        try:
            end = self.validate_click(pt)
        except ValidationRejection as exc:
            logger.debug("Click (%.2f, %.2f) rejected: %s", x, y, exc.reason)
            return ClickOutcome.REJECTED

        if self._phase is Phase.IDLE:
            self._points.append(pt)
            self._pending_line = Line(x, y, x, y)
            self._phase = Phase.LONG_AXIS
            return ClickOutcome.ACCEPTED

        if self._phase is Phase.LONG_AXIS:
            self._points.append(pt)
            self._pending_line.set_end(x, y)
            self._long_axis, self._pending_line = self._pending_line, None
            if self._calibration_mode:
                self._pending_calibration = CalibrationRequest(self._long_axis.copy())
                self._phase = Phase.CALIBRATING
                logger.info("Calibration requested for a %.2f px reference line",
                            self._long_axis.length)
                return ClickOutcome.CALIBRATION_REQUESTED
            self._phase = Phase.SHORT_AXIS_START
            return ClickOutcome.ACCEPTED

        if self._phase is Phase.SHORT_AXIS_START:
            self._points.append(pt)
            self._pending_line = Line(x, y, x, y)
            self._phase = Phase.SHORT_AXIS
            return ClickOutcome.ACCEPTED

        # Phase.SHORT_AXIS
        self._points.append(pt)
        self._pending_line.set_end(end.x, end.y)
        blob = Blob.normalized(self._long_axis, self._pending_line)
        self._blobs.append(blob)
        self.reset()
        logger.info("Blob #%d recorded: %.2f x %.2f px",
                    len(self._blobs), blob.axis_a, blob.axis_b)
        return ClickOutcome.BLOB_CREATED

    def validate_click(self, point):
        """检查当前阶段下的点击是否有效，返回实际采用的端点。

        Raises:
            ValidationRejection: 第 3 点不在长轴垂线带内，或短轴不与长轴相交。
        """
        if self._phase is Phase.SHORT_AXIS_START:
            axis = self._long_axis
            if not is_between_perpendiculars(point, axis.start, axis.end):
                raise ValidationRejection("point is not between the perpendiculars of the long axis")
        elif self._phase is Phase.SHORT_AXIS:
            end = self._short_axis_end(point)
            candidate = Line(self._pending_line.x1, self._pending_line.y1, end.x, end.y)
            if not lines_intersect(self._long_axis, candidate).intersects:
                raise ValidationRejection("short axis does not intersect the long axis")
            return end
        return point

    def move(self, x, y):
        """鼠标移动时更新预览线段，返回是否需要重绘。"""
        if self._phase is Phase.LONG_AXIS:
            self._pending_line.set_end(x, y)
            return True
        if self._phase is Phase.SHORT_AXIS:
            end = self._short_axis_end(Point(x, y))
            self._pending_line.set_end(end.x, end.y)
            return True
        return False

    def secondary_click(self, x, y):
        """右键: 回退未完成的测量，并删除包含该点的 Blob。返回被删除的 Blob 列表。"""
        if self._phase is Phase.CALIBRATING:
            return []

        if len(self._points) > 2:
            # 只回退短轴，保留长轴
            del self._points[2:]
            self._pending_line = None
            self._phase = Phase.SHORT_AXIS_START
        elif self._points:
            self.reset()

        pt = Point(x, y)
        removed = []
        for i in range(len(self._blobs) - 1, -1, -1):
            if self._blobs[i].contains(pt):
                removed.append(self._blobs.pop(i))
        if removed:
            logger.info("Removed %d blob(s) at (%.2f, %.2f)", len(removed), x, y)
        return removed

    # ------------------------------------------------------------ 标定
    def resolve_calibration(self, true_length_um, name, overwrite=False):
        """用户输入实际长度 (μm) 和名称后创建标定。

        名称重复时抛出 DuplicateNameError 并保留请求，宿主可以确认覆盖或重新输入。
        """
        request = self._pending_calibration
        if request is None:
            raise RuntimeError("no calibration is pending")
        if self.registry is None:
            raise RuntimeError("session has no calibration registry")
        try:
            cal = self.registry.create_from_line(name, request.reference_line,
                                                 true_length_um, overwrite=overwrite)
        except StorageFailure:
            self.reset()
            raise
        self.reset()
        return cal

    def cancel_calibration(self):
        if self._pending_calibration is not None:
            logger.info("Calibration cancelled")
        self.reset()

    def run_calibration_prompt(self, prompt, lang="zh"):
        """通过阻塞式对话框完成待处理的标定；用户取消时返回 None。"""
        request = self._pending_calibration
        if request is None:
            return None
        if request.length == 0:
            logger.warning("Reference line has zero length, calibration abandoned")
            self.cancel_calibration()
            return None

        while True:
            true_length = prompt.ask_number(translate("cal_ask_length", lang, px=request.length))
            if true_length is None:
                self.cancel_calibration()
                return None
            if (math.isfinite(true_length) and true_length > 0
                    and pixels_per_micrometer(request.length, true_length) > 0):
                break
            logger.debug("Rejected true length %r for a %.2f px line", true_length, request.length)

        while True:
            name = prompt.ask_text(translate("cal_ask_name", lang))
            name = name.strip() if name else ""
            if not name:
                self.cancel_calibration()
                return None
            try:
                return self.resolve_calibration(true_length, name)
            except DuplicateNameError:
                if prompt.confirm(translate("cal_overwrite", lang, name=name)):
                    return self.resolve_calibration(true_length, name, overwrite=True)

    # ------------------------------------------------------------ Blob 管理
    def reset(self):
        """清空未完成的测量 (已完成的 Blob 保留)"""
        self._points.clear()
        self._long_axis = None
        self._pending_line = None
        self._pending_calibration = None
        self._phase = Phase.IDLE

    def clear(self):
        self.reset()
        self._blobs.clear()

    def remove_blob(self, index):
        return self._blobs.pop(index)

    def undo_last_blob(self):
        if not self._blobs:
            return None
        return self._blobs.pop()

    def replace_detected_blobs(self, candidates):
        """用新的自动检测结果替换上一次的检测结果，手动测量保留。

        候选必须两条轴线长度非零且相交，否则跳过。
        """
        accepted = []
        for i, c in enumerate(candidates):
            if c.line1.length == 0 or c.line2.length == 0:
                logger.warning("Detected candidate %d skipped: degenerate axis", i)
                continue
            if not lines_intersect(c.line1, c.line2).intersects:
                logger.warning("Detected candidate %d skipped: axes do not intersect", i)
                continue
            accepted.append(Blob.normalized(c.line1, c.line2, detected=True))
        self._blobs = [b for b in self._blobs if not b.detected] + accepted
        logger.info("Accepted %d detected blob(s)", len(accepted))
        return [b.copy() for b in accepted]

    def merge_detector_results(self, detector, image):
        return self.replace_detected_blobs(detector.detect(image))

    # ------------------------------------------------------------ 内部
    def _short_axis_end(self, pointer):
        if not self.snap_perpendicular:
            return Point(pointer.x, pointer.y)
        return perpendicular_endpoint(self._long_axis.start, self._long_axis.end,
                                      self._pending_line.start, pointer)

    def _device_to_image(self, x, y):
        if self.to_image_space is None:
            raise RuntimeError("session has no coordinate transform")
        return self.to_image_space(x, y)
