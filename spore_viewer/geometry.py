"""
几何内核与测量数据结构
点、线段、Blob (两条近似垂直的长短轴) 以及距离、线段相交、垂线带判断等纯函数。
所有坐标均为图像坐标 (不是屏幕像素)。
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional


# ---------------------------------------------------------------------------
# 数据结构
# ---------------------------------------------------------------------------

class Point:
    """一次被接受的点击 (图像坐标)"""
    __slots__ = ("x", "y", "index")

    def __init__(self, x, y, index=0):
        self.x = float(x)
        self.y = float(y)
        self.index = index

    def __eq__(self, other):
        if not isinstance(other, Point):
            return NotImplemented
        return (self.x, self.y, self.index) == (other.x, other.y, other.index)

    def __repr__(self):
        return f"Point({self.x:g}, {self.y:g}, index={self.index})"


class Line:
    """有向线段。第二个端点在预览阶段会跟随鼠标移动。"""
    __slots__ = ("x1", "y1", "x2", "y2")

    def __init__(self, x1, y1, x2, y2):
        self.x1, self.y1 = float(x1), float(y1)
        self.x2, self.y2 = float(x2), float(y2)

    @property
    def start(self):
        return Point(self.x1, self.y1)

    @property
    def end(self):
        return Point(self.x2, self.y2)

    @property
    def length(self):
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)

    @property
    def mid_x(self):
        return (self.x1 + self.x2) / 2.0

    @property
    def mid_y(self):
        return (self.y1 + self.y2) / 2.0

    def set_end(self, x, y):
        self.x2, self.y2 = float(x), float(y)

    def copy(self):
        return Line(self.x1, self.y1, self.x2, self.y2)

    def __eq__(self, other):
        if not isinstance(other, Line):
            return NotImplemented
        return (self.x1, self.y1, self.x2, self.y2) == (other.x1, other.y1, other.x2, other.y2)

    def __hash__(self):
        return hash((self.x1, self.y1, self.x2, self.y2))

    def __repr__(self):
        return f"Line(({self.x1:g}, {self.y1:g}) -> ({self.x2:g}, {self.y2:g}))"


@dataclass(frozen=True)
class Blob:
    """完成的一次测量: line1 为长轴, line2 为短轴。

    构造时复制两条线段，外部对传入 Line 的修改不会影响 Blob。
    """
    line1: Line
    line2: Line
    detected: bool = False

    def __post_init__(self):
        object.__setattr__(self, "line1", self.line1.copy())
        object.__setattr__(self, "line2", self.line2.copy())

    def copy(self):
        return Blob(self.line1, self.line2, self.detected)

    @classmethod
    def normalized(cls, first, second, detected=False):
        """按长度排序两条轴线，保证 line1 不短于 line2。"""
        if distance(second.start, second.end) > distance(first.start, first.end):
            first, second = second, first
        return cls(first, second, detected)

    @property
    def axis_a(self):
        return self.line1.length

    @property
    def axis_b(self):
        return self.line2.length

    def contains(self, point):
        """点是否同时落在两条轴线的垂线带内。"""
        return (is_between_perpendiculars(point, self.line1.start, self.line1.end)
                and is_between_perpendiculars(point, self.line2.start, self.line2.end))


class Intersection(NamedTuple):
    intersects: bool
    point: Optional[Point]


_NO_INTERSECTION = Intersection(False, None)


# ---------------------------------------------------------------------------
# 几何函数
# ---------------------------------------------------------------------------

def distance(a, b):
    """两点间欧氏距离"""
    return math.hypot(b.x - a.x, b.y - a.y)


def orientation(p, q, r):
    """三点方向: 0 共线, 1 顺时针, -1 逆时针。

    共线判断使用精确的 == 0，与下游校验保持一致。
    """
    val = (q.y - p.y) * (r.x - q.x) - (q.x - p.x) * (r.y - q.y)
    if val == 0:
        return 0
    return 1 if val > 0 else -1


def on_segment(p, a, b):
    """点 p 是否在线段 ab 的外接矩形内 (含边界)。"""
    return (min(a.x, b.x) <= p.x <= max(a.x, b.x)
            and min(a.y, b.y) <= p.y <= max(a.y, b.y))


def segment_intersection(p1, q1, p2, q2):
    """判断线段 p1q1 与 p2q2 是否相交，并返回交点。

    一般情况下用参数方程求交点 (t, u 均在 [0, 1] 内)。分母为 0 时视为平行，
    即使两线段共线重叠也返回不相交；共线端点接触的情况走后面的 on_segment 分支。
    """
    o1 = orientation(p1, q1, p2)
    o2 = orientation(p1, q1, q2)
    o3 = orientation(p2, q2, p1)
    o4 = orientation(p2, q2, q1)

    if o1 != o2 and o3 != o4:
        denominator = (p1.x - q1.x) * (p2.y - q2.y) - (p1.y - q1.y) * (p2.x - q2.x)
        if denominator == 0:
            return _NO_INTERSECTION
        t = ((p1.x - p2.x) * (p2.y - q2.y) - (p1.y - p2.y) * (p2.x - q2.x)) / denominator
        u = -((p1.x - q1.x) * (p1.y - p2.y) - (p1.y - q1.y) * (p1.x - p2.x)) / denominator
        if 0 <= t <= 1 and 0 <= u <= 1:
            return Intersection(True, Point(p1.x + t * (q1.x - p1.x),
                                            p1.y + t * (q1.y - p1.y)))
        return _NO_INTERSECTION

    # 共线特殊情况
    if o1 == 0 and on_segment(p2, p1, q1):
        return Intersection(True, Point(p2.x, p2.y))
    if o2 == 0 and on_segment(q2, p1, q1):
        return Intersection(True, Point(q2.x, q2.y))
    if o3 == 0 and on_segment(p1, p2, q2):
        return Intersection(True, Point(p1.x, p1.y))
    if o4 == 0 and on_segment(q1, p2, q2):
        return Intersection(True, Point(q1.x, q1.y))

    return _NO_INTERSECTION


def lines_intersect(a, b):
    return segment_intersection(a.start, a.end, b.start, b.end)


def is_between_perpendiculars(point, seg_start, seg_end):
    """点在线段两端垂线之间 (垂足落在线段范围内) 时返回 True。"""
    if seg_start.x == seg_end.x and seg_start.y == seg_end.y:
        return True

    vx = seg_end.x - seg_start.x
    vy = seg_end.y - seg_start.y
    dot1 = vx * (point.x - seg_start.x) + vy * (point.y - seg_start.y)
    dot2 = vx * (point.x - seg_end.x) + vy * (point.y - seg_end.y)
    return (dot1 <= 0 and dot2 >= 0) or (dot1 >= 0 and dot2 <= 0)


def perpendicular_endpoint(axis_start, axis_end, anchor, pointer):
    """以 anchor 为起点构造垂直于轴线的端点。

    长度取 anchor 到鼠标的距离，方向由轴线方向与 (pointer - anchor) 的叉积符号决定，
    即落在鼠标所在的一侧。
    """
    dx = axis_end.x - axis_start.x
    dy = axis_end.y - axis_start.y
    axis_len = math.hypot(dx, dy)
    if axis_len == 0:
        return Point(pointer.x, pointer.y)

    nx, ny = -dy / axis_len, dx / axis_len
    vx, vy = pointer.x - anchor.x, pointer.y - anchor.y
    magnitude = math.hypot(vx, vy)
    cross = dx * vy - dy * vx
    sign = -1.0 if cross < 0 else 1.0
    return Point(anchor.x + sign * magnitude * nx, anchor.y + sign * magnitude * ny)
