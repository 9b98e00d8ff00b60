"""
视图变换: 图像坐标 <-> 画布坐标
矩阵约定与 canvas/SVG 一致:  [a c e; b d f; 0 0 1]
"""

import numpy as np

from .geometry import Point


class ViewTransform:
    """仿射变换值对象。所有操作返回新的对象，不修改自身。"""
    __slots__ = ("_m",)

    def __init__(self, a=1.0, b=0.0, c=0.0, d=1.0, e=0.0, f=0.0):
        self._m = np.array([[a, c, e],
                            [b, d, f],
                            [0.0, 0.0, 1.0]], dtype=np.float64)

    @classmethod
    def _from_matrix(cls, m):
        t = cls.__new__(cls)
        t._m = m
        return t

    @classmethod
    def identity(cls):
        return cls()

    @classmethod
    def fit(cls, image_w, image_h, canvas_w, canvas_h):
        """缩放到适应画布并居中。"""
        if image_w <= 0 or image_h <= 0:
            raise ValueError("image size must be positive")
        scale = min(canvas_w / image_w, canvas_h / image_h)
        return cls(scale, 0.0, 0.0, scale,
                   (canvas_w - image_w * scale) / 2.0,
                   (canvas_h - image_h * scale) / 2.0)

    # -- 属性 --
    @property
    def coefficients(self):
        m = self._m
        return (m[0, 0], m[1, 0], m[0, 1], m[1, 1], m[0, 2], m[1, 2])

    @property
    def zoom(self):
        """水平方向的缩放系数 (等比缩放时即缩放倍数)"""
        return float(np.hypot(self._m[0, 0], self._m[1, 0]))

    # -- 运算 --
    def apply(self, x, y):
        """图像坐标 -> 画布坐标"""
        v = self._m @ np.array([x, y, 1.0])
        return float(v[0]), float(v[1])

    def invert(self):
        if abs(np.linalg.det(self._m)) < 1e-12:
            raise ValueError("transform is not invertible")
        return ViewTransform._from_matrix(np.linalg.inv(self._m))

    def compose(self, other):
        """先应用 other，再应用 self。"""
        return ViewTransform._from_matrix(self._m @ other._m)

    def translate(self, dx, dy):
        return self.compose(ViewTransform(1.0, 0.0, 0.0, 1.0, dx, dy))

    def scale(self, sx, sy=None):
        if sy is None:
            sy = sx
        return self.compose(ViewTransform(sx, 0.0, 0.0, sy, 0.0, 0.0))

    def zoom_at(self, device_x, device_y, factor):
        """以画布上的某点为中心缩放，该点对应的图像位置保持不变。"""
        p = self.to_image_space(device_x, device_y)
        return self.translate(p.x, p.y).scale(factor).translate(-p.x, -p.y)

    def to_image_space(self, device_x, device_y):
        """画布坐标 -> 图像坐标"""
        x, y = self.invert().apply(device_x, device_y)
        return Point(x, y)

    def __eq__(self, other):
        if not isinstance(other, ViewTransform):
            return NotImplemented
        return bool(np.allclose(self._m, other._m))

    def __repr__(self):
        a, b, c, d, e, f = self.coefficients
        return f"ViewTransform({a:g}, {b:g}, {c:g}, {d:g}, {e:g}, {f:g})"
