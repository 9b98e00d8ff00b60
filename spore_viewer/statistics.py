"""
统计与导出
对所有 Blob 的长轴 (A) / 短轴 (B) 计算计数、均值、最值、范围和总体标准差，
可选先除以标定比值 (px/μm) 换算为微米。
"""

import math
from dataclasses import dataclass

import numpy as np
from scipy.stats import norm

from .strings import translate


# ---------------------------------------------------------------------------
# 单位转换 (以 μm 为基准)
# ---------------------------------------------------------------------------

UNIT_TO_UM = {
    "nm": 0.001,
    "μm": 1.0,
    "mm": 1_000.0,
}

SUPPORTED_UNITS = ["nm", "μm", "mm"]


def convert_length(value, from_unit, to_unit):
    """在两个单位之间转换长度值。"""
    if from_unit == to_unit:
        return value
    return value * UNIT_TO_UM[from_unit] / UNIT_TO_UM[to_unit]


# ---------------------------------------------------------------------------
# 统计
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BlobStatistics:
    """空集合时 min=+inf, max=-inf, 其余为 0，调用方需用 is_empty 判断。"""
    count: int
    mean_a: float
    mean_b: float
    min_a: float
    max_a: float
    min_b: float
    max_b: float
    range_a: float
    range_b: float
    stddev_a: float
    stddev_b: float

    @property
    def is_empty(self):
        return self.count == 0


EMPTY_STATISTICS = BlobStatistics(
    count=0, mean_a=0.0, mean_b=0.0,
    min_a=math.inf, max_a=-math.inf, min_b=math.inf, max_b=-math.inf,
    range_a=0.0, range_b=0.0, stddev_a=0.0, stddev_b=0.0,
)


def axis_lengths(blobs, ratio=1.0):
    """返回 (长轴数组, 短轴数组)，已除以 ratio。"""
    if not ratio > 0:
        raise ValueError("calibration ratio must be positive")
    a = np.array([b.line1.length for b in blobs], dtype=np.float64) / ratio
    b = np.array([b.line2.length for b in blobs], dtype=np.float64) / ratio
    return a, b


def compute_statistics(blobs, ratio=1.0):
    a, b = axis_lengths(blobs, ratio)
    n = len(a)
    if n == 0:
        return EMPTY_STATISTICS
    return BlobStatistics(
        count=n,
        mean_a=float(np.mean(a)), mean_b=float(np.mean(b)),
        min_a=float(a.min()), max_a=float(a.max()),
        min_b=float(b.min()), max_b=float(b.max()),
        range_a=float(a.max() - a.min()), range_b=float(b.max() - b.min()),
        stddev_a=float(np.std(a)), stddev_b=float(np.std(b)),
    )


# ---------------------------------------------------------------------------
# CSV 导出
# ---------------------------------------------------------------------------

def write_blob_csv(writer, blobs, calibration=None, lang="zh", display_unit="μm"):
    """将 Blob 数据和统计写入 csv writer。未标定时长度以像素输出。"""

    def _t(key, **kwargs):
        return translate(key, lang, **kwargs)

    if calibration is not None:
        ratio = calibration.value
        unit = display_unit

        def _conv(px):
            return convert_length(px / ratio, "μm", display_unit)
    else:
        unit = "px"

        def _conv(px):
            return px

    writer.writerow(["#", _t("csv_axis_a", u=unit), _t("csv_axis_b", u=unit),
                     _t("csv_axis_a_px"), _t("csv_axis_b_px"),
                     _t("csv_aspect"), _t("csv_source")])

    for i, blob in enumerate(blobs, 1):
        a_px, b_px = blob.axis_a, blob.axis_b
        aspect = a_px / b_px if b_px > 0 else 0.0
        source = _t("csv_detected") if blob.detected else _t("csv_manual")
        writer.writerow([i, f"{_conv(a_px):.4f}", f"{_conv(b_px):.4f}",
                         f"{a_px:.4f}", f"{b_px:.4f}", f"{aspect:.4f}", source])

    stats = compute_statistics(blobs)
    if stats.is_empty:
        return

    a_vals = np.array([_conv(b.axis_a) for b in blobs])
    b_vals = np.array([_conv(b.axis_b) for b in blobs])

    writer.writerow([])
    writer.writerow([_t("csv_stat"), _t("axis_a"), _t("axis_b")])
    writer.writerow([_t("csv_count"), stats.count, stats.count])
    writer.writerow([_t("csv_mean"), f"{np.mean(a_vals):.4f}", f"{np.mean(b_vals):.4f}"])
    writer.writerow([_t("csv_std"), f"{np.std(a_vals):.4f}", f"{np.std(b_vals):.4f}"])
    writer.writerow([_t("csv_min"), f"{a_vals.min():.4f}", f"{b_vals.min():.4f}"])
    writer.writerow([_t("csv_max"), f"{a_vals.max():.4f}", f"{b_vals.max():.4f}"])
    writer.writerow([_t("csv_range"), f"{np.ptp(a_vals):.4f}", f"{np.ptp(b_vals):.4f}"])
    if calibration is not None:
        writer.writerow([_t("csv_calibration"), calibration.name, f"{calibration.value:.3f}"])

    # 高斯拟合
    for axis_key, vals in (("axis_a", a_vals), ("axis_b", b_vals)):
        mean, std = float(np.mean(vals)), float(np.std(vals))
        if len(vals) < 2 or std <= 0:
            continue
        writer.writerow([])
        writer.writerow([_t("csv_gauss_title", axis=_t(axis_key))])
        writer.writerow([_t("csv_gauss_mu"), f"{mean:.4f}"])
        writer.writerow([_t("csv_gauss_sigma"), f"{std:.4f}"])
        x_fit = np.linspace(vals.min() - std, vals.max() + std, 100)
        y_fit = norm.pdf(x_fit, mean, std)
        writer.writerow([_t("csv_gauss_x", u=unit), _t("csv_gauss_y")])
        for xv, yv in zip(x_fit, y_fit):
            writer.writerow([f"{xv:.4f}", f"{yv:.6f}"])
