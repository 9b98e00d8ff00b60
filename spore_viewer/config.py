"""
常量定义与日志配置
"""
import logging
import os

# ==================== 存储 ====================
SETTINGS_ENV_VAR = "SPORE_VIEWER_SETTINGS"
DEFAULT_SETTINGS_PATH = os.path.join(os.path.expanduser("~"), ".spore_viewer", "settings.json")

KEY_CALIBRATIONS = "calibrations"
KEY_ACTIVE_CALIBRATION = "activeCalibration"
KEY_PREFERENCES = "preferences"

# ==================== 画布 ====================
CANVAS_WIDTH = 800
CANVAS_HEIGHT = 600
ZOOM_STEP = 1.1                  # 每格滚轮的缩放倍数
ZOOM_MIN = 0.02
ZOOM_MAX = 50.0
DRAG_THRESHOLD_PX = 3            # 小于该位移的按下/释放视为点击

# ==================== 颜色 ====================
DEFAULT_BACKGROUND = "#222222"
DEFAULT_SCALE_BAR_COLOR = "#FFFFFF"
BLOB_COLOR = "purple"
PENDING_LINE_COLOR = "blue"
LONG_AXIS_POINT_COLOR = "red"
SHORT_AXIS_POINT_COLOR = "green"
CALIBRATION_POINT_COLOR = "yellow"
LABEL_COLOR = "#FFFF00"

# ==================== 日志 ====================
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def settings_path():
    """配置文件路径，可通过环境变量覆盖。"""
    return os.environ.get(SETTINGS_ENV_VAR) or DEFAULT_SETTINGS_PATH


def setup_logging(level=logging.INFO):
    logging.basicConfig(level=level, format=LOG_FORMAT)
