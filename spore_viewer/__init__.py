"""
Spore Viewer - 显微图片孢子长短轴测量工具
"""

from .calibration import Calibration, CalibrationRegistry, parse_calibrations, pixels_per_micrometer
from .errors import (DuplicateNameError, MalformedImportError, SporeViewerError,
                     StorageFailure, ValidationRejection)
from .geometry import (Blob, Intersection, Line, Point, distance, is_between_perpendiculars,
                       perpendicular_endpoint, segment_intersection)
from .session import CalibrationRequest, ClickOutcome, MeasurementSession, Phase
from .statistics import BlobStatistics, compute_statistics
from .storage import JsonFileStore, MemoryStore, Preferences
from .transform import ViewTransform

__version__ = "1.0.0"
