"""
错误类型定义
几何校验失败、标定重名、导入格式错误、存储失败均可在交互层恢复。
"""


class SporeViewerError(Exception):
    """所有错误的基类"""


class ValidationRejection(SporeViewerError):
    """点击未通过几何校验 (垂线带 / 相交检查)，状态不变。"""

    def __init__(self, reason):
        super().__init__(reason)
        self.reason = reason


class DuplicateNameError(SporeViewerError):
    """标定名称已存在，需要用户确认覆盖或重新输入。"""

    def __init__(self, name):
        super().__init__(f"calibration '{name}' already exists")
        self.name = name


class MalformedImportError(SporeViewerError):
    """导入文件不是预期格式的 JSON 数组，导入被中止。"""


class StorageFailure(SporeViewerError):
    """持久化读写失败；内存中的状态仍然有效。"""
