"""
Field Mapper 自定義異常模組

欄位轉換失敗不會拋出異常（保留目標欄位原值）；
這裡的異常只用於呼叫端違反介面約定的情況，例如傳入的不是記錄實例。
"""

from typing import Any


class FieldMapperError(Exception):
    """Field Mapper 基礎異常類"""
    pass


class InvalidRecordError(FieldMapperError, TypeError):
    """
    傳入的物件不是可映射的記錄

    Attributes:
        record: 傳入的物件
        role: 'source' 或 'destination'
        message: 錯誤訊息
    """

    def __init__(self, record: Any, role: str = "record", message: str = None):
        self.record = record
        self.role = role
        self.message = message or (
            f"{role} 必須是記錄實例 (dataclass、named tuple 或具屬性的物件)，"
            f"實際型別: {type(record).__name__}"
        )
        super().__init__(self.message)
