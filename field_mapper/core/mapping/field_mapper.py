"""
欄位映射器 (Field Mapper)

依欄位名稱把來源記錄的每個欄位轉換後寫入目標記錄的同名欄位。

設計原則:
- 只依名稱匹配，不比較宣告型別
- 只存在於單側的欄位直接忽略
- 轉換失敗不報錯、不發 warning，目標欄位保留原值
- 不修改來源記錄

並行: 映射到不同的目標實例可平行執行；多個呼叫端同時寫入同一個目標實例時
結果未定義（後寫者勝），由呼叫端自行同步。FieldMapper 實例的統計屬性
也不是線程安全的，每個線程應使用自己的實例。

Example:
    >>> @dataclass
    ... class From:
    ...     ID: str
    ...     Balance: float
    >>> @dataclass
    ... class To:
    ...     ID: int = 0
    ...     Balance: str = ""
    >>> to = To()
    >>> map_fields(From(ID="1234", Balance=123.345), to)
    >>> to
    To(ID=1234, Balance='123.345')
"""

import logging
from typing import Any, Dict, List

from ...utils.config import config_manager
from ...utils.logging import get_logger
from .coercion import coerce
from .descriptor import RecordDescriptor


class FieldMapper:
    """
    欄位映射器

    Attributes:
        logger: 日誌器
        trace_skipped: 是否以 DEBUG 記錄被略過的欄位
        mapped_fields: 最近一次映射中有寫入的欄位
        skipped_fields: 最近一次映射中被略過的欄位及原因

    Example:
        >>> mapper = FieldMapper()
        >>> mapper.map_fields(source, destination)
        >>> mapper.get_mapping_summary()
        {'mapped': 2, 'skipped': 1, 'mapped_fields': [...], 'skipped_fields': {...}}
    """

    def __init__(self, logger: logging.Logger = None, trace_skipped: bool = None):
        """
        初始化 FieldMapper

        Args:
            logger: 外部日誌器
            trace_skipped: 覆寫 [mapper] trace_skipped 配置
        """
        self.logger = logger or get_logger('mapper')
        if trace_skipped is None:
            trace_skipped = config_manager.get_boolean('mapper', 'trace_skipped', True)
        self.trace_skipped = trace_skipped
        self.mapped_fields: List[str] = []
        self.skipped_fields: Dict[str, str] = {}

    def map_fields(self, source: Any, destination: Any) -> None:
        """
        依名稱映射欄位

        Args:
            source: 來源記錄實例
            destination: 目標記錄實例（會被就地修改）

        Raises:
            InvalidRecordError: source 或 destination 不是記錄實例
        """
        self.mapped_fields.clear()
        self.skipped_fields.clear()

        source_view = RecordDescriptor(source, role="source")
        destination_view = RecordDescriptor(destination, role="destination")

        for name in source_view.field_names:
            into_slot = destination_view.slot(name)
            if into_slot is None:
                self._skip(name, "目標無同名欄位")
                continue
            if not into_slot.settable:
                self._skip(name, "目標欄位不可寫入")
                continue

            from_slot = source_view.slot(name)
            value, exists = from_slot.read()
            if not exists or value is None:
                self._skip(name, "來源欄位無值")
                continue

            if coerce(value, into_slot, from_slot.declared):
                self.mapped_fields.append(name)
            else:
                self._skip(name, "無法轉換，保留原值")

    def _skip(self, name: str, reason: str) -> None:
        self.skipped_fields[name] = reason
        if self.trace_skipped:
            self.logger.debug(f"略過欄位 '{name}': {reason}")

    def get_mapping_summary(self) -> Dict[str, Any]:
        """
        取得最近一次映射的摘要

        Returns:
            dict: 寫入/略過的筆數與欄位明細
        """
        return {
            "mapped": len(self.mapped_fields),
            "skipped": len(self.skipped_fields),
            "mapped_fields": list(self.mapped_fields),
            "skipped_fields": dict(self.skipped_fields),
        }


def map_fields(source: Any, destination: Any) -> None:
    """
    依名稱把 source 的欄位轉換後寫入 destination 的同名欄位

    Args:
        source: 來源記錄實例
        destination: 目標記錄實例（會被就地修改）

    Raises:
        InvalidRecordError: source 或 destination 不是記錄實例
    """
    FieldMapper().map_fields(source, destination)
