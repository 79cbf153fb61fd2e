"""
DataFrame 列映射

把 DataFrame 的每一列視為來源記錄（named tuple），映射到由 factory 建立的新目標記錄。

缺失值 (None、NaN、pd.NA、NaT) 視為不存在，對應欄位保留目標的預設值。
numpy 數值欄位逐格取出 numpy 純量 (np.int32、np.float32...)，寬度與 dtype 一致；
其他欄位 (object、extension、datetime) 依 Series 逐值取出。
非合法識別字的欄位名稱會被改名為 _0、_1...，因此不會匹配到任何目標欄位。

Example:
    >>> df = pd.DataFrame({'ID': ['1,234', '56'], 'Balance': [123.345, None]})
    >>> rows = map_rows(df, To)
    >>> rows[0]
    To(ID=1234, Balance='123.345')
    >>> rows[1]
    To(ID=56, Balance='')
"""

import time
from collections import namedtuple
from typing import Any, Callable, Iterable, List, TypeVar

import numpy as np
import pandas as pd

from ...utils.logging import get_structured_logger
from .field_mapper import FieldMapper

T = TypeVar("T")

slogger = get_structured_logger('mapper.frame')

# bool、有號/無號整數、浮點數
_NUMPY_SCALAR_KINDS = "biuf"


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if pd.api.types.is_scalar(value):
        return bool(pd.isna(value))
    return False


def _column_values(series: pd.Series) -> Iterable[Any]:
    """numpy 數值欄位返回 ndarray（保留純量寬度），其餘返回 Series 本身"""
    dtype = series.dtype
    if isinstance(dtype, np.dtype) and dtype.kind in _NUMPY_SCALAR_KINDS:
        return series.to_numpy()
    return series


def iter_row_records(df: pd.DataFrame):
    """
    逐列產生 named tuple 記錄，缺失值換成 None

    Args:
        df: 來源 DataFrame

    Yields:
        NamedTuple: 每列一筆記錄
    """
    row_type = namedtuple("Row", [str(column) for column in df.columns], rename=True)

    if len(df.columns) == 0:
        for _ in range(len(df)):
            yield row_type()
        return

    columns = [_column_values(df.iloc[:, position]) for position in range(len(df.columns))]
    for values in zip(*columns):
        yield row_type._make(None if _is_missing(value) else value for value in values)


def map_rows(
    df: pd.DataFrame,
    factory: Callable[[], T],
    mapper: FieldMapper = None
) -> List[T]:
    """
    將 DataFrame 每一列映射為目標記錄

    Args:
        df: 來源 DataFrame
        factory: 無參數的目標記錄建構函數（通常是 dataclass 類別本身）
        mapper: 自訂 FieldMapper；預設每次呼叫建立新的

    Returns:
        List[T]: 與列順序相同的目標記錄
    """
    mapper = mapper or FieldMapper(trace_skipped=False)
    start_time = time.perf_counter()
    slogger.log_operation_start("map_rows", rows=len(df), columns=len(df.columns))

    records: List[T] = []
    for row in iter_row_records(df):
        destination = factory()
        mapper.map_fields(row, destination)
        records.append(destination)

    slogger.log_operation_end(
        "map_rows",
        rows=len(records),
        duration=f"{time.perf_counter() - start_time:.3f}s"
    )
    return records
