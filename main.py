"""
範例: 將 From 記錄映射到 To 記錄並輸出結果
"""

from dataclasses import dataclass

from field_mapper import FieldMapper, get_logger


logger = get_logger('main')


@dataclass
class From:
    ID: str
    Balance: float


@dataclass
class To:
    ID: int = 0
    Balance: str = ""


def main() -> To:
    source = From(ID="1234", Balance=123.345)
    destination = To()

    mapper = FieldMapper()
    mapper.map_fields(source, destination)
    logger.info(f"映射摘要: {mapper.get_mapping_summary()}")

    print("Mapped Struct :", destination)
    return destination


if __name__ == '__main__':
    main()
