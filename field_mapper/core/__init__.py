"""
核心模組

- types: 型別種類解析與 nullable 包裝
- mapping: 記錄描述器、值轉換與欄位映射
"""
