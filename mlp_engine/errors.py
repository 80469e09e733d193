'''
Name: MLP Engine
Topic: back-propagation
Author: CHEN, KE-RONG
Date: 2025/07/02
'''

'''
Errors
ShapeMismatch(矩陣維度不符)
InvalidConfiguration(設定錯誤)
StaleState(前向/反向呼叫順序錯誤)
NumericDegeneracy(NaN / Inf)
'''


class NetworkError(Exception):
    """本套件所有錯誤的基礎類別。"""


class ShapeMismatch(NetworkError, ValueError):
    """
    矩陣運算的維度不相容，
    或輸入/目標向量的寬度與網路不符。
    """


class InvalidConfiguration(NetworkError, ValueError):
    """層寬度列表太短、inputs 與 targets 數量不同、或其他設定值不合法。"""


class StaleState(NetworkError, RuntimeError):
    """
    back_propagate 沒有對應的 feed_forward (或 feed_forward 連續呼叫兩次)。
    這是使用方式的錯誤，不是資料錯誤。
    """


class NumericDegeneracy(NetworkError, ArithmeticError):
    """輸出或誤差訊號出現 NaN / Inf。核心不做修正，只回報給呼叫者。"""
