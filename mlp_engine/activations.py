'''
Name: MLP Engine
Topic: back-propagation
Author: CHEN, KE-RONG
Date: 2025/07/02
'''
from dataclasses import dataclass
from typing import Callable

import numpy as np

from .errors import InvalidConfiguration


@dataclass(frozen=True)
class Activation:
    """
    活化函數與其導數的組合。

    注意: derivative 的輸入是「已經過 forward 的輸出 y」，而不是活化前的 x，
    也就是以 y 表示的 dy/dx。只有導數能單純由輸出表示的函數 (例如 sigmoid:
    y * (1 - y)) 才適用。像 ReLU 這類需要活化前數值的函數放進來結果會是錯的。
    這裡不做任何一致性檢查，由呼叫者負責。
    """
    forward: Callable[[float], float]
    derivative: Callable[[float], float]
    name: str = "custom"


def sigmoid(x):
    # np.exp 溢位時回傳 inf 而不是丟出例外
    return 1.0 / (1.0 + np.exp(-x))


def sigmoid_derivative(y):
    return y * (1.0 - y)


SIGMOID = Activation(forward=sigmoid, derivative=sigmoid_derivative, name="sigmoid")

ACTIVATIONS = {
    'sigmoid': SIGMOID,
}


def get_activation(name):
    """依名稱取得內建的活化函數。"""
    try:
        return ACTIVATIONS[name.lower()]
    except (KeyError, AttributeError):
        raise InvalidConfiguration(
            f"不支援的活化函數: {name!r} (可用: {', '.join(sorted(ACTIVATIONS))})"
        ) from None
