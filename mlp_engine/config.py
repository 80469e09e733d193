'''
Name: MLP Engine
Topic: back-propagation
Author: CHEN, KE-RONG
Date: 2025/07/02
'''
import numbers
from dataclasses import asdict, dataclass, field, fields
from typing import List, Optional

import yaml

from .activations import get_activation
from .errors import InvalidConfiguration


@dataclass
class NetworkConfig:
    """
    網路結構與訓練參數。

    YAML 範例:
        widths: [2, 3, 1]
        learning_rate: 0.5
        epochs: 10000
        activation: sigmoid
        seed: 1
    """
    widths: List[int] = field(default_factory=list)
    learning_rate: float = 0.5
    epochs: int = 10000
    activation: str = 'sigmoid'
    seed: Optional[int] = None
    log_interval: int = 1000

    def validate(self):
        """檢查設定值的型別與範圍，不合法時丟出 InvalidConfiguration。"""
        if not isinstance(self.widths, (list, tuple)) or not all(is_int(w) for w in self.widths):
            raise InvalidConfiguration(f"widths 必須是整數列表，收到 {self.widths!r}")
        if len(self.widths) < 2:
            raise InvalidConfiguration(f"widths 至少需要 2 個元素，收到 {self.widths}")
        if any(w <= 0 for w in self.widths):
            raise InvalidConfiguration(f"widths 必須都是正整數，收到 {self.widths}")
        if not is_real(self.learning_rate) or not self.learning_rate > 0:
            raise InvalidConfiguration(f"learning_rate 必須為正數，收到 {self.learning_rate!r}")
        if not is_int(self.epochs) or self.epochs < 0:
            raise InvalidConfiguration(f"epochs 必須為非負整數，收到 {self.epochs!r}")
        if not is_int(self.log_interval) or self.log_interval <= 0:
            raise InvalidConfiguration(f"log_interval 必須為正整數，收到 {self.log_interval!r}")
        if self.seed is not None and not is_int(self.seed):
            raise InvalidConfiguration(f"seed 必須為整數或 None，收到 {self.seed!r}")
        get_activation(self.activation)
        self.widths = list(self.widths)
        return self

    def get_activation(self):
        return get_activation(self.activation)

    @classmethod
    def from_dict(cls, mapping):
        if not isinstance(mapping, dict):
            raise InvalidConfiguration(f"設定內容必須是 mapping，收到 {type(mapping).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise InvalidConfiguration(f"未知的設定欄位: {', '.join(unknown)}")
        config = cls(**mapping)
        return config.validate()

    @classmethod
    def from_yaml(cls, path):
        """從 YAML 檔讀取設定。"""
        with open(path, 'r') as f:
            try:
                mapping = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise InvalidConfiguration(f"無法解析設定檔 {path}: {e}") from e
        return cls.from_dict(mapping or {})

    def to_dict(self):
        return asdict(self)


def is_int(value):
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def is_real(value):
    return isinstance(value, numbers.Real) and not isinstance(value, bool)
