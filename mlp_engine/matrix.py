'''
Name: MLP Engine
Topic: back-propagation
Author: CHEN, KE-RONG
Date: 2025/07/02
'''
import numpy as np

from .errors import ShapeMismatch


def as_rng(rng=None):
    """
    將 None / seed / Generator 統一轉成 np.random.Generator。
    """
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


class Matrix:
    """
    固定維度的稠密矩陣 (row-major)。
    所有運算都回傳新的 Matrix，不會修改自己。
    """
    def __init__(self, data):
        array = np.array(data, dtype=np.float64)
        if array.ndim != 2:
            raise ShapeMismatch(f"Matrix 需要二維資料，收到 ndim={array.ndim}")
        # 唯讀，確保是 value type
        array.flags.writeable = False
        self._data = array

    # --- 建構 ---
    @classmethod
    def zeros(cls, rows, cols):
        """全零矩陣。"""
        _check_dims(rows, cols)
        return cls(np.zeros((rows, cols)))

    @classmethod
    def random(cls, rows, cols, rng=None):
        """
        每個元素獨立取自 [-1, 1] 的均勻分佈。

        參數:
            rows (int): 列數。
            cols (int): 行數。
            rng: np.random.Generator、seed 或 None。
        """
        _check_dims(rows, cols)
        return cls(as_rng(rng).uniform(-1.0, 1.0, size=(rows, cols)))

    @classmethod
    def from_data(cls, data):
        """包裝呼叫者提供的資料，形狀與輸入完全相同。"""
        try:
            return cls(data)
        except ValueError as e:
            if isinstance(e, ShapeMismatch):
                raise
            # 不規則 (ragged) 的巢狀列表
            raise ShapeMismatch(f"無法建立矩陣: {e}") from e

    @classmethod
    def column(cls, values):
        """由一維序列建立 n x 1 的行向量。"""
        array = np.asarray(values, dtype=np.float64)
        if array.ndim != 1:
            raise ShapeMismatch(f"行向量需要一維資料，收到 shape={array.shape}")
        return cls(array.reshape(-1, 1))

    # --- 屬性 ---
    @property
    def rows(self):
        return self._data.shape[0]

    @property
    def cols(self):
        return self._data.shape[1]

    @property
    def shape(self):
        return self._data.shape

    @property
    def data(self):
        """唯讀的 numpy 陣列。"""
        return self._data

    # --- 線性代數 ---
    def multiply(self, other):
        """
        矩陣乘法: (m x k) · (k x n) -> (m x n)。
        """
        if self.cols != other.rows:
            raise ShapeMismatch(
                f"矩陣乘法維度不符: {self.shape} · {other.shape}"
            )
        return Matrix(self._data @ other._data)

    def add(self, other):
        self._check_same_shape(other, "add")
        return Matrix(self._data + other._data)

    def subtract(self, other):
        self._check_same_shape(other, "subtract")
        return Matrix(self._data - other._data)

    def dot_multiply(self, other):
        """逐元素相乘 (Hadamard product)。"""
        self._check_same_shape(other, "dot_multiply")
        return Matrix(self._data * other._data)

    def scale(self, factor):
        return Matrix(self._data * factor)

    def map(self, function):
        """
        對每個元素套用純量函數，形狀不變。
        """
        mapped = np.vectorize(function, otypes=[np.float64])(self._data)
        return Matrix(mapped.reshape(self.shape))

    def transpose(self):
        return Matrix(self._data.T)

    # --- 輸出 ---
    def flatten(self):
        """回傳一維的 numpy 複本 (row-major)。"""
        return self._data.flatten()

    def to_list(self):
        return self._data.tolist()

    def allclose(self, other, atol=1e-9):
        return self.shape == other.shape and np.allclose(self._data, other._data, atol=atol)

    def _check_same_shape(self, other, op):
        if self.shape != other.shape:
            raise ShapeMismatch(f"{op} 需要相同形狀: {self.shape} vs {other.shape}")

    def __eq__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self._data, other._data)

    __hash__ = None

    def __repr__(self):
        return f"Matrix({self.rows}x{self.cols}, {self.to_list()})"


def _check_dims(rows, cols):
    if rows <= 0 or cols <= 0:
        raise ShapeMismatch(f"矩陣維度必須為正整數，收到 ({rows}, {cols})")
