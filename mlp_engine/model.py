'''
Name: MLP Engine
Topic: back-propagation
Author: CHEN, KE-RONG
Date: 2025/07/02
'''
import logging

import numpy as np

from .activations import SIGMOID
from .config import is_int, is_real
from .errors import InvalidConfiguration, NumericDegeneracy, ShapeMismatch
from .layers import ProcessLayer, TerminalLayer
from .matrix import Matrix, as_rng

logger = logging.getLogger(__name__)


class Network:
    """
    由 ProcessLayer -> ProcessLayer -> ... -> TerminalLayer 組成的網路。
    層以有序列表的方式由 Network 擁有。
    """
    def __init__(self, widths, rng=None):
        """
        初始化網路。

        參數:
            widths (list): [input_width, hidden_1, ..., output_width]，至少兩個元素。
            rng: np.random.Generator 或 seed，用於權重初始化。None 表示不固定。
        """
        widths = list(widths)
        if len(widths) < 2:
            raise InvalidConfiguration(f"層寬度列表至少需要 2 個元素，收到 {widths}")
        # 不截斷 2.7 之類的值
        if any(not is_int(w) or w <= 0 for w in widths):
            raise ShapeMismatch(f"層寬度必須為正整數，收到 {widths}")
        widths = [int(w) for w in widths]

        rng = as_rng(rng)
        self.widths = widths
        self.layers = [
            ProcessLayer(input_width, output_width, rng)
            for input_width, output_width in zip(widths[:-1], widths[1:])
        ]
        self.terminal = TerminalLayer(widths[-1])
        logger.debug("建立網路: %s", " -> ".join(str(w) for w in widths))

    @classmethod
    def from_config(cls, config):
        """依 NetworkConfig 建立網路。"""
        config.validate()
        return cls(config.widths, rng=config.seed)

    @property
    def input_width(self):
        return self.widths[0]

    @property
    def output_width(self):
        return self.widths[-1]

    def predict(self, inputs, activation=SIGMOID):
        """
        使用目前的權重進行預測，不修改任何狀態。

        參數:
            inputs (list | np.array): 長度為 input_width 的向量。
            activation (Activation): 活化函數。

        返回:
            np.array: 長度為 output_width 的輸出向量。
        """
        feed = self._as_column(inputs, self.input_width, "input")
        for layer in self.layers:
            feed = layer.activate(feed, activation)
        outputs = self.terminal.reshape(feed)
        _check_finite(outputs, "predict 輸出")
        return outputs

    def step(self, inputs, targets, learning_rate, activation=SIGMOID):
        """
        對單一樣本執行一次 feed_forward 緊接著 back_propagate。
        所有層的更新都先算好並確認沒有 NaN / Inf，才一起寫入。

        返回:
            np.array: 這次前向傳播的輸出 (更新前)。
        """
        feed = self._as_column(inputs, self.input_width, "input")
        expected = self._as_column(targets, self.output_width, "target")

        try:
            for layer in self.layers:
                feed = layer.feed_forward(feed, activation)
            outputs = self.terminal.feed_forward(feed, activation)
            _check_finite(outputs, "網路輸出")

            props = self.terminal.back_propagate(
                learning_rate, outputs, expected.flatten(), activation
            )
            _check_finite(props.error.flatten(), "誤差訊號")
            _check_finite(props.grad.flatten(), "梯度")

            updates = []
            for index in reversed(range(len(self.layers))):
                update = self.layers[index].compute_update(learning_rate, props, activation)
                _check_finite(update.weights.flatten(), f"第 {index} 層更新後的權重")
                _check_finite(update.biases.flatten(), f"第 {index} 層更新後的偏置")
                props = update.upstream
                # 第一層傳回的訊號不會被使用
                if index > 0:
                    _check_finite(props.error.flatten(), f"第 {index} 層傳回的誤差訊號")
                    _check_finite(props.grad.flatten(), f"第 {index} 層傳回的梯度")
                updates.append((self.layers[index], update))
        except Exception:
            self._reset()
            raise

        for layer, update in updates:
            layer.commit(update)
        return outputs

    def train_iter(self, learning_rate, inputs, targets, epochs, activation=SIGMOID):
        """
        逐週期訓練的產生器版本，每完成一個週期就 yield 週期編號 (從 1 開始)。
        呼叫者可以隨時停止迭代。參數在呼叫時就會檢查，不等到第一次迭代。
        """
        if not is_real(learning_rate) or not learning_rate > 0:
            raise InvalidConfiguration(f"learning_rate 必須為正數，收到 {learning_rate!r}")
        if not is_int(epochs) or epochs < 0:
            raise InvalidConfiguration(f"epochs 必須為非負整數，收到 {epochs!r}")
        if len(inputs) != len(targets):
            raise InvalidConfiguration(
                f"inputs 與 targets 數量不同: {len(inputs)} vs {len(targets)}"
            )

        # 先驗證所有樣本的形狀，避免訓練到一半才失敗
        samples = [
            (
                self._as_column(x, self.input_width, "input").flatten(),
                self._as_column(y, self.output_width, "target").flatten(),
            )
            for x, y in zip(inputs, targets)
        ]
        return self._run_epochs(learning_rate, samples, epochs, activation)

    def _run_epochs(self, learning_rate, samples, epochs, activation):
        for epoch in range(1, epochs + 1):
            for x, y in samples:
                self.step(x, y, learning_rate, activation)
            yield epoch

    def train(self, learning_rate, inputs, targets, epochs, activation=SIGMOID):
        """
        線上 (逐樣本) 隨機梯度下降，依給定順序，不打亂、不分批。
        """
        for _ in self.train_iter(learning_rate, inputs, targets, epochs, activation):
            pass

    def _reset(self):
        for layer in self.layers:
            layer.reset()
        self.terminal.reset()

    @staticmethod
    def _as_column(values, width, label):
        array = np.asarray(values, dtype=np.float64)
        if array.ndim != 1 or array.shape[0] != width:
            raise ShapeMismatch(f"{label} 必須是長度為 {width} 的向量，收到 shape={array.shape}")
        return Matrix.column(array)

    def __repr__(self):
        return f"Network({self.widths})"


def _check_finite(values, label):
    if not np.all(np.isfinite(values)):
        raise NumericDegeneracy(f"{label} 出現 NaN 或 Inf: {values}")
