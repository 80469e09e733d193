'''
Name: MLP Engine
Topic: back-propagation
Author: CHEN, KE-RONG
Date: 2025/07/02
'''
from collections import namedtuple

from .errors import ShapeMismatch, StaleState
from .matrix import Matrix

# 反向傳播時在層與層之間傳遞的 (誤差訊號, 輸出空間的梯度)，皆為行向量
BackProps = namedtuple('BackProps', ['error', 'grad'])

# ProcessLayer 算好但尚未寫入的參數更新
Update = namedtuple('Update', ['weights', 'biases', 'upstream'])


class Layer:
    """
    神經網路層的基礎類別。
    每一層在每個訓練樣本上都在「等待前向」與「等待反向」之間交替。
    """
    def __init__(self):
        self.awaiting_backward = False

    def feed_forward(self, feed, activation):
        """前向傳播"""
        raise NotImplementedError

    def back_propagate(self, learning_rate, *signal):
        """反向傳播"""
        raise NotImplementedError

    def _enter_forward(self):
        if self.awaiting_backward:
            raise StaleState(
                f"{self.__class__.__name__}: feed_forward 之後尚未執行 back_propagate"
            )
        self.awaiting_backward = True

    def _enter_backward(self):
        if not self.awaiting_backward:
            raise StaleState(
                f"{self.__class__.__name__}: back_propagate 之前沒有對應的 feed_forward"
            )

    def _leave_backward(self):
        self.awaiting_backward = False

    def reset(self):
        """丟棄未完成的前向狀態，回到等待前向。"""
        self.awaiting_backward = False


class ProcessLayer(Layer):
    """
    可訓練的全連接層。
    執行 y = f(Wx + b) 的運算，W 為 (output_width x input_width)。
    """
    def __init__(self, input_width, output_width, rng=None):
        super().__init__()
        self.input_width = input_width
        self.output_width = output_width
        # 先初始化權重，再初始化偏置
        self.weights = Matrix.random(output_width, input_width, rng)
        self.biases = Matrix.random(output_width, 1, rng)
        self.data = Matrix.zeros(input_width, 1)

    def activate(self, feed, activation):
        """
        純計算 f(Wx + b)，不寫入快取。predict 使用這個方法。
        """
        if feed.shape != (self.input_width, 1):
            raise ShapeMismatch(
                f"輸入必須是 ({self.input_width}, 1) 的行向量，收到 {feed.shape}"
            )
        return self.weights.multiply(feed).add(self.biases).map(activation.forward)

    def feed_forward(self, feed, activation):
        """
        執行前向傳播，並記住這次的輸入供 back_propagate 使用。

        參數:
            feed (Matrix): 輸入行向量 (input_width x 1)。
            activation (Activation): 活化函數。

        返回:
            Matrix: 活化後的輸出行向量 (output_width x 1)。
        """
        result = self.activate(feed, activation)
        self._enter_forward()
        self.data = feed
        return result

    def back_propagate(self, learning_rate, downstream, activation):
        """
        執行反向傳播並以梯度下降更新 W 與 b。

        參數:
            learning_rate (float): 學習率。
            downstream (BackProps): 下一層傳回的 (誤差, 梯度)，位於本層輸出的座標空間。
            activation (Activation): 活化函數。

        返回:
            BackProps: 交給上一層的 (誤差, 梯度)。
        """
        update = self.compute_update(learning_rate, downstream, activation)
        self.commit(update)
        return update.upstream

    def compute_update(self, learning_rate, downstream, activation):
        """
        計算新的 W、b 與要交給上一層的 BackProps，但不修改任何狀態。

        返回:
            Update: (weights, biases, upstream)。
        """
        self._enter_backward()
        error, grad = downstream
        if error.shape != (self.output_width, 1) or grad.shape != (self.output_width, 1):
            raise ShapeMismatch(
                f"誤差/梯度必須是 ({self.output_width}, 1)，收到 {error.shape} / {grad.shape}"
            )

        delta = grad.dot_multiply(error).scale(learning_rate)
        new_weights = self.weights.add(delta.multiply(self.data.transpose()))
        new_biases = self.biases.add(delta)

        # 鏈鎖律要用產生這次前向輸出的舊權重
        upstream = BackProps(
            self.weights.transpose().multiply(error),
            self.data.map(activation.derivative),
        )
        return Update(new_weights, new_biases, upstream)

    def commit(self, update):
        """寫入 compute_update 算出的參數，回到等待前向。"""
        self._enter_backward()
        self.weights = update.weights
        self.biases = update.biases
        self._leave_backward()


class TerminalLayer(Layer):
    """
    最後一層: 沒有參數，把最後的行向量轉成輸出向量，
    並在反向傳播時產生最初的誤差訊號。
    """
    def __init__(self, width):
        super().__init__()
        self.width = width

    def reshape(self, feed):
        if feed.shape != (self.width, 1):
            raise ShapeMismatch(f"輸出必須是 ({self.width}, 1)，收到 {feed.shape}")
        return feed.transpose().flatten()

    def feed_forward(self, feed, activation):
        """
        執行前向傳播 (純粹 reshape，不再套用活化函數)。

        返回:
            np.array: 長度為 width 的一維輸出向量。
        """
        outputs = self.reshape(feed)
        self._enter_forward()
        return outputs

    def back_propagate(self, learning_rate, outputs, targets, activation):
        """
        error = targets - outputs，grad = outputs 的輸出空間導數。
        learning_rate 不使用 (這一層沒有權重)。
        """
        self._enter_backward()
        parsed = Matrix.column(outputs)
        expected = Matrix.column(targets)
        if parsed.shape != (self.width, 1) or expected.shape != (self.width, 1):
            raise ShapeMismatch(
                f"outputs/targets 長度必須為 {self.width}，收到 {parsed.rows} / {expected.rows}"
            )
        errors = expected.subtract(parsed)
        gradients = parsed.map(activation.derivative)
        self._leave_backward()
        return BackProps(errors, gradients)
