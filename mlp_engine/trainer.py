'''
Name: MLP Engine
Topic: back-propagation
Author: CHEN, KE-RONG
Date: 2025/07/02
'''
import logging

# 進度條函式庫
from tqdm import tqdm

from .model import Network

logger = logging.getLogger(__name__)


class Trainer:
    """
    訓練器類別，依 NetworkConfig 執行網路的訓練迴圈。
    """
    def __init__(self, network, config, progress=True):
        """
        初始化訓練器。

        參數:
            network (Network): 要訓練的網路。
            config (NetworkConfig): 學習率、週期數、活化函數與日誌間隔。
            progress (bool): 是否顯示 tqdm 進度條。
        """
        self.network = network
        self.config = config.validate()
        self.activation = config.get_activation()
        self.progress = progress

    @classmethod
    def from_config(cls, config, progress=True):
        return cls(Network.from_config(config), config, progress=progress)

    def train(self, inputs, targets):
        """
        執行訓練迴圈。

        參數:
            inputs (list): 訓練資料，每筆長度為 input_width。
            targets (list): 訓練標籤，每筆長度為 output_width。

        返回:
            int: 完成的週期數。
        """
        epochs = self.config.epochs
        log_interval = self.config.log_interval
        logger.info(
            "開始訓練... (Epochs: %d, LR: %s, Activation: %s)",
            epochs, self.config.learning_rate, self.activation.name,
        )

        completed = 0
        epoch_iter = self.network.train_iter(
            self.config.learning_rate, inputs, targets, epochs, self.activation
        )
        for epoch in tqdm(epoch_iter, total=epochs, desc="Training Progress", disable=not self.progress):
            completed = epoch
            if epoch % log_interval == 0:
                logger.info("Epoch %d/%d", epoch, epochs)

        logger.info("訓練完成，共 %d 個週期", completed)
        return completed

    def predict(self, inputs):
        return self.network.predict(inputs, self.activation)
