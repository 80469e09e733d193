'''
Name: MLP Engine
Topic: back-propagation
Author: CHEN, KE-RONG
Date: 2025/07/02
'''
import logging

from .errors import NetworkError, ShapeMismatch, InvalidConfiguration, StaleState, NumericDegeneracy
from .matrix import Matrix
from .activations import Activation, SIGMOID, ACTIVATIONS, get_activation
from .layers import Layer, ProcessLayer, TerminalLayer, BackProps
from .model import Network
from .config import NetworkConfig
from .trainer import Trainer

logging.getLogger(__name__).addHandler(logging.NullHandler())
