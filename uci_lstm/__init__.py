"""
uci_lstm package

Small package that prepares the UCI synthetic control chart dataset and trains
an LSTM sequence classifier on it (6 classes).
"""

import os

# Environment variables to encourage deterministic TensorFlow behavior
os.environ["PYTHONHASHSEED"] = "123"
os.environ["TF_DETERMINISTIC_OPS"] = "1"        # deterministic TF ops
os.environ["TF_CUDNN_DETERMINISTIC"] = "1"      # harmless on CPU
os.environ["TF_ENABLE_ONEDNN_OPTS"] = "0"       # deterministic CPU kernels (slower)

from .data import Config, DataValidator, SequenceDataIterator, SequenceNormalizer, CLASS_NAMES
from .prepare import DatasetFetchError, layout, ensure_layout, prepare_dataset
from .model import LSTMTrainer
from .viz import Visualizer
from .pipeline import UCISequencePipeline

__all__ = [
    "Config",
    "DataValidator",
    "SequenceDataIterator",
    "SequenceNormalizer",
    "CLASS_NAMES",
    "DatasetFetchError",
    "layout",
    "ensure_layout",
    "prepare_dataset",
    "LSTMTrainer",
    "Visualizer",
    "UCISequencePipeline",
]
