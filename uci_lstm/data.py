"""
Data configuration, validation, and sequence loading utilities for the UCI LSTM pipeline.
"""

import os
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from paths import UCI_DATA_ROOT, UCI_DATA_URL, MODELS_BASE_DIR

logger = logging.getLogger(__name__)

# Category names in label order (label = ordinal // block_size)
CLASS_NAMES = [
    'Normal',
    'Cyclic',
    'Increasing trend',
    'Decreasing trend',
    'Upward shift',
    'Downward shift',
]


@dataclass
class Config:
    """Configuration container for the UCI sequence classification pipeline.

    This class centralizes all configurable aspects of the pipeline, including:
    - Source location and the root directory of the prepared dataset.
    - Labelling and train/test split parameters (block size, ratio, seed).
    - Model architecture and optimizer hyperparameters.
    - Training loop parameters (batch size, epochs, logging frequency).

    A timestamped version folder name is computed so each run writes its model
    artifacts to an isolated directory under `models_base_dir`. Nothing is
    created on disk until `ensure_dirs()` is called.
    """

    # Paths
    root_dir: str = field(default_factory=lambda: os.getenv('UCI_DATA_ROOT', UCI_DATA_ROOT))
    source_url: str = field(default_factory=lambda: os.getenv('UCI_DATA_URL', UCI_DATA_URL))
    models_base_dir: str = field(default_factory=lambda: os.getenv('UCI_MODELS_DIR', MODELS_BASE_DIR))
    fetch_timeout: float = 60.0

    # Dataset preparation
    block_size: int = 100             # consecutive lines sharing one label
    train_ratio: float = 0.75         # 450 of 600 sequences go to TRAIN
    n_train: Optional[int] = None     # explicit override of the ratio
    seed: int = 12345                 # shuffle seed for the train/test split
    strict_validation: bool = False   # raise instead of warn on malformed input

    # Model
    num_classes: int = 6
    lstm_units: int = 10
    learning_rate: float = 0.005
    momentum: float = 0.9
    gradient_clip_value: float = 0.5  # element-wise absolute value clipping
    model_seed: int = 123             # weight init / TF seed

    # Training
    batch_size: int = 10
    epochs: int = 40
    score_log_every: int = 20         # log the loss every N iterations

    def __post_init__(self):
        """Validate ratios and compute the version folder for this run."""
        if not 0.0 <= self.train_ratio <= 1.0:
            raise ValueError(f"train_ratio must be within [0, 1], got {self.train_ratio}")
        if self.block_size <= 0:
            raise ValueError(f"block_size must be positive, got {self.block_size}")
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")

        # Timestamp-based version folder to keep runs separated
        ts = datetime.now().strftime('%Y%m%d_%H%M%S')
        self.version_folder = f'model_{ts}'
        self.models_dir = os.path.join(self.models_base_dir, self.version_folder)

    def n_train_for(self, total: int) -> int:
        """Number of shuffled sequences assigned to TRAIN for a dataset of `total` lines."""
        if self.n_train is not None:
            return self.n_train
        return int(round(total * self.train_ratio))

    def ensure_dirs(self) -> None:
        """Create the model version directory."""
        Path(self.models_dir).mkdir(parents=True, exist_ok=True)
        logger.info(f"[VERSION] Created new version folder: {self.version_folder}")
        logger.info(f"[PATH] Model directory: {self.models_dir}")


class DataValidator:
    """Utility class with static methods for validating raw input lines.

    By default the checks only log warnings so that malformed input is passed
    through unchanged; with `strict=True` they raise `ValueError` instead.
    """

    @staticmethod
    def _report(message: str, strict: bool) -> bool:
        if strict:
            raise ValueError(message)
        logger.warning(f"[WARNING] {message}")
        return False

    @staticmethod
    def validate_line_count(num_lines: int, block_size: int, strict: bool = False) -> bool:
        """Check that the number of lines is an exact multiple of the block size.
            Trailing lines of an incomplete block still get the next label up.
        """
        if num_lines == 0:
            return DataValidator._report("Source contains no lines", strict)
        if num_lines % block_size != 0:
            return DataValidator._report(
                f"{num_lines} lines is not a multiple of block size {block_size}; "
                f"the last {num_lines % block_size} lines form a partial class", strict)
        return True

    @staticmethod
    def validate_token_counts(token_counts: List[int], strict: bool = False) -> bool:
        """Check that every line carries the same number of tokens."""
        if not token_counts:
            return True
        distinct = sorted(set(token_counts))
        if len(distinct) > 1:
            return DataValidator._report(f"Lines have differing token counts: {distinct}", strict)
        return True


@dataclass
class SequenceBatch:
    """One mini-batch of end-aligned sequences.

    features: (batch, time, n_features), left-padded with zeros
    labels:   (batch, num_classes), one-hot
    mask:     (batch, time), 1.0 where a real time step is present
    """
    features: np.ndarray
    labels: np.ndarray
    mask: np.ndarray

    def __len__(self) -> int:
        return self.features.shape[0]


class SequenceDataIterator:
    """Iterate mini-batches over numbered sequence CSV files.

        Loads `<features_dir>/<i>.csv` and `<labels_dir>/<i>.csv` for i in
        [start, end] (inclusive). Each features file holds one time step per row
        and one column per feature; each labels file holds a single class index.
        Sequences of unequal length are aligned at the end. Iteration stops at the
        end of the data; call `reset()` to start the next epoch.
    """
    def __init__(self, features_dir: str, labels_dir: str, start: int, end: int,
                 batch_size: int, num_classes: int):
        if end < start:
            raise ValueError(f"Empty file range: {start}..{end}")
        self.features_dir = features_dir
        self.labels_dir = labels_dir
        self.start = start
        self.end = end
        self.batch_size = batch_size
        self.num_classes = num_classes
        self.preprocessor = None
        self._cursor = 0
        self.sequences, self.labels = self._load()

    def _load(self):
        sequences, labels = [], []
        n_features = None
        for i in range(self.start, self.end + 1):
            seq = pd.read_csv(os.path.join(self.features_dir, f"{i}.csv"), header=None).values.astype(np.float32)
            if n_features is None:
                n_features = seq.shape[1]
            elif seq.shape[1] != n_features:
                raise ValueError(f"Sequence {i} has {seq.shape[1]} columns, expected {n_features}")

            label = int(pd.read_csv(os.path.join(self.labels_dir, f"{i}.csv"), header=None).iloc[0, 0])
            if not 0 <= label < self.num_classes:
                raise ValueError(f"Label {label} of sequence {i} outside [0, {self.num_classes})")
            sequences.append(seq)
            labels.append(label)
        logger.info(f"[DATA] Loaded {len(sequences)} sequences from {self.features_dir}")
        return sequences, np.array(labels, dtype=np.int64)

    @property
    def n_features(self) -> int:
        return self.sequences[0].shape[1]

    def total_examples(self) -> int:
        return len(self.sequences)

    def __len__(self) -> int:
        """Number of batches per epoch."""
        return -(-len(self.sequences) // self.batch_size)

    def set_preprocessor(self, preprocessor) -> None:
        """Attach a normalizer applied to every batch on the fly."""
        self.preprocessor = preprocessor

    def reset(self) -> None:
        self._cursor = 0

    def has_next(self) -> bool:
        return self._cursor < len(self.sequences)

    def __iter__(self):
        return self

    def __next__(self) -> SequenceBatch:
        if not self.has_next():
            raise StopIteration
        lo, hi = self._cursor, min(self._cursor + self.batch_size, len(self.sequences))
        self._cursor = hi

        seqs = self.sequences[lo:hi]
        max_len = max(len(s) for s in seqs)
        features = np.zeros((len(seqs), max_len, self.n_features), dtype=np.float32)
        mask = np.zeros((len(seqs), max_len), dtype=np.float32)
        for j, s in enumerate(seqs):
            # Align at the end so the label lines up with the last time step
            features[j, max_len - len(s):] = s
            mask[j, max_len - len(s):] = 1.0
        labels = np.eye(self.num_classes, dtype=np.float32)[self.labels[lo:hi]]

        batch = SequenceBatch(features, labels, mask)
        if self.preprocessor is not None:
            batch = self.preprocessor.transform(batch)
        return batch


class SequenceNormalizer:
    """Per-feature standardization fit on training sequences only.

        Statistics are collected over every real (unmasked) time step of the
        iterator's data; padded steps stay at zero after `transform`.
    """
    def __init__(self):
        self.scaler = StandardScaler()
        self.fitted = False

    def fit(self, iterator: SequenceDataIterator) -> "SequenceNormalizer":
        """Collect mean / std from `iterator`, then reset it to the start."""
        previous = iterator.preprocessor
        iterator.preprocessor = None
        iterator.reset()
        for batch in iterator:
            self.scaler.partial_fit(batch.features[batch.mask.astype(bool)])
        iterator.reset()
        iterator.preprocessor = previous

        self.fitted = True
        logger.info(f"[SCALE] Fitted normalizer | mean={self.scaler.mean_} | std={self.scaler.scale_}")
        return self

    def transform(self, batch: SequenceBatch) -> SequenceBatch:
        if not self.fitted:
            raise ValueError("Normalizer not fitted yet")
        features = batch.features.copy()
        real = batch.mask.astype(bool)
        features[real] = self.scaler.transform(features[real])
        return SequenceBatch(features, batch.labels, batch.mask)

    def save(self, path: str) -> None:
        """Persist normalizer statistics for future inference / analysis."""
        if not self.fitted:
            raise ValueError("Normalizer not fitted yet")
        np.savez(path, mean=self.scaler.mean_, std=self.scaler.scale_)
        logger.info(f"[SAVE] Normalizer statistics saved to {path}")
