"""
One-time dataset preparation: download the UCI synthetic control data and write
one CSV file per sequence (plus a matching label file) into train/test folders.

Layout produced under the dataset root:

    train/features/0.csv .. train/features/<n_train - 1>.csv
    train/labels/0.csv   .. train/labels/<n_train - 1>.csv
    test/features/0.csv  .. test/features/<n_test - 1>.csv
    test/labels/0.csv    .. test/labels/<n_test - 1>.csv
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, NamedTuple, Sequence, Tuple

import numpy as np
import requests

from paths import TRAIN_DIR_NAME, TEST_DIR_NAME, FEATURES_DIR_NAME, LABELS_DIR_NAME
from .data import Config, DataValidator

logger = logging.getLogger(__name__)


class DatasetFetchError(RuntimeError):
    """Raised when the remote source cannot be downloaded."""


@dataclass(frozen=True)
class RawRecord:
    ordinal: int
    tokens: Tuple[str, ...]


@dataclass(frozen=True)
class LabeledSequence:
    content: str   # transposed sequence, one value per row
    label: int


class DataLayout(NamedTuple):
    root: str
    train_features: str
    train_labels: str
    test_features: str
    test_labels: str


def fetch_lines(source: str, timeout: float = 60.0) -> List[str]:
    """Return the lines of `source`, an http(s) URL or a local file path.
        Trailing blank lines are dropped so a final newline adds no record.
    """
    if source.startswith(('http://', 'https://')):
        logger.info(f"[FETCH] Downloading {source}")
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DatasetFetchError(f"Could not download {source}: {e}") from e
        text = response.text
    else:
        logger.info(f"[FETCH] Reading local file {source}")
        with open(source, 'r') as f:
            text = f.read()

    lines = text.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()
    logger.info(f"[FETCH] Read {len(lines)} lines")
    return lines


def parse_records(lines: Sequence[str]) -> List[RawRecord]:
    return [RawRecord(i, tuple(line.split())) for i, line in enumerate(lines)]


def transpose_tokens(tokens: Sequence[str]) -> str:
    return ''.join(token + '\n' for token in tokens)


def transpose_line(line: str) -> str:
    """'5.2 5.3  5.0' -> '5.2\\n5.3\\n5.0\\n' (one value per row, order kept)."""
    return transpose_tokens(line.split())


def assign_label(ordinal: int, block_size: int = 100) -> int:
    """Lines 0..block_size-1 get label 0, the next block label 1, and so on."""
    if ordinal < 0:
        raise ValueError(f"ordinal must be non-negative, got {ordinal}")
    if block_size <= 0:
        raise ValueError(f"block_size must be positive, got {block_size}")
    return ordinal // block_size


def build_labeled_sequences(records: Sequence[RawRecord], block_size: int = 100) -> List[LabeledSequence]:
    return [
        LabeledSequence(transpose_tokens(r.tokens), assign_label(r.ordinal, block_size))
        for r in records
    ]


def shuffle_split(sequences: Sequence[LabeledSequence], n_train: int,
                  seed: int = 12345) -> Tuple[List[LabeledSequence], List[LabeledSequence]]:
    """Shuffle with a seeded generator and split into (train, test).

        The permutation comes from numpy's PCG64 generator, so the same seed and
        input order give the same partitions on every run and platform. The
        position of an element in the returned list is its file index.
    """
    if not 0 <= n_train <= len(sequences):
        raise ValueError(f"n_train={n_train} outside [0, {len(sequences)}]")
    order = np.random.default_rng(seed).permutation(len(sequences))
    shuffled = [sequences[i] for i in order]
    train, test = shuffled[:n_train], shuffled[n_train:]
    logger.info(f"[SPLIT] Train: {len(train)} | Test: {len(test)} | seed={seed}")
    return train, test


def layout(root: str) -> DataLayout:
    """Directory layout under `root`; touches nothing on disk."""
    train = os.path.join(root, TRAIN_DIR_NAME)
    test = os.path.join(root, TEST_DIR_NAME)
    return DataLayout(
        root=root,
        train_features=os.path.join(train, FEATURES_DIR_NAME),
        train_labels=os.path.join(train, LABELS_DIR_NAME),
        test_features=os.path.join(test, FEATURES_DIR_NAME),
        test_labels=os.path.join(test, LABELS_DIR_NAME),
    )


def ensure_layout(dirs: DataLayout) -> None:
    for d in (dirs.train_features, dirs.train_labels, dirs.test_features, dirs.test_labels):
        Path(d).mkdir(parents=True, exist_ok=True)


def _write_pair(features_dir: str, labels_dir: str, index: int, seq: LabeledSequence) -> None:
    with open(os.path.join(features_dir, f"{index}.csv"), 'w') as f:
        f.write(seq.content)
    with open(os.path.join(labels_dir, f"{index}.csv"), 'w') as f:
        f.write(str(seq.label))


def materialize(train: Sequence[LabeledSequence], test: Sequence[LabeledSequence], dirs: DataLayout) -> None:
    """Write every sequence and its label to `<index>.csv` in its partition.
        Directories must already exist (see `ensure_layout`). A failed write
        aborts the loop and leaves the files written so far in place.
    """
    for i, seq in enumerate(train):
        _write_pair(dirs.train_features, dirs.train_labels, i, seq)
    for i, seq in enumerate(test):
        _write_pair(dirs.test_features, dirs.test_labels, i, seq)
    logger.info(f"[SAVE] Wrote {len(train)} train and {len(test)} test sequences to {dirs.root}")


def prepare_dataset(config: Config) -> bool:
    """Download and materialize the dataset unless `config.root_dir` exists.

        Returns True if the data was written, False if the step was skipped.
    """
    if os.path.exists(config.root_dir):
        logger.info(f"[SKIP] Data already present at {config.root_dir}")
        return False

    lines = fetch_lines(config.source_url, timeout=config.fetch_timeout)
    records = parse_records(lines)

    DataValidator.validate_line_count(len(records), config.block_size, config.strict_validation)
    DataValidator.validate_token_counts([len(r.tokens) for r in records], config.strict_validation)

    sequences = build_labeled_sequences(records, config.block_size)
    labels = np.array([s.label for s in sequences], dtype=np.int64)
    logger.info(f"[DATA] {len(sequences)} sequences | label dist: {np.bincount(labels).tolist()}")

    train, test = shuffle_split(sequences, config.n_train_for(len(sequences)), config.seed)

    dirs = layout(config.root_dir)
    ensure_layout(dirs)
    materialize(train, test, dirs)
    return True
