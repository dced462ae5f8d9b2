"""
Central path configuration for the UCI synthetic control dataset.
All code should import paths from here instead of hard-coding absolute paths.
"""

import os

# Root folder of this git repo
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))

# Root of the prepared dataset inside the repo (its presence means "already prepared")
UCI_DATA_ROOT = os.path.join(PROJECT_ROOT, "uci")

# Partition / role subdirectories inside the dataset root
TRAIN_DIR_NAME = "train"
TEST_DIR_NAME = "test"
FEATURES_DIR_NAME = "features"
LABELS_DIR_NAME = "labels"

# Output / derived directories
MODELS_BASE_DIR = os.path.join(PROJECT_ROOT, "models")
LOG_DIR = os.path.join(PROJECT_ROOT, "logs")

# Remote source: one time series per line, whitespace separated
UCI_DATA_URL = (
    "https://archive.ics.uci.edu/ml/machine-learning-databases/"
    "synthetic_control-mld/synthetic_control.data"
)
