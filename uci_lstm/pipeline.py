"""
High-level pipeline orchestration for the UCI sequence classification task.
"""

import os
import json
import logging
from typing import Any, Dict, List

from .data import Config, CLASS_NAMES, SequenceDataIterator, SequenceNormalizer
from .model import LSTMTrainer
from .prepare import layout, prepare_dataset
from .viz import Visualizer

logger = logging.getLogger(__name__)

class UCISequencePipeline:
    def __init__(self, config: Config):
        self.config = config
        self.trainer = LSTMTrainer(config)
        self.normalizer = SequenceNormalizer()
        self.visualizer = Visualizer()

    def load_iterators(self):
        """Build train/test iterators over the numbered files on disk."""
        dirs = layout(self.config.root_dir)
        n_train = self._count_files(dirs.train_features)
        n_test = self._count_files(dirs.test_features)
        logger.info(f"[SPLIT] Train files: {n_train} | Test files: {n_test}")

        train_data = SequenceDataIterator(dirs.train_features, dirs.train_labels, 0, n_train - 1,
                                          self.config.batch_size, self.config.num_classes)
        test_data = SequenceDataIterator(dirs.test_features, dirs.test_labels, 0, n_test - 1,
                                         self.config.batch_size, self.config.num_classes)
        return train_data, test_data

    @staticmethod
    def _count_files(directory: str) -> int:
        return sum(1 for name in os.listdir(directory) if name.endswith('.csv'))

    def run_full_pipeline(self) -> Dict[str, Any]:
        try:
            logger.info("[START] Starting UCI Sequence Classification Pipeline")
            self.config.ensure_dirs()

            # Step 1: Download & materialize (no-op if the data root exists)
            logger.info("[STEP 1] Preparing dataset...")
            prepare_dataset(self.config)

            # Step 2: Iterators
            logger.info("[STEP 2] Loading train/test sequences...")
            train_data, test_data = self.load_iterators()

            # Step 3: Normalize using TRAIN statistics only, applied to both splits
            logger.info("[STEP 3] Fitting normalizer on training data...")
            self.normalizer.fit(train_data)
            train_data.set_preprocessor(self.normalizer)
            test_data.set_preprocessor(self.normalizer)
            self.normalizer.save(os.path.join(self.config.models_dir, 'normalizer.npz'))

            # Step 4: Train, evaluating TEST after every epoch
            logger.info("[STEP 4] Training LSTM model...")
            results = self.trainer.train(train_data, test_data)

            # Step 5: Save
            logger.info("[STEP 5] Saving model and history...")
            self.trainer.save_model_and_history()

            # Step 6: Plots
            logger.info("[STEP 6] Generating visualizations...")
            self.visualizer.plot_training_curves(self.trainer.history, os.path.join(self.config.models_dir, 'training_curves.png'))
            self.visualizer.plot_confusion_matrix(results['confusion_matrix'], CLASS_NAMES[:self.config.num_classes],
                                                  os.path.join(self.config.models_dir, 'confusion_matrix.png'))
            logger.info("----- Example Complete -----")
            self._print_version_results(results)
            return {'model': self.trainer.model, 'results': results, 'config': self.config, 'version_folder': self.config.version_folder}
        except Exception as e:
            logger.error(f"Pipeline failed: {e}")
            raise

    def _print_version_results(self, results: Dict[str, Any]) -> None:
        print("\n" + "="*60)
        print("UCI SEQUENCE CLASSIFICATION RESULTS")
        print("="*60)
        print(f"Version: {self.config.version_folder}")
        print(f"Location: {self.config.models_dir}")
        print(f"Accuracy: {results['accuracy']:.4f}")
        print(f"F1 (macro): {results['f1']:.4f}")
        print("="*60)
        print("\nFiles created:")
        print(f"   Model: uci_lstm_model.keras")
        print(f"   Config: model_config.json")
        print(f"   Normalizer: normalizer.npz")
        print(f"   History: training_history.json")
        print(f"   Plots: training_curves.png, confusion_matrix.png")
        print("="*60)


def summarize_model_versions(models_base_dir: str) -> List[Dict[str, Any]]:
    """Describe each `model_*` run folder, newest first.

        Runs with a readable training_history.json report their epoch count and
        final test accuracy / F1; others report None for those fields.
    """
    if not os.path.isdir(models_base_dir):
        return []

    versions = []
    for name in sorted(os.listdir(models_base_dir), reverse=True):
        folder = os.path.join(models_base_dir, name)
        if not (name.startswith('model_') and os.path.isdir(folder)):
            continue
        entry = {'version': name, 'epochs': None, 'accuracy': None, 'f1': None}
        hist_path = os.path.join(folder, 'training_history.json')
        try:
            with open(hist_path) as f:
                history = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"[VERSION] No usable history for {name}: {e}")
        else:
            if history.get('accuracy'):
                entry.update(epochs=len(history['accuracy']),
                             accuracy=history['accuracy'][-1],
                             f1=history['f1'][-1])
        versions.append(entry)
    return versions
