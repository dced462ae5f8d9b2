"""
Model creation, epoch-wise training, and evaluation for the UCI LSTM pipeline.
"""

import os
import json
import logging
from datetime import datetime
from typing import Dict, Any, List

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    classification_report,
    confusion_matrix,
    f1_score,
)

import tensorflow as tf
from tensorflow.keras.models import Model
from tensorflow.keras.layers import LSTM, Dense, Input

from .data import Config, CLASS_NAMES, SequenceBatch, SequenceDataIterator

logger = logging.getLogger(__name__)


class LSTMTrainer:
    """Encapsulate model creation, training, and evaluation.
        The trainer owns the Keras model, consumes data only through
        `SequenceDataIterator` batches, and tracks per-epoch history
        (mean train loss, test accuracy, test macro F1).
    """
    def __init__(self, config: Config):
        """Initialize trainer state for a given configuration."""
        self.config = config
        self.model = None
        self.history: Dict[str, List[float]] = {'loss': [], 'accuracy': [], 'f1': []}
        self.iteration = 0

    def create_model(self, n_features: int) -> Model:
        """Build and compile the LSTM model for sequence classification.

            The architecture is:
            [features(time, n_features), mask(time)] → LSTM(10, tanh) → Dense(6, Softmax)
            The mask input marks real time steps, so padded steps are skipped
            regardless of their value. Trained with SGD + Nesterov momentum and
            element-wise gradient clipping.
        """
        tf.keras.utils.set_random_seed(self.config.model_seed)
        features = Input(shape=(None, n_features), name='features')
        mask = Input(shape=(None,), dtype='bool', name='mask')
        hidden = LSTM(self.config.lstm_units, activation='tanh', kernel_initializer='glorot_uniform')(features, mask=mask)
        probs = Dense(self.config.num_classes, activation='softmax', kernel_initializer='glorot_uniform')(hidden)
        model = Model(inputs=[features, mask], outputs=probs)

        opt = tf.keras.optimizers.SGD(
            learning_rate=self.config.learning_rate,
            momentum=self.config.momentum,
            nesterov=True,
            clipvalue=self.config.gradient_clip_value,
        )
        model.compile(loss='categorical_crossentropy', optimizer=opt, metrics=['accuracy'])
        logger.info("[MODEL] Model architecture created successfully")
        logger.info(f"[DATA]   Input features: {n_features} | classes: {self.config.num_classes}")
        logger.info(f"[DATA]   Total parameters: {model.count_params():,}")
        self.model = model
        return model

    @staticmethod
    def _inputs(batch: SequenceBatch) -> list:
        return [batch.features, batch.mask.astype(bool)]

    def predict(self, batch: SequenceBatch) -> np.ndarray:
        """Class probabilities for one batch, shape (batch, num_classes)."""
        if self.model is None:
            raise ValueError("Model not trained yet")
        return np.asarray(self.model.predict_on_batch(self._inputs(batch)))

    def fit(self, iterator: SequenceDataIterator) -> float:
        """Run one pass over `iterator` and return the mean batch loss."""
        if self.model is None:
            self.create_model(iterator.n_features)

        losses = []
        for batch in iterator:
            out = self.model.train_on_batch(self._inputs(batch), batch.labels, return_dict=True)
            loss = float(out['loss'])
            losses.append(loss)
            self.iteration += 1
            if self.iteration % self.config.score_log_every == 0:
                logger.info(f"[SCORE] Score at iteration {self.iteration} is {loss:.6f}")
        return float(np.mean(losses)) if losses else float('nan')

    def evaluate(self, iterator: SequenceDataIterator) -> Dict[str, Any]:
        """Evaluate the model on the remaining batches of `iterator`.

            Returns accuracy, macro-averaged F1, the confusion matrix, and a
            per-class classification report.
        """
        if self.model is None:
            raise ValueError("Model not trained yet")

        y_true, y_pred = [], []
        for batch in iterator:
            prob = self.predict(batch)
            y_pred.extend(np.argmax(prob, axis=1).tolist())
            y_true.extend(np.argmax(batch.labels, axis=1).tolist())
        if not y_true:
            raise ValueError("Iterator produced no batches; call reset() first")

        labels = list(range(self.config.num_classes))
        names = CLASS_NAMES if len(CLASS_NAMES) == self.config.num_classes else [str(c) for c in labels]
        return {
            'accuracy': float(accuracy_score(y_true, y_pred)),
            'f1': float(f1_score(y_true, y_pred, labels=labels, average='macro', zero_division=0)),
            'confusion_matrix': confusion_matrix(y_true, y_pred, labels=labels),
            'classification_report': classification_report(
                y_true, y_pred, labels=labels, target_names=names, output_dict=True, zero_division=0),
            'y_true': np.array(y_true),
            'y_pred': np.array(y_pred),
        }

    def train(self, train_data: SequenceDataIterator, test_data: SequenceDataIterator) -> Dict[str, Any]:
        """Train for `config.epochs` epochs, evaluating the test set after each one."""
        if self.config.epochs < 1:
            raise ValueError(f"epochs must be >= 1, got {self.config.epochs}")

        logger.info("[TRAIN] Starting model training...")
        results: Dict[str, Any] = {}
        for epoch in range(self.config.epochs):
            loss = self.fit(train_data)
            results = self.evaluate(test_data)
            logger.info(f"Test set evaluation at epoch {epoch}: Accuracy = {results['accuracy']:.2f}, F1 = {results['f1']:.2f}")

            self.history['loss'].append(loss)
            self.history['accuracy'].append(results['accuracy'])
            self.history['f1'].append(results['f1'])

            test_data.reset()
            train_data.reset()
        logger.info("[OK] Model training completed successfully")
        return results

    def save_model_and_history(self) -> None:
        """Persist trained model, training history, and configuration to disk.
            Saves:
            - training_history.json: per-epoch loss / accuracy / F1.
            - model_config.json: configuration snapshot.
            - uci_lstm_model.keras: the trained Keras model.
        """
        if self.model is None:
            raise ValueError("Model not trained yet")

        hist_path = os.path.join(self.config.models_dir, 'training_history.json')
        with open(hist_path, 'w') as f:
            json.dump(self.history, f, indent=4)

        # Serialize configuration for reproducibility
        cfg_path = os.path.join(self.config.models_dir, 'model_config.json')
        cfg = {
            'version_folder': self.config.version_folder,
            'timestamp': datetime.now().isoformat(),
            'data': {
                'root_dir': self.config.root_dir,
                'source_url': self.config.source_url,
                'block_size': self.config.block_size,
                'train_ratio': self.config.train_ratio,
                'n_train': self.config.n_train,
                'seed': self.config.seed,
            },
            'model_architecture': {
                'lstm_units': self.config.lstm_units,
                'num_classes': self.config.num_classes,
            },
            'training_params': {
                'batch_size': self.config.batch_size,
                'epochs': self.config.epochs,
                'learning_rate': self.config.learning_rate,
                'momentum': self.config.momentum,
                'gradient_clip_value': self.config.gradient_clip_value,
            },
            'model_seed': self.config.model_seed,
        }
        with open(cfg_path, 'w') as f:
            json.dump(cfg, f, indent=4)

        model_path = os.path.join(self.config.models_dir, 'uci_lstm_model.keras')
        self.model.save(model_path)
        logger.info(f"[SAVE] Artifacts saved to {self.config.models_dir}")
