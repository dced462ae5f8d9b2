"""
Visualization helpers for training curves and the confusion matrix.
"""

import logging
from typing import Dict, List, Optional

import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns

logger = logging.getLogger(__name__)

class Visualizer:
    """Helper class for plotting training and evaluation diagnostics.
        - Training curves (train loss, test accuracy, test F1) across epochs.
        - Confusion matrix heatmap for predicted vs actual classes.

        All methods are static and each one optionally saves the plot to disk.
        Figures are closed after saving so long runs do not accumulate them.
    """
    @staticmethod
    def plot_training_curves(history: Dict[str, List[float]], save_path: Optional[str] = None) -> None:
        try:
            metrics = [m for m in ('loss', 'accuracy', 'f1') if history.get(m)]
            if not metrics:
                logger.warning("[PLOT] Empty history, skipping training curves")
                return
            fig, axes = plt.subplots(1, len(metrics), figsize=(5 * len(metrics), 4), squeeze=False)
            for ax, metric in zip(axes[0], metrics):
                label = 'Train loss' if metric == 'loss' else f"Test {metric}"
                ax.plot(history[metric], label=label)
                ax.set_title(f"{metric.capitalize()} Curve")
                ax.set_xlabel("Epoch")
                ax.set_ylabel(metric.capitalize())
                ax.legend(); ax.grid(True)
            plt.tight_layout()
            if save_path:
                plt.savefig(save_path, dpi=150, bbox_inches='tight')
                logger.info(f"[PLOT] Training curves saved to {save_path}")
            plt.close(fig)
        except Exception as e:
            logger.error(f"Error plotting training curves: {e}")

    @staticmethod
    def plot_confusion_matrix(conf_matrix: np.ndarray, class_names: List[str], save_path: Optional[str] = None) -> None:
        """Heatmap of per-class recall (row-normalized), annotated with raw counts."""
        try:
            counts = np.asarray(conf_matrix)
            totals = counts.sum(axis=1, keepdims=True)
            recall = np.divide(counts, totals, out=np.zeros(counts.shape, dtype=float), where=totals > 0)
            annot = np.array([[f"{recall[i, j]:.2f}\n({counts[i, j]})" for j in range(counts.shape[1])]
                              for i in range(counts.shape[0])])

            fig, ax = plt.subplots(figsize=(9, 7))
            sns.heatmap(recall, annot=annot, fmt='', vmin=0.0, vmax=1.0, cmap='Blues',
                        xticklabels=class_names, yticklabels=class_names, ax=ax)
            ax.set_title(f'Test confusion matrix (n={int(counts.sum())})')
            ax.set_xlabel('Predicted class')
            ax.set_ylabel('True class')
            plt.setp(ax.get_xticklabels(), rotation=30, ha='right')
            fig.tight_layout()
            if save_path:
                fig.savefig(save_path, dpi=150)
                logger.info(f"[PLOT] Confusion matrix saved to {save_path}")
            plt.close(fig)
        except Exception as e:
            logger.error(f"Error plotting confusion matrix: {e}")
