"""
Entry point to download the UCI synthetic control data and train the LSTM classifier.
"""

import os
import logging

from paths import LOG_DIR, MODELS_BASE_DIR
from uci_lstm import Config, UCISequencePipeline
from uci_lstm.pipeline import summarize_model_versions

os.makedirs(LOG_DIR, exist_ok=True)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.FileHandler(os.path.join(LOG_DIR, "uci_pipeline.log"), encoding="utf-8"),
        logging.StreamHandler(),
    ],
)
logger = logging.getLogger(__name__)


def print_model_versions(models_base_dir: str = MODELS_BASE_DIR) -> None:
    """Print previous runs, newest first, with their final test scores."""
    versions = summarize_model_versions(models_base_dir)
    if not versions:
        print(f"No previous runs under {models_base_dir}")
        return

    print(f"\nPrevious runs ({len(versions)}):")
    print(f"{'version':<24} {'epochs':>6} {'accuracy':>9} {'f1':>6}")
    for v in versions:
        if v['epochs'] is None:
            print(f"{v['version']:<24} {'-':>6} {'-':>9} {'-':>6}")
        else:
            print(f"{v['version']:<24} {v['epochs']:>6} {v['accuracy']:>9.4f} {v['f1']:>6.4f}")


def main() -> None:
    """Construct config, run the pipeline, and report the created version."""
    try:
        print_model_versions()

        config = Config()
        results = UCISequencePipeline(config).run_full_pipeline()

        print("\nTraining completed successfully!")
        print(f"New version created: {results['version_folder']}")
    except Exception as e:
        logger.error(f"Main execution failed: {e}")
        raise


if __name__ == "__main__":
    main()
