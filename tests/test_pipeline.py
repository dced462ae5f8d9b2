import os

import pytest

from uci_lstm import Config, UCISequencePipeline
from uci_lstm.prepare import layout


@pytest.fixture
def config(tmp_path, make_source):
    source, _ = make_source(n_lines=60, n_tokens=12, block_size=10)
    return Config(root_dir=str(tmp_path / "uci"), source_url=source, block_size=10,
                  models_base_dir=str(tmp_path / "models"), batch_size=8, epochs=2)


def test_full_pipeline_writes_artifacts(config):
    out = UCISequencePipeline(config).run_full_pipeline()

    assert out["version_folder"] == config.version_folder
    assert 0.0 <= out["results"]["accuracy"] <= 1.0
    for name in ("uci_lstm_model.keras", "model_config.json", "training_history.json",
                 "normalizer.npz", "training_curves.png", "confusion_matrix.png"):
        assert os.path.exists(os.path.join(config.models_dir, name)), name

    dirs = layout(config.root_dir)
    assert len(os.listdir(dirs.train_features)) == 45
    assert len(os.listdir(dirs.test_features)) == 15


def test_pipeline_reuses_prepared_data(config):
    UCISequencePipeline(config).run_full_pipeline()
    os.remove(config.source_url)

    again = Config(root_dir=config.root_dir, source_url=config.source_url, block_size=10,
                   models_base_dir=config.models_base_dir, batch_size=8, epochs=1)
    train_data, test_data = UCISequencePipeline(again).load_iterators()
    assert train_data.total_examples() == 45
    assert test_data.total_examples() == 15
    assert UCISequencePipeline(again).run_full_pipeline()["results"]["confusion_matrix"].sum() == 15


def test_pipeline_propagates_missing_source(config):
    os.remove(config.source_url)
    with pytest.raises(FileNotFoundError):
        UCISequencePipeline(config).run_full_pipeline()
    assert not os.path.exists(config.root_dir)
