import json
import os

import numpy as np

from uci_lstm.data import CLASS_NAMES
from uci_lstm.pipeline import summarize_model_versions
from uci_lstm.viz import Visualizer


def test_summarize_model_versions(tmp_path):
    old = tmp_path / "model_20260101_000000"
    new = tmp_path / "model_20260201_000000"
    broken = tmp_path / "model_20250101_000000"
    for d in (old, new, broken):
        d.mkdir()
    (tmp_path / "notes").mkdir()
    (old / "training_history.json").write_text(json.dumps({"loss": [1.0], "accuracy": [0.5], "f1": [0.4]}))
    (new / "training_history.json").write_text(json.dumps({"loss": [1.0, 0.5], "accuracy": [0.6, 0.9], "f1": [0.5, 0.88]}))
    (broken / "training_history.json").write_text("{not json")

    versions = summarize_model_versions(str(tmp_path))
    assert [v["version"] for v in versions] == [new.name, old.name, broken.name]
    assert versions[0] == {"version": new.name, "epochs": 2, "accuracy": 0.9, "f1": 0.88}
    assert versions[2]["epochs"] is None


def test_summarize_model_versions_missing_dir(tmp_path):
    assert summarize_model_versions(str(tmp_path / "nope")) == []


def test_plot_confusion_matrix_handles_empty_rows(tmp_path):
    cm = np.diag([5, 5, 0, 5, 5, 5])
    path = str(tmp_path / "cm.png")
    Visualizer.plot_confusion_matrix(cm, CLASS_NAMES, path)
    assert os.path.getsize(path) > 0


def test_plot_training_curves(tmp_path):
    path = str(tmp_path / "curves.png")
    Visualizer.plot_training_curves({"loss": [1.2, 0.8], "accuracy": [0.4, 0.7], "f1": [0.3, 0.6]}, path)
    assert os.path.getsize(path) > 0
    Visualizer.plot_training_curves({"loss": []}, str(tmp_path / "empty.png"))
    assert not os.path.exists(tmp_path / "empty.png")
