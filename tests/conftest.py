import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest


def synthetic_lines(n_lines, n_tokens, block_size, seed=0):
    """One series per line; each block of lines shares a distinct offset so classes are separable."""
    rng = np.random.default_rng(seed)
    lines = []
    for i in range(n_lines):
        values = 30.0 + 5.0 * (i // block_size) + rng.normal(0.0, 1.0, n_tokens)
        # Double spaces between tokens, like the UCI file
        lines.append("  ".join(f"{v:.4f}" for v in values))
    return lines


@pytest.fixture
def make_source(tmp_path):
    def _make(n_lines=600, n_tokens=60, block_size=100, name="source.data"):
        lines = synthetic_lines(n_lines, n_tokens, block_size)
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return str(path), lines
    return _make


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            import requests
            raise requests.HTTPError(f"{self.status_code} Error")
