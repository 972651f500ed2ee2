import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pytest
import torch


@pytest.fixture(autouse=True)
def close_figures():
    plt.close('all')
    yield
    plt.close('all')


@pytest.fixture
def image():
    """Deterministic 32x32 RGB batch, values 0-1."""
    torch.manual_seed(0)
    return torch.rand(1, 3, 32, 32)
