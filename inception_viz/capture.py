"""
Filter Response Capture
=======================
Runs one image through a Sequential network and snapshots every
top-level layer's output, in evaluation order.

Key design:
- Forward hooks record outputs; torch layers do not keep them
- Outputs are cloned as soon as they are produced, since in-place
  ReLUs overwrite the preceding convolution's output buffer
- Each LayerActivation owns its own copy of the tensor
"""

from dataclasses import dataclass

import torch

from inception_viz.errors import UnevaluatedLayerError
from inception_viz.model import layer_kind


@dataclass(frozen=True)
class LayerActivation:
    """Output of one layer for one forward pass."""

    layer_index: int      # 1-based, evaluation order
    layer_kind: str
    tensor: torch.Tensor  # (1, C, H, W) for spatial layers

    @property
    def num_channels(self):
        """Size of dim 1, or 0 for outputs with fewer than two dimensions."""
        if self.tensor.dim() < 2:
            return 0
        return self.tensor.shape[1]


class ResponseRecorder:
    """
    Keeps the last output of each top-level layer of a Sequential.

    Use as a context manager so the hooks are removed afterwards:

        with ResponseRecorder(model) as recorder:
            model(image)
        responses = capture_responses(recorder)
    """

    def __init__(self, model):
        self.layers = list(model)
        self.outputs = [None] * len(self.layers)
        self._handles = []

    def _make_hook(self, idx):
        def hook(module, inputs, output):
            self.outputs[idx] = output.detach().clone()
        return hook

    def attach(self):
        if not self._handles:
            self._handles = [
                layer.register_forward_hook(self._make_hook(idx))
                for idx, layer in enumerate(self.layers)
            ]
        return self

    def detach(self):
        for handle in self._handles:
            handle.remove()
        self._handles = []

    def __enter__(self):
        return self.attach()

    def __exit__(self, exc_type, exc, tb):
        self.detach()


def capture_responses(recorder):
    """
    Snapshot the recorded output of every layer.

    Returns:
        List of LayerActivation, one per layer, layer_index 1..N

    Raises:
        UnevaluatedLayerError: if any layer has not produced an output
    """
    responses = []
    for idx, (layer, output) in enumerate(zip(recorder.layers, recorder.outputs), start=1):
        if output is None:
            raise UnevaluatedLayerError(idx, layer_kind(layer))
        responses.append(LayerActivation(idx, layer_kind(layer), output.clone()))
    return responses


def get_layer_responses(model, image):
    """
    Evaluate `model` on `image` and return its per-layer filter responses.

    Args:
        model: nn.Sequential
        image: Tensor of shape (1, C, H, W)

    Returns:
        List of LayerActivation in evaluation order
    """
    model.eval()
    with ResponseRecorder(model) as recorder:
        with torch.no_grad():
            model(image)
    responses = capture_responses(recorder)

    print(f"\nCaptured {len(responses)} layer responses:")
    for r in responses:
        print(f"  Layer {r.layer_index:<3} {r.layer_kind:<14} {tuple(r.tensor.shape)}")

    return responses
