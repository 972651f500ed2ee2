"""
Network Definitions for the Filter Response Visualizer
======================================================
A small demonstration CNN built around two Inception modules
("Going Deeper with Convolutions"), plus loading of pretrained networks.

Key design:
- Convolutions are unpadded, so the four inception branches produce
  maps of different spatial size
- Branch outputs are concatenated along the channel axis after
  zero-padding each one (centred) to the largest branch size
- Every layer reports its kind through layer_kind(), no tagging of
  module instances
"""

import os

import torch
import torch.nn as nn
import torch.nn.functional as F

from inception_viz.config import INPUT_CHANNELS, NUM_CLASSES, MODEL_PATH
from inception_viz.errors import ChannelMismatchError


# =============================================================================
# LAYER KINDS
# =============================================================================

LAYER_KINDS = {
    nn.modules.conv._ConvNd: "convolution",
    nn.modules.pooling._MaxPoolNd: "pooling",
    nn.modules.pooling._AvgPoolNd: "pooling",
    nn.modules.pooling._AdaptiveMaxPoolNd: "pooling",
    nn.modules.pooling._AdaptiveAvgPoolNd: "pooling",
    nn.ReLU: "activation",
    nn.ReLU6: "activation",
    nn.LeakyReLU: "activation",
    nn.PReLU: "activation",
    nn.ELU: "activation",
    nn.SELU: "activation",
    nn.GELU: "activation",
    nn.SiLU: "activation",
    nn.Sigmoid: "activation",
    nn.Tanh: "activation",
    nn.modules.dropout._DropoutNd: "dropout",
    nn.Flatten: "flatten",
    nn.Linear: "linear",
    nn.modules.batchnorm._BatchNorm: "batchnorm",
}


def layer_kind(module):
    """
    Return the kind tag of a layer, e.g. 'convolution' or 'pooling'.

    Project modules declare a `kind` class attribute; torch layers are
    looked up in LAYER_KINDS. Anything else falls back to its lower-cased
    class name.
    """
    kind = getattr(type(module), "kind", None)
    if kind is not None:
        return kind
    for layer_type, tag in LAYER_KINDS.items():
        if isinstance(module, layer_type):
            return tag
    return type(module).__name__.lower()


# =============================================================================
# INCEPTION MODULE
# =============================================================================

class InceptionModule(nn.Module):
    """
    Four parallel branches concatenated along the channel axis.

    Architecture:
        Branch 1: 1x1 conv → ReLU
        Branch 2: 1x1 conv → ReLU → 3x3 conv → ReLU
        Branch 3: 1x1 conv → ReLU → 5x5 conv → ReLU
        Branch 4: 3x3 max pool → 1x1 conv → ReLU
    """

    kind = "concatenation"

    def __init__(self, in_channels, reductions, expansions):
        super().__init__()

        self.in_channels = in_channels
        self.out_channels = reductions[0] + expansions[0] + expansions[1] + reductions[3]

        self.branches = nn.ModuleList([
            nn.Sequential(
                nn.Conv2d(in_channels, reductions[0], kernel_size=1),
                nn.ReLU(inplace=True),
            ),
            nn.Sequential(
                nn.Conv2d(in_channels, reductions[1], kernel_size=1),
                nn.ReLU(inplace=True),
                nn.Conv2d(reductions[1], expansions[0], kernel_size=3),
                nn.ReLU(inplace=True),
            ),
            nn.Sequential(
                nn.Conv2d(in_channels, reductions[2], kernel_size=1),
                nn.ReLU(inplace=True),
                nn.Conv2d(reductions[2], expansions[1], kernel_size=5),
                nn.ReLU(inplace=True),
            ),
            nn.Sequential(
                nn.MaxPool2d(kernel_size=3, stride=1),
                nn.Conv2d(in_channels, reductions[3], kernel_size=1),
                nn.ReLU(inplace=True),
            ),
        ])

    def forward(self, x):
        outputs = [branch(x) for branch in self.branches]
        return depth_concat(outputs)


def depth_concat(tensors):
    """
    Concatenate (N, C, H, W) tensors along C, zero-padding smaller maps.

    Each map is centred in the largest height/width among the inputs;
    when the size difference is odd the extra row/column goes after.
    """
    out_h = max(t.shape[2] for t in tensors)
    out_w = max(t.shape[3] for t in tensors)

    padded = []
    for t in tensors:
        diff_h = out_h - t.shape[2]
        diff_w = out_w - t.shape[3]
        if diff_h or diff_w:
            t = F.pad(t, (diff_w // 2, diff_w - diff_w // 2,
                          diff_h // 2, diff_h - diff_h // 2))
        padded.append(t)

    return torch.cat(padded, dim=1)


def inception_module(input_channels, output_channels, reductions, expansions):
    """
    Build an InceptionModule after checking its declared output width.

    Args:
        input_channels: Channels entering the module
        output_channels: Expected output width (only used as a check)
        reductions: 4 channel counts, one per 1x1 convolution
        expansions: 2 channel counts, for the 3x3 and 5x5 convolutions

    Returns:
        InceptionModule whose out_channels == output_channels

    Raises:
        ChannelMismatchError: if r1 + e1 + e2 + r4 != output_channels
    """
    if len(reductions) != 4:
        raise ValueError(f"Expected 4 reductions, got {len(reductions)}")
    if len(expansions) != 2:
        raise ValueError(f"Expected 2 expansions, got {len(expansions)}")

    computed = reductions[0] + expansions[0] + expansions[1] + reductions[3]
    if computed != output_channels:
        raise ChannelMismatchError(output_channels, computed)

    return InceptionModule(input_channels, reductions, expansions)


# =============================================================================
# DEMONSTRATION NETWORK
# =============================================================================

def second_arch(num_classes=NUM_CLASSES):
    """
    Demonstration network for 32x32 RGB inputs.

    Architecture:
        Conv 5x5 → ReLU → Dropout → Conv 3x3/2 → ReLU → Dropout →
        Inception (512) → Conv 3x3 → MaxPool 3/2 →
        Inception (1024) → AvgPool 5 → Flatten →
        Dense 512 → Dropout → Dense 256 → Dropout → Dense num_classes
    """
    net = nn.Sequential(
        nn.Conv2d(INPUT_CHANNELS, 64, kernel_size=5, stride=1),
        nn.ReLU(inplace=True),
        nn.Dropout(0.2),
        nn.Conv2d(64, 128, kernel_size=3, stride=2),
        nn.ReLU(inplace=True),
        nn.Dropout(0.2),
        inception_module(128, 512, reductions=[64, 64, 32, 128], expansions=[256, 64]),
        nn.Conv2d(512, 768, kernel_size=3, stride=1),
        nn.MaxPool2d(kernel_size=3, stride=2),
        inception_module(768, 1024, reductions=[64, 256, 256, 128], expansions=[320, 512]),
        nn.AvgPool2d(kernel_size=5, stride=1),
        nn.Flatten(),
        nn.Linear(1024, 512),
        nn.Dropout(0.4),
        nn.Linear(512, 256),
        nn.Dropout(0.4),
        nn.Linear(256, num_classes),
    )
    print(net)
    return net


# =============================================================================
# PRETRAINED MODELS
# =============================================================================

def strip_incompatible_layers(network):
    """
    Return a copy of `network` without batch-normalization layers.

    Only single images are visualized, so batch statistics are
    meaningless. The input Sequential is left untouched; the returned
    one shares the remaining layer objects.
    """
    kept = [module for module in network if layer_kind(module) != "batchnorm"]
    return nn.Sequential(*kept)


def load_model(filepath=MODEL_PATH):
    """
    Load a pickled nn.Sequential and strip its batch-normalization layers.

    Args:
        filepath: Path to a network saved with torch.save(model, path)

    Returns:
        nn.Sequential ready for single-image evaluation
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"No saved model at {filepath}")

    net = torch.load(filepath, map_location="cpu", weights_only=False)
    if not isinstance(net, nn.Sequential):
        raise TypeError(f"Expected a saved nn.Sequential, got {type(net).__name__}")

    net = strip_incompatible_layers(net)
    print(f"Model loaded from {filepath}")
    print(net)
    return net
