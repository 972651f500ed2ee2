"""
Image Loading for the Filter Response Visualizer
================================================
"""

import os

import numpy as np
import torch
from PIL import Image

from inception_viz.config import IMAGE_DIR, IMAGE_NAME, INPUT_SIZE


def default_image_path():
    """Path of the image visualized when none is given."""
    return os.path.join(IMAGE_DIR, IMAGE_NAME)


def load_image(path=None, size=INPUT_SIZE):
    """
    Load an image as a single-item RGB batch.

    Args:
        path: Image file (default: images/1.png)
        size: Side length the image is resized to; None keeps its size

    Returns:
        Float tensor of shape (1, 3, H, W) with values 0-1
    """
    if path is None:
        path = default_image_path()
    if not os.path.exists(path):
        raise FileNotFoundError(f"No input image at {path}")

    img = Image.open(path).convert('RGB')
    if size is not None and img.size != (size, size):
        img = img.resize((size, size), Image.BILINEAR)

    img_array = np.array(img, dtype=np.float32) / 255.0   # (H, W, 3)
    tensor = torch.from_numpy(img_array).permute(2, 0, 1).unsqueeze(0).contiguous()

    print("Input to model dimensions:")
    print(f"  {tuple(tensor.shape)}")
    return tensor
