"""
Visualization Tools
===================
Rendering of captured filter responses, either to numbered matplotlib
figures or to heat-mapped PNGs laid out as

    filter-responses/object-<name>/layer-<k>/filter-<i>.png
"""

import os
from dataclasses import dataclass
from pathlib import Path

import matplotlib.pyplot as plt

from inception_viz.config import (
    FILTER_RESPONSES_DIR, MAX_CHANNELS_PER_LAYER, FIGURE_LAYER_BASE,
    INPUT_FIGURE_IDS, COLORMAP, DIRECT_DISPLAY, VISUALIZE_ALL_LAYERS
)
from inception_viz.errors import MissingObjectNameError


@dataclass(frozen=True)
class ExportTarget:
    """Where one channel of one layer's response is saved."""

    object_name: str
    layer_index: int
    channel_index: int  # 1-based

    def object_dir(self, root=FILTER_RESPONSES_DIR):
        return Path(root) / f"object-{self.object_name}"

    def layer_dir(self, root=FILTER_RESPONSES_DIR):
        return self.object_dir(root) / f"layer-{self.layer_index}"

    def path(self, root=FILTER_RESPONSES_DIR):
        return self.layer_dir(root) / f"filter-{self.channel_index}.png"


def figure_id(layer_index, channel_index):
    """Figure number used for a channel in direct-display mode."""
    return layer_index * FIGURE_LAYER_BASE + channel_index


def _render(figure_num, plane):
    plt.figure(figure_num)
    plt.clf()
    plt.imshow(plane, cmap=COLORMAP)
    plt.colorbar()


def show_input_planes(original_image):
    """
    Draw the three colour planes of a (1, 3, H, W) image to figures 1-3.

    Returns:
        List of figure numbers used
    """
    image = original_image.detach().cpu().numpy()
    for channel, figure_num in enumerate(INPUT_FIGURE_IDS):
        _render(figure_num, image[0, channel])
    return list(INPUT_FIGURE_IDS)


def visualize_filter_responses(responses, original_image, object_name=None,
                               direct_display=DIRECT_DISPLAY, all_layers=VISUALIZE_ALL_LAYERS,
                               root=FILTER_RESPONSES_DIR):
    """
    Render the first channels of captured layer responses.

    At most MAX_CHANNELS_PER_LAYER channels are drawn per layer. Unless
    all_layers is set, processing stops after the first layer. The input
    image planes are drawn to figures 1-3 afterwards in every mode.

    Args:
        responses: List of LayerActivation from get_layer_responses()
        original_image: Input tensor of shape (1, 3, H, W)
        object_name: Folder name under root; required unless direct_display
        direct_display: Draw to figures instead of saving PNGs
        all_layers: Visualize every layer, not just the first
        root: Root folder of the export tree

    Returns:
        List of saved file paths, or of figure numbers in display mode
    """
    if not direct_display and not object_name:
        raise MissingObjectNameError()

    rendered = []
    try:
        for response in responses:
            if response.tensor.dim() != 4:
                print(f"  Skipping layer {response.layer_index} ({response.layer_kind}): "
                      f"no spatial maps in shape {tuple(response.tensor.shape)}")
            else:
                print(f"Number of filter responses for layer {response.layer_index}: "
                      f"{response.num_channels}")
                maps = response.tensor[0].detach().cpu().numpy()
                num_rendered = min(response.num_channels, MAX_CHANNELS_PER_LAYER)

                for channel_index in range(1, num_rendered + 1):
                    plane = maps[channel_index - 1]
                    if direct_display:
                        num = figure_id(response.layer_index, channel_index)
                        _render(num, plane)
                        rendered.append(num)
                    else:
                        target = ExportTarget(object_name, response.layer_index, channel_index)
                        os.makedirs(target.layer_dir(root), exist_ok=True)
                        plt.imsave(target.path(root), plane, cmap=COLORMAP)
                        rendered.append(target.path(root))

            if not all_layers:
                break
    finally:
        show_input_planes(original_image)

    if not direct_display:
        print(f"Saved {len(rendered)} filter responses under "
              f"{Path(root) / f'object-{object_name}'}")

    return rendered


def clear_plots():
    """Close every open figure."""
    plt.close('all')
