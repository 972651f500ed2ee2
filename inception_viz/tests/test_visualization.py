"""
Tests for visualization.py — export tree layout, channel cap, first-layer
early exit, display figure numbering and the input-plane post-step.
"""
import os

import matplotlib.pyplot as plt
import numpy as np
import pytest
import torch
import torch.nn as nn

from inception_viz.capture import LayerActivation, get_layer_responses
from inception_viz.errors import MissingObjectNameError
from inception_viz.visualization import (
    ExportTarget, figure_id, visualize_filter_responses, show_input_planes, clear_plots
)


def _responses(*channel_counts, size=6):
    """One spatial LayerActivation per channel count, indices 1..N."""
    torch.manual_seed(2)
    return [
        LayerActivation(idx, "convolution", torch.rand(1, c, size, size))
        for idx, c in enumerate(channel_counts, start=1)
    ]


def _files(path):
    return sorted(os.listdir(path))


# ---------------------------------------------------------------------------
# File export
# ---------------------------------------------------------------------------

class TestFileExport:

    def test_channels_capped_at_five(self, tmp_path, image):
        paths = visualize_filter_responses(_responses(8), image, "frog-1", root=tmp_path)

        layer_dir = tmp_path / "object-frog-1" / "layer-1"
        assert _files(layer_dir) == [f"filter-{i}.png" for i in range(1, 6)]
        assert paths == [layer_dir / f"filter-{i}.png" for i in range(1, 6)]

    def test_fewer_channels_than_cap(self, tmp_path, image):
        visualize_filter_responses(_responses(3), image, "cat", root=tmp_path)

        assert _files(tmp_path / "object-cat" / "layer-1") == [
            "filter-1.png", "filter-2.png", "filter-3.png"
        ]

    def test_rerun_overwrites_without_error(self, tmp_path, image):
        responses = _responses(4)
        visualize_filter_responses(responses, image, "frog-1", root=tmp_path)
        visualize_filter_responses(responses, image, "frog-1", root=tmp_path)

        assert _files(tmp_path / "object-frog-1" / "layer-1") == [
            f"filter-{i}.png" for i in range(1, 5)
        ]

    def test_saved_files_are_png_images(self, tmp_path, image):
        visualize_filter_responses(_responses(1, size=7), image, "frog-1", root=tmp_path)

        saved = plt.imread(tmp_path / "object-frog-1" / "layer-1" / "filter-1.png")
        assert saved.shape[:2] == (7, 7)

    def test_only_first_layer_exported_by_default(self, tmp_path, image):
        visualize_filter_responses(_responses(2, 2, 2), image, "frog-1", root=tmp_path)

        assert _files(tmp_path / "object-frog-1") == ["layer-1"]

    def test_all_layers_exports_every_spatial_layer(self, tmp_path, image):
        responses = _responses(2, 7) + [LayerActivation(3, "linear", torch.rand(1, 10))]
        visualize_filter_responses(responses, image, "frog-1", all_layers=True, root=tmp_path)

        object_dir = tmp_path / "object-frog-1"
        assert _files(object_dir) == ["layer-1", "layer-2"]
        assert len(_files(object_dir / "layer-2")) == 5

    def test_one_dimensional_output_is_skipped(self, tmp_path, image):
        """A layer flattened to (F,) has no channel axis and is passed over."""
        torch.manual_seed(4)
        net = nn.Sequential(nn.Conv2d(3, 2, kernel_size=3), nn.Flatten(0))
        responses = get_layer_responses(net, image)
        assert responses[1].tensor.shape == (2 * 30 * 30,)

        paths = visualize_filter_responses(responses, image, "frog-1", all_layers=True, root=tmp_path)

        object_dir = tmp_path / "object-frog-1"
        assert _files(object_dir) == ["layer-1"]
        assert len(paths) == 2

    def test_scalar_output_is_skipped(self, tmp_path, image):
        responses = _responses(3) + [LayerActivation(2, "linear", torch.tensor(1.5))]
        visualize_filter_responses(responses, image, "frog-1", all_layers=True, root=tmp_path)

        assert _files(tmp_path / "object-frog-1") == ["layer-1"]


class TestMissingObjectName:

    @pytest.mark.parametrize("object_name", [None, ""])
    def test_file_export_without_name_raises(self, tmp_path, image, object_name):
        with pytest.raises(MissingObjectNameError):
            visualize_filter_responses(_responses(3), image, object_name, root=tmp_path)

        assert os.listdir(tmp_path) == []

    def test_display_mode_needs_no_name(self, image):
        visualize_filter_responses(_responses(1), image, direct_display=True)


# ---------------------------------------------------------------------------
# Direct display
# ---------------------------------------------------------------------------

class TestDirectDisplay:

    def test_figure_ids_follow_layer_and_channel(self, image):
        figures = visualize_filter_responses(_responses(8, 8), image, direct_display=True)

        assert figures == [11, 12, 13, 14, 15]
        assert sorted(plt.get_fignums()) == [1, 2, 3, 11, 12, 13, 14, 15]

    def test_figure_shows_channel_slice(self, image):
        responses = _responses(2)
        visualize_filter_responses(responses, image, direct_display=True)

        shown = plt.figure(12).axes[0].images[0].get_array()
        np.testing.assert_allclose(np.asarray(shown), responses[0].tensor[0, 1].numpy())

    def test_no_files_written(self, tmp_path, image):
        visualize_filter_responses(_responses(3), image, "frog-1", direct_display=True, root=tmp_path)

        assert os.listdir(tmp_path) == []


# ---------------------------------------------------------------------------
# Input planes
# ---------------------------------------------------------------------------

class TestInputPlanes:

    def test_input_planes_drawn_in_file_mode(self, tmp_path, image):
        visualize_filter_responses(_responses(1), image, "frog-1", root=tmp_path)

        assert sorted(plt.get_fignums()) == [1, 2, 3]

    def test_planes_match_input_channels(self, image):
        assert show_input_planes(image) == [1, 2, 3]

        for channel, num in enumerate([1, 2, 3]):
            shown = plt.figure(num).axes[0].images[0].get_array()
            np.testing.assert_allclose(np.asarray(shown), image[0, channel].numpy())

    def test_input_planes_drawn_when_export_fails(self, tmp_path, image, monkeypatch):
        def failing_imsave(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(plt, "imsave", failing_imsave)

        with pytest.raises(OSError):
            visualize_filter_responses(_responses(3), image, "frog-1", root=tmp_path)

        assert sorted(plt.get_fignums()) == [1, 2, 3]

    def test_clear_plots_closes_everything(self, image):
        show_input_planes(image)
        clear_plots()

        assert plt.get_fignums() == []


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------

class TestNaming:

    def test_export_target_path(self):
        target = ExportTarget("frog-1", 2, 4)

        assert target.object_dir("root") == target.layer_dir("root").parent
        assert str(target.path("root")) == os.path.join(
            "root", "object-frog-1", "layer-2", "filter-4.png"
        )

    def test_figure_id(self):
        assert figure_id(1, 1) == 11
        assert figure_id(3, 5) == 35
