"""
Filter Response Visualizer - Main Entry Point
=============================================
Pushes one image through an Inception network and renders the
first layer's filter responses.

Usage:
    python -m inception_viz.run_experiment                  # Save PNGs for 'frog-1'
    python -m inception_viz.run_experiment --display        # Draw to figures instead
    python -m inception_viz.run_experiment --load-model     # Use model-nets/model--float.net
    python -m inception_viz.run_experiment --all-layers     # Visualize every layer
"""

import argparse

import matplotlib.pyplot as plt

from inception_viz.config import (
    FILTER_RESPONSES_DIR, MODEL_PATH, DEFAULT_OBJECT_NAME,
    USE_LOADED_MODEL, DIRECT_DISPLAY, VISUALIZE_ALL_LAYERS
)
from inception_viz.capture import get_layer_responses
from inception_viz.data_loader import load_image, default_image_path
from inception_viz.model import second_arch, load_model
from inception_viz.visualization import visualize_filter_responses, clear_plots


def build_parser():
    parser = argparse.ArgumentParser(
        description="Visualize per-layer filter responses of an Inception network"
    )
    parser.add_argument(
        '--load-model', action=argparse.BooleanOptionalAction, default=USE_LOADED_MODEL,
        help='Load a pretrained network instead of building the demonstration one'
    )
    parser.add_argument(
        '--model-path', type=str, default=MODEL_PATH,
        help=f'Pretrained network file (default: {MODEL_PATH})'
    )
    parser.add_argument(
        '--image', type=str, default=default_image_path(),
        help='Input image (default: %(default)s)'
    )
    parser.add_argument(
        '--object-name', type=str, default=DEFAULT_OBJECT_NAME,
        help='Folder name for saved responses (default: %(default)s)'
    )
    parser.add_argument(
        '--display', action=argparse.BooleanOptionalAction, default=DIRECT_DISPLAY,
        help='Draw responses to figures instead of saving PNGs'
    )
    parser.add_argument(
        '--all-layers', action=argparse.BooleanOptionalAction, default=VISUALIZE_ALL_LAYERS,
        help='Visualize every layer rather than only the first'
    )
    parser.add_argument(
        '--output-dir', type=str, default=FILTER_RESPONSES_DIR,
        help='Root folder of the export tree (default: %(default)s)'
    )
    parser.add_argument(
        '--show', action=argparse.BooleanOptionalAction, default=True,
        help='Open the figure windows at the end of the run'
    )
    return parser


def run(image_path, object_name, load_pretrained=USE_LOADED_MODEL, model_path=MODEL_PATH,
        direct_display=DIRECT_DISPLAY, all_layers=VISUALIZE_ALL_LAYERS,
        output_dir=FILTER_RESPONSES_DIR):
    """
    Load the image and model, capture responses and visualize them.

    Returns:
        What visualize_filter_responses() returns (paths or figure numbers)
    """
    clear_plots()

    image = load_image(image_path)
    if load_pretrained:
        model = load_model(model_path)
    else:
        model = second_arch()

    responses = get_layer_responses(model, image)
    return visualize_filter_responses(
        responses, image, object_name,
        direct_display=direct_display,
        all_layers=all_layers,
        root=output_dir,
    )


def main(argv=None):
    """Main entry point for the visualizer."""
    args = build_parser().parse_args(argv)

    print("\n" + "=" * 60)
    print("FILTER RESPONSE VISUALIZER")
    print("=" * 60)

    run(
        args.image, args.object_name,
        load_pretrained=args.load_model,
        model_path=args.model_path,
        direct_display=args.display,
        all_layers=args.all_layers,
        output_dir=args.output_dir,
    )

    if args.show:
        plt.show()


if __name__ == "__main__":
    main()
