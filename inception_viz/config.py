"""
Configuration Constants for the Filter Response Visualizer
==========================================================
Defaults reproduce a single offline run: the demonstration network is
built, one 32x32 image is pushed through it and the first layer's
filter responses are written to disk.
"""

# =============================================================================
# PATHS
# =============================================================================

FILTER_RESPONSES_DIR = "filter-responses"   # Root of the export tree
IMAGE_DIR = "images"
IMAGE_NAME = "1.png"
MODEL_PATH = "model-nets/model--float.net"  # Pickled nn.Sequential

# =============================================================================
# NETWORK INPUT
# =============================================================================

INPUT_CHANNELS = 3            # RGB
INPUT_SIZE = 32               # second_arch() is sized for 32x32 inputs
NUM_CLASSES = 10

# =============================================================================
# VISUALIZATION
# =============================================================================

MAX_CHANNELS_PER_LAYER = 5    # Channels beyond this are not rendered
FIGURE_LAYER_BASE = 10        # Figure id = layer * base + channel
INPUT_FIGURE_IDS = (1, 2, 3)  # One figure per input colour plane
COLORMAP = "jet"              # Heat map used for every rendered slice

# =============================================================================
# RUN DEFAULTS
# =============================================================================

DEFAULT_OBJECT_NAME = "frog-1"
USE_LOADED_MODEL = False      # False builds second_arch() instead
DIRECT_DISPLAY = False        # False saves PNGs under FILTER_RESPONSES_DIR
VISUALIZE_ALL_LAYERS = False  # False stops after the first captured layer
