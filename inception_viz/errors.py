"""Exceptions raised while building, evaluating and exporting a network."""


class ChannelMismatchError(ValueError):
    """Declared inception output width differs from the sum of its branches."""

    def __init__(self, expected, computed):
        self.expected = expected
        self.computed = computed
        super().__init__(
            f"Output channels do not match computed output channels: "
            f"declared {expected}, branches sum to {computed}"
        )


class MissingObjectNameError(ValueError):
    """File export was requested without an object name."""

    def __init__(self):
        super().__init__("An object name is required when saving filter responses to file")


class UnevaluatedLayerError(RuntimeError):
    """A layer has no output because the forward pass has not been run."""

    def __init__(self, layer_index, layer_kind):
        self.layer_index = layer_index
        self.layer_kind = layer_kind
        super().__init__(
            f"Layer {layer_index} ({layer_kind}) has no output; run a forward pass first"
        )
