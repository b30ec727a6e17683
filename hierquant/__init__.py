"""hierquant: dominant color extraction by hierarchical PCA splitting."""
from hierquant.pixel_source import ArrayPixelSource, PixelSource, load_image
from hierquant.quantizer import (
    HierarchicalQuantizer,
    QuantizationResult,
    quantize,
    render_quantized,
)
from hierquant.types import (
    DimensionMismatch,
    EmptyClassError,
    FactorizationError,
    NoEligibleLeafError,
    QuantizationError,
    QuantizerConfig,
)

__version__ = "0.1.0"

__all__ = [
    "ArrayPixelSource",
    "PixelSource",
    "load_image",
    "HierarchicalQuantizer",
    "QuantizationResult",
    "quantize",
    "render_quantized",
    "QuantizerConfig",
    "QuantizationError",
    "FactorizationError",
    "DimensionMismatch",
    "NoEligibleLeafError",
    "EmptyClassError",
]
