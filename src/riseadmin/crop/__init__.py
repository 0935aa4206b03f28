"""
Crop-and-encode pipeline.

The selector model and the extractor are pure with respect to the UI; the
session in :mod:`riseadmin.crop.session` wires them to Qt workers.
"""

from .extractor import extract, try_extract
from .geometry import CropOutcome, CropRegion, EncodedResult, ViewState
from .model import CropSelectorModel

__all__ = [
    "CropOutcome",
    "CropRegion",
    "CropSelectorModel",
    "EncodedResult",
    "ViewState",
    "extract",
    "try_extract",
]
