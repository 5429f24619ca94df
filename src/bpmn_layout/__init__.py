"""bpmn-layout: automatic diagram layout for process models."""

__version__ = "0.1.0"

from bpmn_layout.errors import LayoutError
from bpmn_layout.layout import LayoutConfig, Layouter, layout_document
from bpmn_layout.parser import dump_layout, load_document

__all__ = [
    "LayoutConfig",
    "LayoutError",
    "Layouter",
    "__version__",
    "dump_layout",
    "layout_document",
    "load_document",
]
