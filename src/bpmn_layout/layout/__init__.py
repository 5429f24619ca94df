"""Automatic layout: grid placement, pool layout and connection routing."""

from bpmn_layout.layout.config import LayoutConfig
from bpmn_layout.layout.engine import LayoutContext, Layouter, layout_document
from bpmn_layout.layout.grid import Grid

__all__ = ["Grid", "LayoutConfig", "LayoutContext", "Layouter", "layout_document"]
