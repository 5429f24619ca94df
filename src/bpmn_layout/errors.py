"""Exception hierarchy for bpmn-layout."""

from __future__ import annotations


class LayoutError(Exception):
    """Base class for all layout failures."""


class GridOccupiedError(LayoutError):
    """An explicit grid insert targeted a cell that already holds a node."""


class TraversalError(LayoutError):
    """Graph traversal could not place every node within its iteration bound."""


class DocumentError(LayoutError):
    """The input document is malformed or has nothing to lay out."""
