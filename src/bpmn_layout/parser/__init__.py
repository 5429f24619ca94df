"""Document tree and plain-dict (de)serialization."""

from bpmn_layout.parser.document import dump_layout, load_document

__all__ = ["dump_layout", "load_document"]
