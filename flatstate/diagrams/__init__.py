"""
Diagram package: Mermaid stateDiagram-v2 codec and Python skeleton generation.
"""

from .codegen import to_python
from .mermaid import from_mermaid, parse_label, to_mermaid

__all__ = ["from_mermaid", "parse_label", "to_mermaid", "to_python"]
