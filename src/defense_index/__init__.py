"""Global Defense Index.

Ranks nations and aircraft by a curated power score over a runtime-editable
stat schema, kept in sync through one shared document.
"""

__version__ = "0.1.0"
