"""
Document Migration Engine

A resumable migration toolkit for moving structured records (documents,
tables) from a source data store into a destination data store.

Supports:
- Declarative document/field mappings with rename and ignore rules
- Per-field transformation handlers on the source or destination side
- Direct (insert-from-select) copy for documents that need no transformation
- Paged extract/transform/load for everything else
- Per-document progress checkpoints so interrupted steps can be rerun safely
"""

__version__ = "0.1.0"
