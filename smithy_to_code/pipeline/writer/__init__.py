"""
Writer module.

Persists emitted artifacts: overwrite policies, backups, optional
formatting and atomic replacement.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .writer import ArtifactWriter, WriteFailure, WriteReport, WriteResult, WriteStatus

__all__ = [
    "AtomicWriter",
    "ArtifactWriter",
    "WriteFailure",
    "WriteReport",
    "WriteResult",
    "WriteStatus",
]
