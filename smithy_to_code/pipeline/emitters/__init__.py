"""
Emitters module.

Contains the type, service and client emitters and their shared base.
"""

from __future__ import annotations

from .base import GENERATION_COMMENT, TARGET_KINDS, Artifact, Emitter, TargetKind, target_kind
from .client_emitter import ClientEmitter
from .service_emitter import ServiceEmitter
from .type_emitter import TypeEmitter

__all__ = [
    "Artifact",
    "Emitter",
    "TargetKind",
    "TARGET_KINDS",
    "GENERATION_COMMENT",
    "target_kind",
    "TypeEmitter",
    "ServiceEmitter",
    "ClientEmitter",
]
