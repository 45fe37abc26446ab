"""Artifact loading utilities for compiled smart contracts."""
from .loader import ArtifactRegistry, DEFAULT_ARTIFACTS_DIR, canonical_type

__all__ = ["ArtifactRegistry", "DEFAULT_ARTIFACTS_DIR", "canonical_type"]
