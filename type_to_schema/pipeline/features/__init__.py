"""
Features module.

Feature definitions, their validation against schema kinds and the
overlay pass that applies them to resolved schemas.
"""

from __future__ import annotations

from .nodes import FEATURES_BY_NAME, Feature, FeatureSet
from .overlay import FeatureOverlay
from .validation import VALIDATION_GATES, validate_feature, validate_features

__all__ = [
    "Feature",
    "FeatureSet",
    "FEATURES_BY_NAME",
    "FeatureOverlay",
    "VALIDATION_GATES",
    "validate_feature",
    "validate_features",
]
