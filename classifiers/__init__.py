"""
URL classifiers for custom pages.

This package contains the pure, unit-testable classification engine
that maps user-supplied URLs to canonical paths and labels.
"""

from .url_classifier import (
    UrlClassifier,
    ClassificationResult,
    Valid,
    InvalidDomain,
    InvalidPath,
    INVALID_DOMAIN,
    INVALID_PATH
)
from .labels import slug_to_label

__all__ = [
    'UrlClassifier',
    'ClassificationResult',
    'Valid',
    'InvalidDomain',
    'InvalidPath',
    'INVALID_DOMAIN',
    'INVALID_PATH',
    'slug_to_label'
]
