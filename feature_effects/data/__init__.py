"""Feature Effects - Data Components.

Immutable dataset container used as the substrate for effect computation.

Example:
    >>> from feature_effects.data import Dataset
    >>> ds = Dataset.from_frame(X_test)
"""

from .dataset import Dataset

__all__ = [
    'Dataset'
]
