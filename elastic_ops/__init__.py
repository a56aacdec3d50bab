"""Shrinkage reports, product catalog and loading paper manifests for elastic products."""

__version__ = "0.3.0"
