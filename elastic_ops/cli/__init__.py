"""Command line interface (``python -m elastic_ops.cli``)."""
