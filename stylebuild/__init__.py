"""stylebuild — stylesheet and documentation build pipeline."""

__version__ = "0.1.0"
