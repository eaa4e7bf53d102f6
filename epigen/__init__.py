"""EpiGen: generated decision trees for youth financial well-being problems."""

__version__ = "0.1.0"
