"""dv: development and release tasks for Python projects."""

__version__ = "0.4.0"
