"""depsweep: find declared npm dependencies that your source never imports."""

__version__ = "0.3.0"
