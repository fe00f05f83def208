"""Load container network configurations and run network plugins."""

__version__ = "0.1.0"