"""Export ioBroker certificate collections as PEM files."""

__version__ = "1.0.0"
