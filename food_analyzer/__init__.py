"""Personal health-aware food package analyzer."""

__version__ = "0.1.0"
