"""Discrete-time RMS/EDF uniprocessor scheduling simulator."""

__version__ = "0.2.0"
