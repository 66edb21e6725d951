"""
Attis Command-Line Interface
============================

This package provides the `attis` command, the driver for the Cybele
front end. It is implemented as a Click-based CLI application.
"""

__all__ = ["attis"]
