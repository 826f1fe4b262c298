"""Command-line front end for eUICC profile management with pluggable APDU and HTTP drivers."""

__version__ = "0.1.0"