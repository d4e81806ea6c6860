"""
Configuration management module for vidprobe.

Handles application settings, API credentials and HTTP tuning read from
environment variables.
"""

from __future__ import annotations

__all__: list[str] = []
