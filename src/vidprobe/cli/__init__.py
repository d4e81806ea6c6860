"""
Command-line interface for vidprobe.
"""
