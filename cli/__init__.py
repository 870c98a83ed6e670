"""
Command line interface for Slither Digest.
"""
