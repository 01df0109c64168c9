"""
Command line interface for Pienkuu.
"""
