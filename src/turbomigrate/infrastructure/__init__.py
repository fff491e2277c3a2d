"""
Infrastructure package.

Config file I/O, external tooling and logging setup.
"""
