"""
Application package.

Target and migration resolution, and the run orchestrator that sequences them.
"""
