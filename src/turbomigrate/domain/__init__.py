"""
Domain package.

Pure models, error taxonomy, result types and the run state machine.
"""
