"""
Interface package.

Typer CLI, rich console rendering and interactive prompts.
"""
