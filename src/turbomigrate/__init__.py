"""
turbomigrate - Smarter drizzle migrations for Cloudflare D1.

Finds the wrangler and drizzle configs of a project, resolves which
environment, database and migration file to use (asking only when there is
a real choice), then runs ``wrangler d1 execute`` against it.

Usage:
    # CLI
    turbomigrate --remote --dir ./my-worker

    # Programmatic
    from turbomigrate.application.orchestrator import MigrationOrchestrator
"""

__version__ = "0.1.0"
__author__ = "turbomigrate contributors"

__all__ = ["__version__"]
