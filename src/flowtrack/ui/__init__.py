"""User-facing entry points: command line and HTTP."""
