"""Domain models and errors.

Why:
- Pure data structures (Pydantic v2) and the error hierarchy live here.
- The domain knows nothing about subprocesses, zip files or the CLI.
"""
