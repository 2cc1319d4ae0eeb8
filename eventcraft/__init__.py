"""EventCraft notification backend.

Ensures the local ``eventcraft`` package is resolved as a regular package
rather than a namespace package.
"""
