"""
Fintrax - Source Package

A personal expense tracker: sign in, record expenses, search and filter
them, and see where the money went.

DESIGN PRINCIPLES:
1. Sanitize → Validate → Persist → Mirror
2. Every record belongs to exactly one identity
3. The local mirror changes only after the backend confirms
4. Every step is logged
5. Identity and storage backends are swappable
"""

__version__ = "1.0.0"
__author__ = "Fintrax Team"
