"""
projectseed — Bootstrap a GitHub repository and Projects (v2) board from a CSV.

Usage:
    projectseed --csv issues.csv              # flags override config
    python3 -m projectseed --help             # CLI flags reference

Requires: gh CLI authenticated (gh auth login).
"""

from .cli import main

__version__ = "0.1.0"
