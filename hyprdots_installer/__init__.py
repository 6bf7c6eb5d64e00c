"""Hyprland/Quickshell dotfiles installer (Python-first, step-driven).

Core design goals:
- Fail fast before anything is mutated
- Stable, duplicate-free package planning
- Backups before every overwrite
- Warn-and-continue for package, recipe and service steps
- Centralized logging
"""

__all__ = []
