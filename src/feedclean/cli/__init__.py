"""CLI for feedclean.

This module provides a Typer-based CLI for sanitizing feed fragments and
checking forced-HTTPS domain rules.

Requires the 'cli' optional dependency: pip install feedclean[cli]
"""

from __future__ import annotations
