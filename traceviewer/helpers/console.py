"""Shared console for all traceviewer output."""

from __future__ import annotations

from rich.console import Console

console = Console()
