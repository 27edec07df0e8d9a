"""Shared constants for the Textual UI."""

from __future__ import annotations

from pathlib import Path

SPECTRAL_GREEN = "#7CFFB2"
PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_PATH = PROJECT_ROOT / "config.json"
