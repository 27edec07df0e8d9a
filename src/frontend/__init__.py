"""Textual config panel for hauntscope."""
