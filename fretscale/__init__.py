"""Fretted-instrument scale visualizer: scale detection and fretboard state."""
