"""
Santorini - Tower-building board game rules engine

A deterministic, authoritative engine for 2-4 player matches on a 5x5 grid.
The engine provides:
- Board state (heights, domes, workers)
- Legal move generation per phase
- Turn and phase rotation
- Climb-win and no-moves detection
- Bot policies for automated play
"""

__version__ = "0.1.0"
