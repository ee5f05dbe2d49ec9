"""GridRun -- run progression and asynchronous matchmaking for a deck-building autobattler."""

__version__ = "0.1.0"
