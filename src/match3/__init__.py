"""Rules engine for a tile-matching puzzle built on esper and blinker."""
