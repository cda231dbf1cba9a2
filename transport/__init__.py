"""Transport layers: platform I/O only."""
