"""EIL login portal backend."""
