"""Core parsing, IR, and rendering for mmpp."""
