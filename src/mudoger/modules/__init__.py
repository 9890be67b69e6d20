"""Data processing used by the pipeline steps (tables, sequences, bins)."""
