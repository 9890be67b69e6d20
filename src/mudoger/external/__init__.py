"""Wrappers around the external programs MuDoGeR orchestrates."""
