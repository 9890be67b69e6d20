"""Integration tests for MuDoGeR.

Whole modules run through the CLI with every external tool mocked.

Run with: pytest tests/integration/ -v
"""
