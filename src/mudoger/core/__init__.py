"""Step engine: verification, sequencing and audit logging."""
