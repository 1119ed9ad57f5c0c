"""HTTP API for Draftbox."""
