"""HTTP service for semantic whiteboards."""
