"""Infrastructure: concrete document-store implementations."""
