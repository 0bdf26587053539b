"""Task data sources: real backend and local fixtures."""
