"""Application services: async task polling, OCR, question analysis and auth."""
