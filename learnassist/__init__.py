"""learnassist: async client for the learning-assistant backend.

Covers question-image OCR, step-by-step question analysis, the bearer
credential lifecycle and a short-lived response cache.
"""

__version__ = "0.3.0"
