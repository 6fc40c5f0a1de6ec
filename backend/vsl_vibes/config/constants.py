"""
Constants configuration

Constants, API settings, and CORS configuration.
"""

# API settings
API_TITLE = "VSL Vibes API"
API_DESCRIPTION = "Turn video sales letter scripts into styled slide decks"
API_VERSION = "1.0.0"

# CORS origins
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://localhost:5173",
]

# Request body limit (scripts and base64 audio payloads)
MAX_REQUEST_BODY_BYTES = 25 * 1024 * 1024

# Slide canvas
SLIDE_WIDTH = 1920
SLIDE_HEIGHT = 1080

__all__ = [
    "API_TITLE",
    "API_DESCRIPTION",
    "API_VERSION",
    "CORS_ORIGINS",
    "MAX_REQUEST_BODY_BYTES",
    "SLIDE_WIDTH",
    "SLIDE_HEIGHT",
]
