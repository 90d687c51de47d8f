"""
Configuration constants
"""
import os

# Server
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3334
SERVER_NAME = "browser-session-mcp"
SERVER_VERSION = "1.0.0"

# Screenshot output directory
SCREENSHOT_DIR = ".playwright-mcp"

# Browser
VIEWPORT = {"width": 1280, "height": 800}
NAVIGATION_WAIT_UNTIL = "domcontentloaded"

# Diagnostics
MAX_BUFFER_SIZE = 100
DEFAULT_DIAGNOSTICS_LIMIT = 50

# Actions
SCROLL_AMOUNT = 500
HIGHLIGHT_FLASHES = 3
HIGHLIGHT_OUTLINE = "3px solid #ff6b00"

# Page structure queries
MAX_STRUCTURE_ITEMS = 50

# Vision
OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"
OPENAI_VISION_MODEL = "gpt-4o"
ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VISION_MODEL = "claude-sonnet-4-20250514"
ANTHROPIC_API_VERSION = "2023-06-01"
VISION_MAX_TOKENS = 1000
VISION_TIMEOUT = 60.0  # seconds


def openai_api_key():
    return os.environ.get("OPENAI_API_KEY") or None


def anthropic_api_key():
    return os.environ.get("ANTHROPIC_API_KEY") or None
