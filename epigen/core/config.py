import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

logger = logging.getLogger(__name__)

# Generation Configuration
AI_API_KEY = os.getenv("AI_API_KEY") or os.getenv("GEMINI_API_KEY")
AI_MODEL = os.getenv("AI_MODEL", "gemini-2.5-flash")
AI_API_BASE_URL = os.getenv("AI_API_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
AI_TEMPERATURE = float(os.getenv("AI_TEMPERATURE", "0.7"))
GENERATION_TIMEOUT = float(os.getenv("GENERATION_TIMEOUT", "60"))
GENERATION_SOURCE = os.getenv("GENERATION_SOURCE", "digiconsumers.fi")

# Tree Configuration
SIMILARITY_THRESHOLD = float(os.getenv("SIMILARITY_THRESHOLD", "0.7"))
TREE_TOPOLOGIES = ("branching", "linear")
TREE_TOPOLOGY = os.getenv("TREE_TOPOLOGY", "branching").lower()
if TREE_TOPOLOGY not in TREE_TOPOLOGIES:
    logger.warning(f"Unknown TREE_TOPOLOGY '{TREE_TOPOLOGY}', using 'branching'")
    TREE_TOPOLOGY = "branching"
LINEAR_TITLE_MAX_LENGTH = int(os.getenv("LINEAR_TITLE_MAX_LENGTH", "80"))
LINEAR_MIN_STEPS = 2
LINEAR_MAX_STEPS = 6

# Application Configuration
SEARCH_DEFAULT_LIMIT = int(os.getenv("SEARCH_DEFAULT_LIMIT", "50"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
