import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# ==================== GENERATIVE MODEL ====================
# "bedrock" uses the ambient AWS credentials, "anthropic" needs an API key
MODEL_PROVIDER = os.getenv("MODEL_PROVIDER", "bedrock").lower()
MODEL_ID = os.getenv("MODEL_ID") or (
    "amazon.nova-premier-v1:0" if MODEL_PROVIDER == "bedrock" else "claude-3-haiku-20240307"
)
MODEL_TEMPERATURE = float(os.getenv("MODEL_TEMPERATURE", "0.7"))
MODEL_MAX_TOKENS = int(os.getenv("MODEL_MAX_TOKENS", "2000"))
MODEL_TOP_P = float(os.getenv("MODEL_TOP_P", "0.9"))

# Either a raw key or the name of a Secrets Manager secret holding {"apiKey": "..."}
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
MODEL_SECRET_NAME = os.getenv("MODEL_SECRET_NAME", "")
ANTHROPIC_API_URL = os.getenv("ANTHROPIC_API_URL", "https://api.anthropic.com/v1/messages")
ANTHROPIC_VERSION = os.getenv("ANTHROPIC_VERSION", "2023-06-01")

# "json" asks the model for a JSON array, "pairs" for Brand Name:/Tagline: blocks
BRAND_OUTPUT_FORMAT = os.getenv("BRAND_OUTPUT_FORMAT", "json")

REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))

# ==================== DOMAIN REGISTRY ====================
# Route 53 Domains is only served out of us-east-1
REGISTRY_REGION = os.getenv("REGISTRY_REGION", "us-east-1")
AWS_REGION = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "us-east-1"

DEFAULT_BATCH_DELAY_MS = int(os.getenv("DEFAULT_BATCH_DELAY_MS", "1000"))
DEFAULT_SUGGESTION_COUNT = int(os.getenv("DEFAULT_SUGGESTION_COUNT", "20"))

# ==================== HTTP ====================
CORS_ALLOW_ORIGIN = os.getenv("CORS_ALLOW_ORIGIN", "*")
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def configure_logging(level: str = LOG_LEVEL):
    """Configure root logging once for an entry point."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
