import logging

import uvicorn

from brandboffin import config

logger = logging.getLogger("brandboffin")


def main():
    config.configure_logging()
    logger.info(f"Starting API server on {config.API_HOST}:{config.API_PORT}")
    logger.info(f"Model: {config.MODEL_PROVIDER}/{config.MODEL_ID} ({config.BRAND_OUTPUT_FORMAT} output)")
    logger.info(f"Model API key configured: {'yes' if config.ANTHROPIC_API_KEY or config.MODEL_SECRET_NAME else 'no'}")
    uvicorn.run("brandboffin.app:app", host=config.API_HOST, port=config.API_PORT)


if __name__ == "__main__":
    main()
