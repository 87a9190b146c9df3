# main.py — FastAPI feed service
import asyncio
import logging

import uvicorn
from feedrank.config import settings
from feedrank.db import init_db
from feedrank.web.server import create_app

logger = logging.getLogger(__name__)
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL))

async def run():
    await init_db()

    web_app = create_app()
    server = uvicorn.Server(
        uvicorn.Config(
            web_app,
            host=settings.WEB_HOST,
            port=settings.WEB_PORT,
            log_level=settings.LOG_LEVEL.lower(),
        )
    )
    logger.info(f"Serving feed on {settings.WEB_HOST}:{settings.WEB_PORT}")
    await server.serve()

if __name__ == "__main__":
    try:
        asyncio.run(run())
    except (KeyboardInterrupt, SystemExit):
        pass
