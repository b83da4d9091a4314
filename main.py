"""
StockPulse — Main Entry Point
`python main.py` serves the API; `python main.py AAPL` prints one analysis as JSON.
"""
import asyncio
import json
import sys

import uvicorn
from stockpulse.config.settings import get_settings
from stockpulse.utils.logger import setup_logging, get_logger

logger = get_logger("main")


def run_api():
    """Run the FastAPI application."""
    settings = get_settings()
    setup_logging()
    logger.info("starting_stockpulse", version=settings.version, port=settings.port)
    uvicorn.run(
        "stockpulse.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


async def analyze_once(ticker: str) -> int:
    from stockpulse.api.app import clean_ticker, get_orchestrator
    from stockpulse.data.result import InputError, TickerNotFoundError

    orchestrator = get_orchestrator()
    try:
        result = await orchestrator.analyze(clean_ticker(ticker))
    except InputError as e:
        print(json.dumps({"error": str(e)}))
        return 2
    except TickerNotFoundError as e:
        print(json.dumps(e.validation.model_dump(mode="json", by_alias=True, exclude_none=True)))
        return 1
    finally:
        await orchestrator.market.disconnect()
        await orchestrator.news.disconnect()
        if orchestrator.scorer.client is not None:
            await orchestrator.scorer.client.disconnect()

    print(json.dumps(result.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2))
    return 0


if __name__ == "__main__":
    if len(sys.argv) > 1:
        setup_logging()
        sys.exit(asyncio.run(analyze_once(sys.argv[1])))
    run_api()
