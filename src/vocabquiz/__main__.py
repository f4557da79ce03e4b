"""Main entry point for the quiz engine."""
import asyncio
import signal
from typing import Optional

from vocabquiz import __version__
from vocabquiz.app import VocabQuizApp
from vocabquiz.logging_config import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_SIGNALS = (signal.SIGTERM, signal.SIGINT)


async def main(stop_event: Optional[asyncio.Event] = None) -> None:
    """Run the engine until SIGINT/SIGTERM, flushing writes on exit."""
    stop_event = stop_event or asyncio.Event()
    loop = asyncio.get_running_loop()
    installed = []
    for sig in EXIT_SIGNALS:
        try:
            loop.add_signal_handler(sig, stop_event.set)
            installed.append(sig)
        except (NotImplementedError, RuntimeError) as e:
            logger.debug(f"Signal handler for {sig.name} not installed: {e}")

    app = VocabQuizApp()
    try:
        await app.start()
        stats = app.stats_service.get_stats()
        logger.info(
            f"{stats.total_words} words ({stats.due_words} due), "
            f"{stats.total_quizzes} quizzes, streak {stats.streak.streak}"
        )
        await stop_event.wait()
        logger.info("Received exit signal...")
    finally:
        logger.info("Cleaning up...")
        await app.stop()
        for sig in installed:
            loop.remove_signal_handler(sig)


def run() -> None:
    """Configure logging and run the engine."""
    setup_logging(f"Starting vocabquiz v{__version__} ...")
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")


if __name__ == "__main__":
    run()
