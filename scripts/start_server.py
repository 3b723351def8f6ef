"""Start the reservation server"""

import asyncio
import sys
import logging
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def check_environment():
    """Check the runtime environment"""
    logger.info("Checking environment...")

    if sys.version_info < (3, 10):
        logger.error(f"Python too old: {sys.version_info}, 3.10+ required")
        return False

    try:
        import fastapi
        import pydantic
        import pydantic_settings
        import pytz
        import uvicorn
        logger.info("All required packages installed")
        return True
    except ImportError as e:
        logger.error(f"Missing package: {e}")
        logger.error("Run: pip install -e .")
        return False


def main():
    if not check_environment():
        sys.exit(1)

    try:
        from rail_reservations.server import main_server
    except ImportError as e:
        logger.error(f"Import error: {e}")
        sys.exit(1)

    logger.info("Starting reservation server...")
    asyncio.run(main_server())


if __name__ == "__main__":
    main()
