import argparse
import asyncio

import structlog
from sqlalchemy import text

from floodline.core.config import settings
from floodline.core.logging import setup_logging
from floodline.db.base import Base
from floodline.db.session import AsyncSessionLocal, engine
from floodline.services.auth_service import AuthService
# Trigger model registration
from floodline.models import flood, help_request, missing_person, shelter, user  # noqa: F401

logger = structlog.get_logger()


async def init_models(bind=None) -> None:
    """
    Create missing tables and confirm the store answers. Raises on failure.
    """
    bind = bind or engine
    try:
        # Fail fast if the connection hangs (firewall, wrong host)
        async with asyncio.timeout(10):
            async with bind.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
                await conn.execute(text("SELECT 1"))
        logger.info("db_init_complete")
    except TimeoutError:
        logger.error("db_init_timeout", message="Connection to database timed out after 10s.")
        raise
    except Exception as e:
        logger.error("db_init_failed", error=str(e))
        raise


async def main(args: argparse.Namespace) -> None:
    await init_models()
    if args.with_admin:
        async with AsyncSessionLocal() as db:
            admin, created = await AuthService.bootstrap_admin(db)
        logger.info("admin_bootstrapped", email=admin.email, created=created)
    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create tables and optionally the default admin.")
    parser.add_argument(
        "--with-admin",
        action="store_true",
        help=f"create {settings.DEFAULT_ADMIN_EMAIL} (development only)",
    )
    setup_logging()
    asyncio.run(main(parser.parse_args()))
