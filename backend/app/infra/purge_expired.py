# app/infra/purge_expired.py
#
# One-shot cleanup for an external scheduler (cron, managed scheduled job):
#     python -m app.infra.purge_expired
# The web process only filters expired rows at read time.

import logging

from app.core.config import load_settings
from app.core.message import purge_expired
from app.infra.postgres import create_store_engine, db_session, make_session_factory
from app.utils.logger import setup_logger

logger = logging.getLogger(__name__)


def main() -> int:
    settings = load_settings()
    setup_logger(settings.log_level)

    factory = make_session_factory(create_store_engine(settings))
    with db_session(factory) as db:
        deleted = purge_expired(db)

    logger.info("Purged %d expired message(s)", deleted)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
