import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "backend"))

import logging

from sqlalchemy import text

from fieldbook.database import SessionLocal, engine
from fieldbook.models.generated import Base, Venues
from fieldbook.services.slots import SlotsRepository, fix_missing_time_slots

logger = logging.getLogger(__name__)


def init_db(bind, session_factory) -> list[int]:
    """Create missing tables, then build grids for approved venues without one."""
    Base.metadata.create_all(bind)

    db = session_factory()
    try:
        db.execute(text("SELECT 1"))
        logger.info(f"Venues: {db.query(Venues).count()}")
        return fix_missing_time_slots(SlotsRepository(db))
    finally:
        db.close()


def main():
    logging.basicConfig(level=logging.INFO)
    fixed = init_db(engine, SessionLocal)
    print("Time slots generated for venues:", fixed or "none")


if __name__ == "__main__":
    main()
