# projectdocs/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from .config import settings
from .utils.logging import db_logger

SQLALCHEMY_DATABASE_URL = str(settings.DATABASE_URL)
db_logger.info(f"Connecting to database: {SQLALCHEMY_DATABASE_URL}")

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {},
    echo=False  # This will log all SQL statements
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def seed_admin(db: Session) -> None:
    """Create the bootstrap admin account on an empty user table"""
    from .models.user import User

    if db.query(User).first() is not None:
        return

    admin = User(
        login=settings.ADMIN_LOGIN,
        firstname="System",
        lastname="Admin",
        mail=settings.ADMIN_MAIL,
        admin=True
    )
    db.add(admin)
    db.commit()
    db_logger.info("Seeded bootstrap admin", extra={"login": admin.login})


def init_db() -> None:
    """Create all tables and seed the bootstrap admin"""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()
