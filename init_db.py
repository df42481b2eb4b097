from app.backend.src.core.config import get_settings
from app.backend.src.db import Base, get_engine
from app.backend.src.models import *  # noqa


def init_db():
    print(f"🚀 Connecting to {get_settings().database_url}")
    Base.metadata.create_all(bind=get_engine())
    print("✅ Tables created successfully!")


if __name__ == "__main__":
    init_db()
