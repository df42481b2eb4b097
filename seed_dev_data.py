"""Seed the development database with a demo profile, client and sessions."""

from app.backend.src.db import Base, get_engine, session_scope
from app.backend.src.services.seed import seed_development_data


def main() -> None:
    """Create tables (if needed) and ensure demo data exists."""

    engine = get_engine()
    Base.metadata.create_all(bind=engine)

    with session_scope() as session:
        result = seed_development_data(session)
        session.flush()

        print("✅ Development data ready!")
        profile_status = "created" if result.profile_created else "unchanged"
        client_status = "created" if result.client_created else "unchanged"
        print(f"Profile ({profile_status}): {result.profile.name}")
        print(
            f"Client ({client_status}): {result.client.name} "
            f"[id={result.client.id}, rate={result.client.hourly_rate}]"
        )
        print(f"Completed sessions added: {result.entries_created}")


if __name__ == "__main__":
    main()
