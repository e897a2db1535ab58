"""Initialize the database with the community and its admin user."""

from sqlalchemy.orm import Session

from authentication.auth import get_password_hash
from helpers.sanitization import normalize_email
from models.config import settings
from repositories.community_repository import CommunityRepository
from repositories.database import Base, SessionLocal, engine
from repositories.db_models import AuthProvider, Community, PermissionLevel, User
from repositories.transaction import transaction
from repositories.user_repository import UserRepository


def seed_community(db: Session) -> tuple[User, Community]:
    """
    Create the admin user and the community if they are missing.

    The admin is a member of the community it administers. Running this
    twice changes nothing.

    Returns:
        (admin user, community)
    """
    users = UserRepository(db)
    communities = CommunityRepository(db)

    with transaction(db, "seed community"):
        email = normalize_email(settings.ADMIN_EMAIL)
        admin = users.get_by_email(email)
        if admin is None:
            admin = users.add(
                User(
                    first_name="Community",
                    last_name="Admin",
                    email=email,
                    hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
                    auth_provider=AuthProvider.LOCAL,
                    company="Administration",
                    job_title="Administrator",
                    industry="Other",
                    permission_level=PermissionLevel.ADMIN,
                )
            )
            print("[OK] Admin user created")
            print(f"  Email: {email}")
            print("  Password: (from ADMIN_PASSWORD in .env)")
        elif admin.permission_level != PermissionLevel.ADMIN:
            admin.permission_level = PermissionLevel.ADMIN

        community = communities.get_singleton()
        if community is None:
            community = communities.add(
                Community(
                    name=settings.COMMUNITY_NAME,
                    description=settings.COMMUNITY_DESCRIPTION,
                    admin_user_id=admin.id,
                )
            )
            print(f"[OK] Community created: {community.name}")

        if admin.community_id is None:
            admin.community_id = community.id

    return admin, community


def init_db() -> None:
    """Create tables and seed default data."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_community(db)
        print("\n[OK] Database initialization complete!")
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
