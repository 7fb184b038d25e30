from sqlalchemy.orm import Session
from flowpad.db.models import User
from typing import Optional

class UserRepository:
    """Repository for user operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_google_id(self, google_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.google_id == google_id).first()

    def get_or_create(self, google_id: str, email: str, name: str) -> User:
        """
        Return the user for a Google subject id, creating it on first login.

        Args:
            google_id: Google ``sub`` claim
            email: Verified email address
            name: Display name

        Returns:
            Existing or newly created user
        """
        user = self.get_by_google_id(google_id)
        if user:
            return user

        user = User(google_id=google_id, email=email.lower(), name=name or email)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
