from sqlalchemy.orm import Session
from expense_tracker.core.security import TokenIdentity
from expense_tracker.models.user import User
from expense_tracker.repositories.store_errors import store_operation


class UserRepository:
    """Repository for User model operations"""

    def __init__(self, db: Session):
        self.db = db

    @store_operation("load user")
    def get_or_create_from_token(self, identity: TokenIdentity) -> User:
        """
        Get user by token subject or create if doesn't exist.

        Phone and role are refreshed from the token so statistics always
        show what the auth service currently reports.

        Args:
            identity: Verified claims from the access token

        Returns:
            User object (either existing or newly created)
        """
        user = self.db.query(User).filter(User.auth_user_id == identity.auth_user_id).first()

        if not user:
            user = User(
                auth_user_id=identity.auth_user_id,
                phone=identity.phone,
                role=identity.role,
            )
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user

        changed = False
        if identity.phone is not None and user.phone != identity.phone:
            user.phone = identity.phone
            changed = True
        if user.role != identity.role:
            user.role = identity.role
            changed = True
        if changed:
            self.db.commit()
            self.db.refresh(user)

        return user
