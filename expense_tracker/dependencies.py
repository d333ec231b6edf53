from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from expense_tracker.core.security import extract_identity
from expense_tracker.core.exceptions import UnauthorizedException, ForbiddenException
from expense_tracker.database import get_db
from expense_tracker.repositories.user_repository import UserRepository
from expense_tracker.models.caller_context import CallerContext

security = HTTPBearer(auto_error=False)


async def get_caller_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> CallerContext:
    """
    FastAPI dependency to validate JWT and build the caller context.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using shared SECRET_KEY
    3. Read 'sub', 'role' and 'phone' claims
    4. Get or auto-create User record
    5. Return CallerContext passed explicitly to services

    Raises:
        HTTPException 401: If token missing, invalid or expired
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        identity = extract_identity(credentials.credentials)
    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = UserRepository(db).get_or_create_from_token(identity)
    return CallerContext(user=user, role=identity.role)


async def require_admin(context: CallerContext = Depends(get_caller_context)) -> CallerContext:
    """FastAPI dependency allowing only admin callers through"""
    if not context.is_admin():
        raise ForbiddenException("You do not have permission to access this resource")
    return context
