from fastapi import Request, Depends
from sqlalchemy.orm import Session
from cineverse.database import get_db
from cineverse.errors import NotAuthenticated
from cineverse.models.user import User
from cineverse.models.group import GroupMember, GroupMemberStatus

def get_user_group_ids(db: Session, user_id: int) -> list[int]:
    """IDs of the groups the user is an active member of.

    Drives visibility of GROUP_ONLY posts. Pending or banned memberships
    don't count.
    """
    rows = db.query(GroupMember.group_id).filter(
        GroupMember.user_id == user_id,
        GroupMember.status == GroupMemberStatus.ACTIVE.value
    ).all()
    return [row.group_id for row in rows]

async def get_current_user_optional(request: Request, db: Session = Depends(get_db)) -> User | None:
    """Get current user from session, returns None if not logged in"""
    user_id = request.session.get('user_id')
    if not user_id:
        return None
    return db.query(User).filter(User.id == user_id).first()

async def get_current_user(user: User | None = Depends(get_current_user_optional)) -> User:
    """Get current user, raises NotAuthenticated if not logged in"""
    if user is None:
        raise NotAuthenticated()
    return user
