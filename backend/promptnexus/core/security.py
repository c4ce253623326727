"""
密码哈希与请求者身份解析
"""
import secrets
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from promptnexus.core.config import settings
from promptnexus.core.errors import AuthError, ForbiddenError
from promptnexus.db.database import get_db
from promptnexus.models.user import User, UserSession

bearer_scheme = HTTPBearer(auto_error=False)


def _truncate(password: str) -> bytes:
    # bcrypt限制密码长度不能超过72字节，需要截断
    return password.encode("utf-8")[:72]


def get_password_hash(password: str) -> str:
    """生成密码哈希"""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_truncate(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    try:
        return bcrypt.checkpw(_truncate(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # 存储的哈希格式不正确
        return False


def create_session(db: Session, user: User) -> str:
    """为用户创建登录会话，返回token"""
    token = secrets.token_urlsafe(32)
    db.add(UserSession(token=token, user_id=user.id))
    db.commit()
    return token


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """根据 Authorization: Bearer <token> 解析当前用户，没有携带token时返回None"""
    if credentials is None:
        return None
    session = db.query(UserSession).filter(UserSession.token == credentials.credentials).first()
    if not session:
        raise AuthError("登录已失效，请重新登录")
    return session.user


def resolve_requester(db: Session, current_user: Optional[User], requester_id: Optional[str]) -> Optional[User]:
    """
    确定本次请求的操作者

    优先使用token对应的用户；没有token时使用请求中显式传入的用户ID。
    两者都没有时返回None。
    """
    if current_user is not None:
        return current_user
    if not requester_id:
        return None
    user = db.query(User).filter(User.id == requester_id).first()
    if not user:
        raise AuthError("操作用户不存在")
    return user


def require_requester(db: Session, current_user: Optional[User], requester_id: Optional[str]) -> User:
    user = resolve_requester(db, current_user, requester_id)
    if user is None:
        raise AuthError()
    return user


def require_admin(db: Session, current_user: Optional[User], requester_id: Optional[str]) -> User:
    """要求操作者是管理员"""
    user = require_requester(db, current_user, requester_id)
    if not user.is_admin:
        raise ForbiddenError("需要管理员权限")
    return user
