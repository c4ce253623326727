"""
认证相关API
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from promptnexus.core.errors import AuthError, DuplicateError, ValidationError
from promptnexus.core.security import (
    bearer_scheme, create_session, get_current_user, get_password_hash, verify_password
)
from promptnexus.db.database import get_db
from promptnexus.models.user import User, UserSession
from promptnexus.schemas.common import SuccessResponse
from promptnexus.schemas.user import (
    AuthResponse, LoginRequest, RegisterRequest, UserEnvelope, UserResponse
)
from promptnexus.services.aggregation import build_avatar_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["认证"])

ADMIN_USERNAME = "admin"


def find_user_by_username(db: Session, username: str) -> Optional[User]:
    """按用户名查找用户（不区分大小写）"""
    return db.query(User).filter(func.lower(User.username) == username.strip().lower()).first()


@router.post("/register", response_model=AuthResponse)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    用户注册

    第一个注册的用户和用户名为admin的用户自动成为管理员。
    """
    username = (request.username or "").strip()
    display_name = (request.display_name or "").strip()
    if not username or not request.password or not display_name:
        raise ValidationError("缺少必填字段")

    if find_user_by_username(db, username):
        raise DuplicateError("用户名已存在")

    is_admin = db.query(User).count() == 0 or username.lower() == ADMIN_USERNAME

    db_user = User(
        username=username,
        display_name=display_name,
        password_hash=get_password_hash(request.password),
        bio=request.bio or "",
        gender=request.gender,
        avatar_url=request.avatar_url or build_avatar_url(username, request.gender),
        is_admin=is_admin,
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        # 并发注册同名用户
        db.rollback()
        raise DuplicateError("用户名已存在")
    db.refresh(db_user)
    logger.info("新用户注册: %s (管理员=%s)", db_user.username, db_user.is_admin)

    token = create_session(db, db_user)
    return AuthResponse(user=UserResponse.model_validate(db_user), token=token)


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """用户登录，用户名不区分大小写"""
    if not request.username or not request.password:
        raise ValidationError("缺少必填字段")

    user = find_user_by_username(db, request.username)
    if not user or not verify_password(request.password, user.password_hash):
        # 凭证错误返回400
        raise AuthError("用户名或密码错误", status_code=400)

    token = create_session(db, user)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/logout", response_model=SuccessResponse)
def logout(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
):
    """退出登录，删除当前token"""
    if credentials is not None:
        db.query(UserSession).filter(UserSession.token == credentials.credentials).delete()
        db.commit()
    return SuccessResponse()


@router.get("/me", response_model=UserEnvelope)
def get_me(current_user: Optional[User] = Depends(get_current_user)):
    """获取当前登录用户"""
    if current_user is None:
        raise AuthError()
    return UserEnvelope(user=UserResponse.model_validate(current_user))
