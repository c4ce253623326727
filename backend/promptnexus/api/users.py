"""
用户管理API
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from promptnexus.api.auth import find_user_by_username
from promptnexus.api.interactions import refresh_rating
from promptnexus.api.prompts import to_prompt_responses
from promptnexus.core.errors import ForbiddenError, NotFoundError, ValidationError
from promptnexus.core.security import get_current_user, require_admin, resolve_requester
from promptnexus.db.database import get_db
from promptnexus.models.interaction import Follow, PromptRating
from promptnexus.models.prompt import Prompt
from promptnexus.models.user import User
from promptnexus.schemas.common import SuccessResponse
from promptnexus.schemas.user import (
    AdminRequest, AdminUpdate, FollowRequest, FollowResponse, ProfileUpdate,
    RebuildAvatarsResponse, UserDetailResponse, UserEnvelope, UserResponse
)
from promptnexus.services.aggregation import build_avatar_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["用户管理"])


def get_user_or_404(db: Session, username: str) -> User:
    user = find_user_by_username(db, username)
    if not user:
        raise NotFoundError("用户不存在")
    return user


def follower_count(db: Session, user_id: str) -> int:
    return db.query(Follow).filter(Follow.following_id == user_id).count()


def find_follow(db: Session, follower_id: str, following_id: str) -> Optional[Follow]:
    return db.query(Follow).filter(
        Follow.follower_id == follower_id,
        Follow.following_id == following_id
    ).first()


def to_user_detail(db: Session, user: User, viewer_id: Optional[str] = None) -> UserDetailResponse:
    """用户详情，包含其提示词"""
    detail = UserDetailResponse.model_validate(user)
    detail.prompts = to_prompt_responses(db, list(user.prompts), viewer_id)
    detail.follower_count = follower_count(db, user.id)
    detail.following_count = db.query(Follow).filter(Follow.follower_id == user.id).count()
    return detail


@router.get("", response_model=List[UserDetailResponse])
def get_users(db: Session = Depends(get_db)):
    """获取用户列表（不含密码，附带各自的提示词）"""
    users = db.query(User).options(selectinload(User.prompts)).order_by(User.created_at.desc()).all()
    return [to_user_detail(db, user) for user in users]


@router.put("/profile", response_model=UserEnvelope)
def update_profile(
    profile: ProfileUpdate,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """更新个人资料，只更新传入的字段"""
    if not profile.username:
        raise ValidationError("缺少用户名")
    db_user = get_user_or_404(db, profile.username)

    requester = resolve_requester(db, current_user, profile.requester_id)
    if requester is not None and requester.id != db_user.id and not requester.is_admin:
        raise ForbiddenError("只能修改自己的资料")

    update_data = profile.model_dump(exclude_unset=True, exclude={"username", "requester_id"})
    if "display_name" in update_data and not (update_data["display_name"] or "").strip():
        raise ValidationError("显示名称不能为空")

    for field, value in update_data.items():
        setattr(db_user, field, value)

    db.commit()
    db.refresh(db_user)
    return UserEnvelope(user=UserResponse.model_validate(db_user))


@router.post("/avatars/rebuild", response_model=RebuildAvatarsResponse)
def rebuild_avatars(
    request: Optional[AdminRequest] = None,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """重新生成默认头像（管理员）"""
    require_admin(db, current_user, request.requester_id if request else None)

    updated = 0
    for user in db.query(User).all():
        gender = user.gender or "male"
        expected = build_avatar_url(user.username, gender)
        if user.avatar_url != expected:
            user.avatar_url = expected
            user.gender = gender
            updated += 1
    db.commit()
    logger.info("重建头像 %s 个", updated)
    return RebuildAvatarsResponse(updated=updated)


@router.get("/{username}", response_model=UserDetailResponse)
def get_user(
    username: str,
    viewer_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    """获取用户公开资料"""
    user = get_user_or_404(db, username)
    return to_user_detail(db, user, viewer_id)


@router.delete("/{username}", response_model=SuccessResponse)
def delete_user(
    username: str,
    requester_id: Optional[str] = Query(None, alias="requesterId"),
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """删除用户（管理员），其提示词、收藏、评分、关注记录一并删除"""
    admin = require_admin(db, current_user, requester_id)
    db_user = get_user_or_404(db, username)

    # 该用户评过分的其他人的提示词，删除后需要重新计算平均分
    rated_ids = [row[0] for row in db.query(PromptRating.prompt_id).join(Prompt).filter(
        PromptRating.user_id == db_user.id,
        Prompt.author_id != db_user.id
    ).all()]

    db.delete(db_user)
    db.flush()
    for prompt in db.query(Prompt).filter(Prompt.id.in_(rated_ids)).all():
        refresh_rating(db, prompt)
    db.commit()
    logger.info("管理员 %s 删除了用户 %s", admin.username, username)
    return SuccessResponse()


@router.put("/{username}/admin", response_model=UserEnvelope)
def set_admin(
    username: str,
    request: AdminUpdate,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """设置/取消管理员（管理员）"""
    require_admin(db, current_user, request.requester_id)
    db_user = get_user_or_404(db, username)
    db_user.is_admin = request.is_admin
    db.commit()
    db.refresh(db_user)
    return UserEnvelope(user=UserResponse.model_validate(db_user))


@router.post("/{username}/follow", response_model=FollowResponse)
def toggle_follow(
    username: str,
    request: Optional[FollowRequest] = None,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """关注/取消关注"""
    follower = resolve_requester(db, current_user, request.follower_id if request else None)
    if follower is None:
        raise ValidationError("缺少关注者ID")
    target = get_user_or_404(db, username)
    if follower.id == target.id:
        raise ValidationError("不能关注自己")

    follower_id, target_id = follower.id, target.id

    existing = find_follow(db, follower_id, target_id)
    if existing:
        db.delete(existing)
        following = False
    else:
        db.add(Follow(follower_id=follower_id, following_id=target_id))
        following = True

    try:
        db.commit()
    except IntegrityError:
        # 以数据库中的实际状态为准
        db.rollback()
        following = find_follow(db, follower_id, target_id) is not None

    return FollowResponse(following=following, follower_count=follower_count(db, target_id))


@router.get("/{username}/follow", response_model=FollowResponse)
def get_follow_status(
    username: str,
    follower_id: Optional[str] = Query(None, alias="followerId"),
    db: Session = Depends(get_db)
):
    """查询是否已关注"""
    target = get_user_or_404(db, username)
    following = False
    if follower_id:
        following = find_follow(db, follower_id, target.id) is not None
    return FollowResponse(following=following, follower_count=follower_count(db, target.id))
