"""
提示词互动API：浏览、复制、评分、收藏
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from promptnexus.api.auth import find_user_by_username
from promptnexus.api.prompts import get_prompt_or_404
from promptnexus.core.errors import InvalidRatingError, NotFoundError, ValidationError
from promptnexus.core.security import get_current_user, resolve_requester
from promptnexus.db.database import get_db
from promptnexus.models.interaction import Favorite, PromptInteraction, PromptRating
from promptnexus.models.prompt import Prompt
from promptnexus.models.user import User
from promptnexus.schemas.prompt import (
    CounterResponse, FavoriteRequest, FavoriteResponse, InteractionRequest,
    RateRequest, RateResponse, UserRatingResponse
)
from promptnexus.services.aggregation import compute_rating, is_valid_rating

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/prompts", tags=["提示词互动"])

VIEW = "view"
COPY = "copy"

COUNTER_COLUMNS = {
    VIEW: Prompt.view_count,
    COPY: Prompt.copy_count,
}


def find_interaction(db: Session, user_id: str, prompt_id: str, kind: str) -> Optional[PromptInteraction]:
    return db.query(PromptInteraction).filter(
        PromptInteraction.user_id == user_id,
        PromptInteraction.prompt_id == prompt_id,
        PromptInteraction.kind == kind
    ).first()


def record_interaction(db: Session, prompt_id: str, kind: str, user: Optional[User]) -> bool:
    """
    浏览/复制计数

    匿名请求每次都计数；带用户时 (用户, 提示词, 类型) 只计一次。
    计数使用 SQL 的 n = n + 1 原子更新，返回本次是否计数。
    """
    get_prompt_or_404(db, prompt_id)
    column = COUNTER_COLUMNS[kind]

    if user is not None:
        if find_interaction(db, user.id, prompt_id, kind):
            return False
        db.add(PromptInteraction(user_id=user.id, prompt_id=prompt_id, kind=kind))
        try:
            db.flush()
        except IntegrityError:
            # 并发请求已经插入了同一条记录
            db.rollback()
            return False

    db.query(Prompt).filter(Prompt.id == prompt_id).update(
        {column: column + 1}, synchronize_session=False
    )
    db.commit()
    return True


def current_count(db: Session, prompt_id: str, kind: str) -> int:
    return db.query(COUNTER_COLUMNS[kind]).filter(Prompt.id == prompt_id).scalar() or 0


def _counter_response(db: Session, prompt_id: str, kind: str, request: Optional[InteractionRequest], current_user):
    user = resolve_requester(db, current_user, request.user_id if request else None)
    counted = record_interaction(db, prompt_id, kind, user)
    return CounterResponse(counted=counted, count=current_count(db, prompt_id, kind))


@router.post("/{prompt_id}/view", response_model=CounterResponse)
def increment_view(
    prompt_id: str,
    request: Optional[InteractionRequest] = None,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """浏览次数+1"""
    return _counter_response(db, prompt_id, VIEW, request, current_user)


@router.post("/{prompt_id}/copy", response_model=CounterResponse)
def increment_copy(
    prompt_id: str,
    request: Optional[InteractionRequest] = None,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """复制次数+1（不影响浏览次数）"""
    return _counter_response(db, prompt_id, COPY, request, current_user)


def _lock_prompt(db: Session, prompt_id: str) -> Prompt:
    # SQLite 会忽略 FOR UPDATE，其他数据库在事务内锁定该行
    prompt = db.query(Prompt).filter(Prompt.id == prompt_id).with_for_update().first()
    if not prompt:
        raise NotFoundError("提示词不存在")
    return prompt


def find_rating(db: Session, user_id: str, prompt_id: str) -> Optional[PromptRating]:
    return db.query(PromptRating).filter(
        PromptRating.user_id == user_id,
        PromptRating.prompt_id == prompt_id
    ).first()


def refresh_rating(db: Session, prompt: Prompt):
    """根据现有评分重新计算平均分和评分人数（不提交）"""
    values = [row[0] for row in db.query(PromptRating.value).filter(PromptRating.prompt_id == prompt.id).all()]
    prompt.rating, prompt.rating_count = compute_rating(values)


def _upsert_rating(db: Session, prompt_id: str, user_id: str, value: int):
    existing = find_rating(db, user_id, prompt_id)
    if existing:
        existing.value = value
    else:
        db.add(PromptRating(user_id=user_id, prompt_id=prompt_id, value=value))
    db.flush()


def apply_rating(db: Session, prompt_id: str, user: User, value: int) -> Prompt:
    """
    记录评分并重新计算平均分

    每个用户对同一提示词只保留一条评分，重复评分覆盖旧值；
    平均分和评分人数根据全部评分重新计算，与评分写入在同一事务中完成。
    """
    user_id = user.id
    prompt = _lock_prompt(db, prompt_id)
    try:
        _upsert_rating(db, prompt_id, user_id, value)
    except IntegrityError:
        # 同一用户的并发评分，重试一次改为更新
        db.rollback()
        prompt = _lock_prompt(db, prompt_id)
        _upsert_rating(db, prompt_id, user_id, value)

    refresh_rating(db, prompt)
    db.commit()
    db.refresh(prompt)
    return prompt


@router.post("/{prompt_id}/rate", response_model=RateResponse)
def rate_prompt(
    prompt_id: str,
    request: RateRequest,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """提交评分（1-5），同一用户重复评分会覆盖之前的评分"""
    if not is_valid_rating(request.rating):
        raise InvalidRatingError()

    get_prompt_or_404(db, prompt_id)
    rater = resolve_requester(db, current_user, request.rater_id)
    if rater is None and request.username:
        rater = find_user_by_username(db, request.username)
        if rater is None:
            raise NotFoundError("用户不存在")
    if rater is None:
        raise ValidationError("缺少评分用户")

    prompt = apply_rating(db, prompt_id, rater, request.rating)
    logger.debug("用户 %s 给提示词 %s 评分 %s", rater.username, prompt_id, request.rating)
    return RateResponse(rating=prompt.rating, rating_count=prompt.rating_count)


@router.get("/{prompt_id}/rating", response_model=UserRatingResponse)
def get_user_rating(
    prompt_id: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    """获取某用户对提示词的评分，未评分返回0"""
    get_prompt_or_404(db, prompt_id)
    if not user_id:
        return UserRatingResponse(rating=0)
    value = db.query(PromptRating.value).filter(
        PromptRating.user_id == user_id,
        PromptRating.prompt_id == prompt_id
    ).scalar()
    return UserRatingResponse(rating=value or 0)


def find_favorite(db: Session, user_id: str, prompt_id: str) -> Optional[Favorite]:
    return db.query(Favorite).filter(
        Favorite.user_id == user_id,
        Favorite.prompt_id == prompt_id
    ).first()


@router.post("/{prompt_id}/favorite", response_model=FavoriteResponse)
def toggle_favorite(
    prompt_id: str,
    request: Optional[FavoriteRequest] = None,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """收藏/取消收藏"""
    user = resolve_requester(db, current_user, request.user_id if request else None)
    if user is None:
        raise ValidationError("缺少用户ID")
    get_prompt_or_404(db, prompt_id)
    user_id = user.id

    existing = find_favorite(db, user_id, prompt_id)
    if existing:
        db.delete(existing)
        favorited = False
    else:
        db.add(Favorite(user_id=user_id, prompt_id=prompt_id))
        favorited = True

    try:
        db.commit()
    except IntegrityError:
        # 并发插入了同一条收藏，或提示词在此期间被删除，以数据库中的实际状态为准
        db.rollback()
        get_prompt_or_404(db, prompt_id)
        favorited = find_favorite(db, user_id, prompt_id) is not None

    count = db.query(Favorite).filter(Favorite.prompt_id == prompt_id).count()
    return FavoriteResponse(favorited=favorited, favorite_count=count)
