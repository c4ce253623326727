"""
用户反馈API
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import desc
from sqlalchemy.orm import Session

from promptnexus.core.errors import NotFoundError, ValidationError
from promptnexus.core.security import get_current_user, require_admin
from promptnexus.db.database import get_db
from promptnexus.models.feedback import Feedback
from promptnexus.models.user import User
from promptnexus.schemas.common import SuccessResponse
from promptnexus.schemas.feedback import (
    FeedbackCreate, FeedbackEnvelope, FeedbackResponse, MarkReadRequest, UnreadCountResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feedback", tags=["用户反馈"])


@router.post("", response_model=FeedbackEnvelope)
def add_feedback(feedback: FeedbackCreate, db: Session = Depends(get_db)):
    """提交反馈"""
    sender = (feedback.sender or "").strip()
    message = (feedback.message or "").strip()
    if not sender or not message:
        raise ValidationError("缺少必填字段")

    db_feedback = Feedback(sender=sender[:100], message=message)
    db.add(db_feedback)
    db.commit()
    db.refresh(db_feedback)
    logger.info("收到来自 %s 的反馈", sender)
    return FeedbackEnvelope(feedback=FeedbackResponse.model_validate(db_feedback))


@router.get("", response_model=List[FeedbackResponse])
def get_feedback(
    requester_id: Optional[str] = Query(None, alias="requesterId"),
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """获取反馈列表（管理员，按时间倒序）"""
    require_admin(db, current_user, requester_id)
    return db.query(Feedback).order_by(desc(Feedback.created_at)).all()


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    requester_id: Optional[str] = Query(None, alias="requesterId"),
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """未读反馈数量（管理员）"""
    require_admin(db, current_user, requester_id)
    count = db.query(Feedback).filter(Feedback.read.is_(False)).count()
    return UnreadCountResponse(count=count)


@router.put("/{feedback_id}/read", response_model=FeedbackEnvelope)
def mark_read(
    feedback_id: str,
    request: Optional[MarkReadRequest] = None,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """标记已读/未读（管理员）"""
    request = request or MarkReadRequest()
    require_admin(db, current_user, request.requester_id)
    db_feedback = db.query(Feedback).filter(Feedback.id == feedback_id).first()
    if not db_feedback:
        raise NotFoundError("反馈不存在")

    db_feedback.read = request.read
    db.commit()
    db.refresh(db_feedback)
    return FeedbackEnvelope(feedback=FeedbackResponse.model_validate(db_feedback))


@router.delete("/{feedback_id}", response_model=SuccessResponse)
def delete_feedback(
    feedback_id: str,
    requester_id: Optional[str] = Query(None, alias="requesterId"),
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """删除反馈（管理员），不存在时也返回成功"""
    require_admin(db, current_user, requester_id)
    db.query(Feedback).filter(Feedback.id == feedback_id).delete()
    db.commit()
    return SuccessResponse()
