"""
提示词管理API
"""
import logging
from typing import Dict, Iterable, List, Optional, Set
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from promptnexus.core.errors import ForbiddenError, NotFoundError, ValidationError
from promptnexus.core.security import get_current_user, require_requester, resolve_requester
from promptnexus.db.database import SessionLocal, get_db
from promptnexus.models.interaction import Favorite
from promptnexus.models.prompt import Prompt
from promptnexus.models.user import User
from promptnexus.schemas.common import SuccessResponse
from promptnexus.schemas.prompt import (
    OptimizeRequest, OptimizeResponse, PromptCreate, PromptEnvelope, PromptResponse, PromptUpdate
)
from promptnexus.services.aggregation import (
    DEFAULT_DESCRIPTION, classify_model, normalize_category, parse_tags, validate_prompt_input
)
from promptnexus.services.text_service import TextService, get_text_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/prompts", tags=["提示词管理"])


def favorite_counts(db: Session, prompt_ids: Iterable[str]) -> Dict[str, int]:
    """按提示词统计收藏数"""
    prompt_ids = list(prompt_ids)
    if not prompt_ids:
        return {}
    rows = db.query(Favorite.prompt_id, func.count()).filter(
        Favorite.prompt_id.in_(prompt_ids)
    ).group_by(Favorite.prompt_id).all()
    return {prompt_id: count for prompt_id, count in rows}


def favorited_ids(db: Session, viewer_id: Optional[str], prompt_ids: Iterable[str]) -> Set[str]:
    """查询某用户收藏了其中哪些提示词"""
    prompt_ids = list(prompt_ids)
    if not viewer_id or not prompt_ids:
        return set()
    rows = db.query(Favorite.prompt_id).filter(
        Favorite.user_id == viewer_id,
        Favorite.prompt_id.in_(prompt_ids)
    ).all()
    return {row[0] for row in rows}


def to_prompt_responses(db: Session, prompts: List[Prompt], viewer_id: Optional[str] = None) -> List[PromptResponse]:
    """把提示词转为响应模型，附带收藏数和当前用户是否收藏"""
    ids = [p.id for p in prompts]
    counts = favorite_counts(db, ids)
    mine = favorited_ids(db, viewer_id, ids)
    result = []
    for prompt in prompts:
        item = PromptResponse.model_validate(prompt)
        item.favorite_count = counts.get(prompt.id, 0)
        item.is_favorited = prompt.id in mine
        result.append(item)
    return result


def get_prompt_or_404(db: Session, prompt_id: str) -> Prompt:
    prompt = db.query(Prompt).filter(Prompt.id == prompt_id).first()
    if not prompt:
        raise NotFoundError("提示词不存在")
    return prompt


def _raise_if_invalid(errors: Dict[str, str]):
    if errors:
        # 只返回第一条错误信息，完整列表写入日志
        logger.debug("提示词校验失败: %s", errors)
        raise ValidationError(next(iter(errors.values())))


def refresh_description(prompt_id: str, content: str, service: TextService):
    """后台任务：用文本服务生成描述，失败时保留默认描述"""
    description = service.generate_description(content)
    if description == DEFAULT_DESCRIPTION:
        return
    db = SessionLocal()
    try:
        prompt = db.query(Prompt).filter(Prompt.id == prompt_id).first()
        # 期间被删除或作者已手动填写描述时跳过
        if prompt and prompt.description == DEFAULT_DESCRIPTION:
            prompt.description = description[:500]
            db.commit()
    except Exception:
        db.rollback()
        logger.exception("更新提示词描述失败: %s", prompt_id)
    finally:
        db.close()


@router.get("", response_model=List[PromptResponse])
def get_prompts(
    user_id: Optional[str] = Query(None, alias="userId", description="当前浏览用户ID"),
    category: Optional[str] = None,
    model: Optional[str] = None,
    search: Optional[str] = None,
    author_id: Optional[str] = Query(None, alias="authorId"),
    db: Session = Depends(get_db)
):
    """获取提示词列表（按发布时间倒序）"""
    query = db.query(Prompt).options(joinedload(Prompt.author))

    if category and category != "All":
        normalized = normalize_category(category)
        if normalized is None:
            return []
        query = query.filter(Prompt.category == normalized.value)

    if model and model != "All":
        label = classify_model(model)
        if label:
            query = query.filter(func.lower(Prompt.model) == label.value.lower())

    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Prompt.title).like(pattern),
                func.lower(Prompt.content).like(pattern),
                func.lower(Prompt.description).like(pattern)
            )
        )

    if author_id:
        query = query.filter(Prompt.author_id == author_id)

    prompts = query.order_by(Prompt.created_at.desc()).all()
    return to_prompt_responses(db, prompts, user_id)


@router.post("/optimize", response_model=OptimizeResponse)
def optimize_prompt(request: OptimizeRequest, service: TextService = Depends(get_text_service)):
    """调用文本服务优化提示词，失败时原样返回"""
    if not request.content or not request.content.strip():
        raise ValidationError("缺少提示词内容")
    return OptimizeResponse(content=service.optimize_prompt(request.content))


@router.get("/{prompt_id}", response_model=PromptResponse)
def get_prompt(
    prompt_id: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    """获取提示词详情"""
    prompt = get_prompt_or_404(db, prompt_id)
    return to_prompt_responses(db, [prompt], user_id)[0]


@router.post("", response_model=PromptEnvelope)
def create_prompt(
    request: PromptCreate,
    background_tasks: BackgroundTasks,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: TextService = Depends(get_text_service),
):
    """创建提示词"""
    author = resolve_requester(db, current_user, request.author_id)
    if not request.title or not request.content or author is None:
        raise ValidationError("缺少必填字段")

    _raise_if_invalid(validate_prompt_input(request.title, request.content, request.model, request.category))

    label = classify_model(request.model)
    description = (request.description or "").strip()
    db_prompt = Prompt(
        title=request.title.strip(),
        content=request.content,
        description=description or DEFAULT_DESCRIPTION,
        model=label.value if label else None,
        model_url=request.model_url,
        category=normalize_category(request.category).value,
        tags=parse_tags(request.tags),
        image_url=request.image_url,
        author_id=author.id,
    )
    db.add(db_prompt)
    db.commit()
    db.refresh(db_prompt)
    logger.info("用户 %s 发布提示词 %s", author.username, db_prompt.id)

    if not description and service.enabled:
        background_tasks.add_task(refresh_description, db_prompt.id, db_prompt.content, service)

    return PromptEnvelope(prompt=to_prompt_responses(db, [db_prompt])[0])


@router.put("/{prompt_id}", response_model=PromptEnvelope)
def update_prompt(
    prompt_id: str,
    prompt_update: PromptUpdate,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """更新提示词（仅作者本人）"""
    db_prompt = get_prompt_or_404(db, prompt_id)
    requester = require_requester(db, current_user, prompt_update.requester_id)
    if requester.id != db_prompt.author_id:
        raise ForbiddenError("只有作者可以编辑该提示词")

    update_data = prompt_update.model_dump(exclude_unset=True, exclude={"requester_id"})
    merged = {
        "title": update_data.get("title", db_prompt.title),
        "content": update_data.get("content", db_prompt.content),
        "model": update_data.get("model", db_prompt.model),
        "category": update_data.get("category", db_prompt.category),
    }
    _raise_if_invalid(validate_prompt_input(**merged))

    if "model" in update_data:
        label = classify_model(update_data["model"])
        update_data["model"] = label.value if label else None
    if "category" in update_data:
        update_data["category"] = normalize_category(update_data["category"]).value
    if "tags" in update_data:
        update_data["tags"] = parse_tags(update_data["tags"])
    if "title" in update_data:
        update_data["title"] = update_data["title"].strip()
    if "description" in update_data:
        update_data["description"] = (update_data["description"] or "").strip() or DEFAULT_DESCRIPTION

    for field, value in update_data.items():
        setattr(db_prompt, field, value)

    db.commit()
    db.refresh(db_prompt)
    return PromptEnvelope(prompt=to_prompt_responses(db, [db_prompt], requester.id)[0])


@router.delete("/{prompt_id}", response_model=SuccessResponse)
def delete_prompt(
    prompt_id: str,
    requester_id: Optional[str] = Query(None, alias="requesterId"),
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """删除提示词（作者或管理员），收藏、评分和浏览记录一并删除"""
    requester = require_requester(db, current_user, requester_id)
    db_prompt = db.query(Prompt).filter(Prompt.id == prompt_id).first()
    if not db_prompt:
        # 重复删除视为成功
        return SuccessResponse()
    if requester.id != db_prompt.author_id and not requester.is_admin:
        raise ForbiddenError("只有作者或管理员可以删除该提示词")

    db.delete(db_prompt)
    db.commit()
    logger.info("提示词 %s 已被 %s 删除", prompt_id, requester.username)
    return SuccessResponse()
