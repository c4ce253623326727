"""
系统设置API
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from promptnexus.core.security import get_current_user, require_admin
from promptnexus.db.database import get_db
from promptnexus.models.system_setting import SystemSetting
from promptnexus.models.user import User
from promptnexus.schemas.common import SuccessResponse
from promptnexus.schemas.system_setting import SettingResponse, SettingUpdate, SettingValueResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["系统设置"])

# 未设置时返回的默认值
DEFAULT_SETTINGS = {
    "ads_enabled": "false",
    "ad_config": "{}",
    "feedback_form_url": "",
}


@router.get("", response_model=List[SettingResponse])
def get_settings(
    requester_id: Optional[str] = Query(None, alias="requesterId"),
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """获取所有系统设置（管理员）"""
    require_admin(db, current_user, requester_id)
    return db.query(SystemSetting).order_by(SystemSetting.key).all()


@router.get("/{key}", response_model=SettingValueResponse)
def get_setting(key: str, db: Session = Depends(get_db)):
    """获取系统设置（如果不存在则返回默认值）"""
    setting = db.query(SystemSetting).filter(SystemSetting.key == key).first()
    if not setting:
        return SettingValueResponse(value=DEFAULT_SETTINGS.get(key))
    return SettingValueResponse(value=setting.value)


@router.put("/{key}", response_model=SuccessResponse)
def set_setting(
    key: str,
    setting: SettingUpdate,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """更新系统设置（管理员，如果不存在则创建）"""
    admin = require_admin(db, current_user, setting.requester_id)

    db_setting = db.query(SystemSetting).filter(SystemSetting.key == key).first()
    if not db_setting:
        db_setting = SystemSetting(
            key=key,
            value=setting.value or "",
            description=setting.description
        )
        db.add(db_setting)
    else:
        if setting.value is not None:
            db_setting.value = setting.value
        if setting.description is not None:
            db_setting.description = setting.description

    db.commit()
    logger.info("管理员 %s 更新设置 %s", admin.username, key)
    return SuccessResponse()
