"""User / Space / SpaceMember Domain Model"""

from datetime import datetime

from pydantic import BaseModel, Field


class User(BaseModel):
    """用户 -- chat_id 是消息通道的投递地址"""

    user_id: str = Field(description="用户 ID")
    chat_id: str = Field(description="消息通道中的会话 ID")
    display_name: str = Field(default="", description="显示名称")


class Space(BaseModel):
    """空间 -- 任务、统计与成员的租户边界"""

    space_id: str = Field(description="空间 ID")
    name: str = Field(default="", description="空间名称")
    timezone: str = Field(default="UTC", description="IANA 时区标识")
    created_at: datetime = Field(description="创建时间")


class SpaceMember(BaseModel):
    """空间成员关系"""

    space_id: str
    user_id: str
    joined_at: datetime
