"""当前空间会话路由

PUT    /api/session/current-space  设置当前空间（空间不存在 -> 404）
GET    /api/session/current-space  查询当前空间（无会话或已过期 -> 404）
DELETE /api/session/current-space  清除会话
用户通过 X-User-ID 请求头标识。
"""

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, Field

from ..deps import get_session_store, get_store_group
from .errors import error_response

router = APIRouter()


class CurrentSpaceRequest(BaseModel):
    space_id: str = Field(min_length=1)


class CurrentSpaceResponse(BaseModel):
    user_id: str
    space_id: str


@router.put("/api/session/current-space", response_model=CurrentSpaceResponse)
async def set_current_space(
    body: CurrentSpaceRequest,
    user_id: str = Header(alias="X-User-ID"),
    store_group=Depends(get_store_group),
    sessions=Depends(get_session_store),
):
    space = await store_group.space_store.get_space(body.space_id)
    if space is None:
        return error_response(404, "SPACE_NOT_FOUND", f"Space with id {body.space_id} does not exist")
    sessions.set_current_space(user_id, body.space_id)
    return CurrentSpaceResponse(user_id=user_id, space_id=body.space_id)


@router.get("/api/session/current-space", response_model=CurrentSpaceResponse)
async def get_current_space(
    user_id: str = Header(alias="X-User-ID"),
    sessions=Depends(get_session_store),
):
    space_id = sessions.get_current_space(user_id)
    if space_id is None:
        return error_response(404, "SESSION_NOT_FOUND", "No current space selected")
    return CurrentSpaceResponse(user_id=user_id, space_id=space_id)


@router.delete("/api/session/current-space", status_code=204)
async def clear_current_space(
    user_id: str = Header(alias="X-User-ID"),
    sessions=Depends(get_session_store),
):
    sessions.clear(user_id)
