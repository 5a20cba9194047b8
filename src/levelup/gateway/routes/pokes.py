"""戳一下路由

POST /api/users/{user_id}/poke
- 200: {"sent": bool, "reason": "sent" | "disabled" | "failed"}
"""

from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..deps import get_notifier, get_store_group

router = APIRouter()


class PokeRequest(BaseModel):
    from_user_id: str = Field(min_length=1, description="发起戳一下的用户 ID")


class PokeResponse(BaseModel):
    sent: bool
    reason: Literal["sent", "disabled", "failed"]


@router.post("/api/users/{user_id}/poke", response_model=PokeResponse)
async def poke_user(
    user_id: str,
    body: PokeRequest,
    notifier=Depends(get_notifier),
    stores=Depends(get_store_group),
):
    settings = await stores.settings_store.get_settings(user_id)
    if not settings.poke_enabled:
        return PokeResponse(sent=False, reason="disabled")
    sent = await notifier.send_poke(body.from_user_id, user_id)
    return PokeResponse(sent=sent, reason="sent" if sent else "failed")
