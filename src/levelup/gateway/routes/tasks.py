"""任务完成路由

POST /api/tasks/{task_id}/complete
- 200: 完成成功，返回请求者的结果
- 404: 任务不存在
- 409: 一次性任务已被完成
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from levelup.core.exceptions import InvalidStateError, NotFoundError
from levelup.core.models import CompletionOutcome

from ..deps import get_lifecycle
from .errors import error_response

router = APIRouter()


class CompleteTaskRequest(BaseModel):
    """完成请求"""

    user_id: str = Field(min_length=1, description="发起完成的用户 ID")


@router.post("/api/tasks/{task_id}/complete", response_model=CompletionOutcome)
async def complete_task(
    task_id: str,
    body: CompleteTaskRequest,
    lifecycle=Depends(get_lifecycle),
):
    try:
        return await lifecycle.complete_task(task_id, body.user_id)
    except NotFoundError as e:
        return error_response(404, f"{e.entity.upper()}_NOT_FOUND", str(e))
    except InvalidStateError as e:
        return error_response(409, "TASK_ALREADY_COMPLETED", str(e))
