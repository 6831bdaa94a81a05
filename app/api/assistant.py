"""
app.api.assistant
~~~~~~~~~~~~~~~~~

AI 编程助手接口。

提供 ``POST /ai/ask``，模式为 explain / debug / generate / learn，其他按自由提问。
模型故障时仍返回 200 和兜底回答。
"""
from fastapi import APIRouter, Depends, Request

from app.api.deps import get_assistant
from app.core.rate_limit import limiter
from app.schemas.api_response import ApiResponse
from app.schemas.assistant import AskRequest, AskResponseData
from app.services.assistant_service import AssistantService

router: APIRouter = APIRouter(prefix="/ai")


@router.post("/ask", summary="向 AI 助手提问", response_model=ApiResponse[AskResponseData])
@limiter.limit("2/second")
async def ask(
    request: Request,
    body: AskRequest,
    assistant: AssistantService = Depends(get_assistant),
):
    answer = await assistant.ask(body.question, body.mode)
    return ApiResponse.ok(data=AskResponseData(answer=answer))
