from typing import Literal
from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from blogsmith.api.dependencies import Identity, get_current_identity, get_generation_gateway
from blogsmith.services.generation_service import DEFAULT_LENGTH, GeneratedContent, GenerationGateway

router = APIRouter(prefix="/generate", tags=["generate"])


class GenerateRequest(BaseModel):
    topic: str
    style: str
    length: Literal["short", "medium", "long"] = DEFAULT_LENGTH


class GenerateResponse(BaseModel):
    success: bool = True
    data: GeneratedContent


@router.post("", response_model=GenerateResponse)
async def generate_content(
    request_data: GenerateRequest,
    identity: Identity = Depends(get_current_identity),
    gateway: GenerationGateway = Depends(get_generation_gateway),
):
    """Draft a title and body for a topic and style. Nothing is saved."""
    # The provider call blocks; keep it off the event loop
    content = await run_in_threadpool(
        gateway.generate, request_data.topic, request_data.style, request_data.length
    )
    return {"success": True, "data": content}
