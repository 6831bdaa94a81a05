"""
app.api.uploads
~~~~~~~~~~~~~~~

文件上传接口：``POST /upload``（multipart，字段名 ``file``）。

文件以 ``<毫秒时间戳>-<原文件名>`` 保存到 ``settings.UPLOAD_DIR``，
通过 ``/uploads/<文件名>`` 访问。
"""
import time
from pathlib import Path

from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.logging import get_logger
from app.core.rate_limit import limiter
from app.schemas.api_response import ApiResponse
from app.schemas.content import UploadData

logger = get_logger(__name__)

router: APIRouter = APIRouter()


@router.post("/upload", summary="上传文件", response_model=ApiResponse[UploadData])
@limiter.limit("2/second")
async def upload_file(request: Request, file: UploadFile = File(...)):
    # 只保留文件名部分，防止路径穿越
    original_name = Path(file.filename or "").name
    if not original_name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    filename = f"{int(time.time() * 1000)}-{original_name}"
    upload_dir = settings.upload_path
    upload_dir.mkdir(parents=True, exist_ok=True)

    content = await file.read()
    await run_in_threadpool((upload_dir / filename).write_bytes, content)
    logger.info("文件已上传 | file=%s | size=%d", filename, len(content))

    return ApiResponse.ok(data=UploadData(filename=filename, url=f"/uploads/{filename}"))
