"""Decode routes.

The package is sent as the raw request body; import settings travel as query
parameters so clients can stream the file without multipart encoding.
"""

import logging
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from pptxdom.config import get_settings
from pptxdom.dom.schema import ImportSettings, ParseResult, TargetSlideSize
from pptxdom.parser.pptx_reader import PPTXReader

logger = logging.getLogger(__name__)

router = APIRouter()

# Raw media bytes stay out of JSON responses
MEDIA_BYTES_EXCLUDE = {"data": {"media": {"__all__": {"data"}}}}


class DecodeSummary(BaseModel):
    """Statistics-only view of a decode."""
    success: bool
    file_name: str
    slide_count: int = 0
    declared_slide_count: int = 0
    statistics: dict[str, int] = {}
    warnings: list[str] = []
    errors: list[str] = []
    processing_time_ms: float = 0.0


def get_reader() -> PPTXReader:
    """Reader bound to the current settings."""
    return PPTXReader(get_settings())


def get_import_settings(
    include_master_background: bool = Query(default=True),
    import_images: bool = Query(default=True),
    import_shapes: bool = Query(default=True),
    import_text: bool = Query(default=True),
    target_preset: Literal["1920x1080", "1280x720", "custom"] = Query(default="1920x1080"),
    target_width: Optional[int] = Query(default=None),
    target_height: Optional[int] = Query(default=None),
) -> ImportSettings:
    """Build and validate import settings from query parameters."""
    try:
        return ImportSettings(
            include_master_background=include_master_background,
            import_images=import_images,
            import_shapes=import_shapes,
            import_text=import_text,
            target_slide_size=TargetSlideSize(
                preset=target_preset,
                width=target_width,
                height=target_height,
            ),
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[error["msg"] for error in exc.errors()],
        ) from exc


async def _decode(
    request: Request,
    file_name: str,
    import_settings: ImportSettings,
    reader: PPTXReader,
) -> ParseResult:
    data = await request.body()
    result = await reader.read_async(
        data,
        file_name=file_name,
        import_settings=import_settings,
    )
    if not result.success:
        logger.warning(f"Decode of {file_name} failed: {'; '.join(result.errors)}")
    return result


@router.post("")
async def decode_presentation(
    request: Request,
    file_name: str = Query(default="presentation.pptx"),
    import_settings: ImportSettings = Depends(get_import_settings),
    reader: PPTXReader = Depends(get_reader),
) -> JSONResponse:
    """Decode a PPTX package sent as the request body.

    Returns the full ``ParseResult``; a fatal decode answers 422 with the
    same body shape and ``success=false``.
    """
    result = await _decode(request, file_name, import_settings, reader)
    payload: dict[str, Any] = result.model_dump(mode="json", exclude=MEDIA_BYTES_EXCLUDE)
    return JSONResponse(
        status_code=status.HTTP_200_OK if result.success else status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=payload,
    )


@router.post("/summary", response_model=DecodeSummary)
async def decode_summary(
    request: Request,
    file_name: str = Query(default="presentation.pptx"),
    import_settings: ImportSettings = Depends(get_import_settings),
    reader: PPTXReader = Depends(get_reader),
):
    """Decode a package and return only counts and diagnostics."""
    result = await _decode(request, file_name, import_settings, reader)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=result.errors,
        )

    presentation = result.data
    return DecodeSummary(
        success=True,
        file_name=file_name,
        slide_count=presentation.slide_count,
        declared_slide_count=presentation.declared_slide_count,
        statistics=presentation.statistics(),
        warnings=result.warnings,
        errors=result.errors,
        processing_time_ms=result.processing_time_ms,
    )
