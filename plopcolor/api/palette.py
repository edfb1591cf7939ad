"""
PlopColor Palette API Routes
Upload an image, get back its background color and palette.
"""
import time
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from starlette.concurrency import run_in_threadpool

from plopcolor.config import config
from plopcolor.errors import PaletteError
from plopcolor.schemas import ColorValue, ErrorResponse, MetricsResponse, PaletteResponse
from plopcolor.services.colors.palette import analyze_image, make_rng
from plopcolor.services.imaging import read_image
from plopcolor.utils.ids import generate_request_id
from plopcolor.utils.logging import get_logger
from plopcolor.utils.metrics import get_metrics

router = APIRouter(prefix="/v1", tags=["palette"])


@router.post(
    "/palette",
    response_model=PaletteResponse,
    responses={400: {"model": ErrorResponse}, 415: {"model": ErrorResponse}},
    summary="Extract background color and palette",
)
async def extract_palette(
    file: UploadFile = File(..., description="Image file (PNG, JPEG, GIF, BMP, TIFF, WEBP)"),
    k: int = Query(config.PALETTE_SIZE, ge=config.K_MIN, le=config.K_MAX,
                   description="Number of palette colors"),
    max_dimension: int = Query(config.MAX_DIMENSION, ge=config.MAX_DIMENSION_MIN,
                               le=config.MAX_DIMENSION_MAX,
                               description="Longest edge used for clustering"),
    order: str = Query("seed", pattern="^(seed|population|luminance)$", description="Palette ordering"),
    seed: Optional[int] = Query(None, ge=0, description="Random seed for reproducible palettes"),
) -> PaletteResponse:
    """
    Analyze an uploaded image.

    - **background**: area-average color over every pixel
    - **palette**: k-means++ colors from a copy downsampled to ``max_dimension``
    - **order**: ``seed`` keeps selection order; ``population`` and
      ``luminance`` sort descending
    """
    log = get_logger()
    metrics = get_metrics()
    request_id = generate_request_id("pal")
    metrics.increment_request_count()

    with log.request_context(request_id):
        start_time = time.time()
        try:
            rgba = await read_image(file)
        except HTTPException as e:
            metrics.increment_failure_count(f"http_{e.status_code}")
            log.warning(f"Rejected upload: {e.detail}", extra={"filename": file.filename})
            raise

        decode_ms = (time.time() - start_time) * 1000
        metrics.record_timing("decode", decode_ms)
        log.info("Image decoded", extra={
            "width": int(rgba.shape[1]), "height": int(rgba.shape[0]), "ms_decode": decode_ms
        })

        try:
            # Clustering is CPU-bound; keep it off the event loop
            analysis = await run_in_threadpool(
                analyze_image, rgba,
                k=k, max_dimension=max_dimension, order=order, rng=make_rng(seed),
            )
        except PaletteError as e:
            metrics.increment_failure_count("invalid_input")
            log.warning(f"Palette input rejected: {e}")
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            metrics.increment_failure_count("internal")
            log.error(f"Palette extraction failed: {e}")
            raise HTTPException(status_code=500, detail="Palette extraction failed")

        duration_ms = (time.time() - start_time) * 1000
        metrics.record_timing("palette_request", duration_ms)
        log.info("Palette request complete", extra={
            "k": analysis.k, "iterations": analysis.iterations, "ms_total": duration_ms
        })

    return PaletteResponse(
        request_id=request_id,
        width=analysis.width,
        height=analysis.height,
        sampled_width=analysis.sampled_width,
        sampled_height=analysis.sampled_height,
        k=analysis.k,
        background=ColorValue.from_entry(analysis.background_entry),
        palette=[ColorValue.from_entry(entry) for entry in analysis.palette],
        iterations=analysis.iterations,
        converged=analysis.converged,
        duration_ms=duration_ms,
    )


@router.get("/metrics", response_model=MetricsResponse, summary="In-process metrics")
def palette_metrics() -> MetricsResponse:
    return MetricsResponse(**get_metrics().get_summary())
