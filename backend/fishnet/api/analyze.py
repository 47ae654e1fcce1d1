from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi import status as http_status

from fishnet.schemas.analysis import AnalysisResponse, ModelStatusResponse, VectorAnalysisRequest
from fishnet.services.fishnet import FishNetService, get_fishnet_service
from fishnet.services.preprocess import InvalidImageError

router = APIRouter(prefix="/analyze", tags=["analyze"])

ALLOWED_TYPES = {"image/jpeg", "image/png", "image/webp"}


@router.get("/status", response_model=ModelStatusResponse, summary="Model loading status")
async def model_status(
    service: FishNetService = Depends(get_fishnet_service),
) -> ModelStatusResponse:
    status = service.status()
    return ModelStatusResponse(
        is_model_loading=status.is_model_loading,
        model_error=status.model_error,
        fish_count=status.fish_count,
    )


@router.post(
    "",
    response_model=AnalysisResponse,
    status_code=http_status.HTTP_200_OK,
    summary="Classify a fish photo",
)
async def analyze_fish(
    file: UploadFile = File(..., description="Fish photo (JPG, PNG or WEBP)."),
    service: FishNetService = Depends(get_fishnet_service),
) -> AnalysisResponse:
    """Return species, freshness and disease risk for an uploaded fish photo."""
    if file.content_type not in ALLOWED_TYPES:
        raise HTTPException(
            status_code=http_status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Unsupported file type. Please upload a JPG, PNG or WEBP image.",
        )

    image_bytes = await file.read()
    if len(image_bytes) > service.settings.max_upload_bytes:
        raise HTTPException(
            status_code=http_status.HTTP_413_CONTENT_TOO_LARGE,
            detail="File too large.",
        )

    if not service.ready():
        raise HTTPException(
            status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="FishNet models not available. Place the species and disease checkpoints in the model directory.",
        )

    try:
        result = service.analyze_image(image_bytes)
    except InvalidImageError:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail="Could not read the provided image. Please upload a valid JPG/PNG file.",
        )
    if result is None:
        raise HTTPException(
            status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="FishNet models not available.",
        )

    return AnalysisResponse.model_validate(result.to_dict())


@router.post("/vectors", response_model=AnalysisResponse, summary="Post-process raw model scores")
async def analyze_vectors(
    request: VectorAnalysisRequest,
    service: FishNetService = Depends(get_fishnet_service),
) -> AnalysisResponse:
    """Run only the decision rules on species/disease scores computed elsewhere."""
    result = service.analyze_vectors(request.species, request.disease)
    return AnalysisResponse.model_validate(result.to_dict())
