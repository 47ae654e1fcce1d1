from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())


class SpeciesOut(_CamelModel):
    name: str = Field(..., description="Display name of the chosen species.")
    confidence: float = Field(..., description="Recalibrated confidence as a percentage.")


class FreshnessOut(_CamelModel):
    score: float = Field(..., description="Estimated freshness as a fraction in [0, 1].")
    label: Literal["Fresh", "Stale"]


class DiseaseOut(_CamelModel):
    name: str = Field(..., description="'Healthy', '<disease> Risk' or '<disease> (Borderline)'.")
    has_disease: bool = Field(..., alias="hasDisease")
    confidence: float = Field(..., description="Disease (or healthy) confidence as a percentage.")


class BoundingBoxOut(_CamelModel):
    y_min: float = Field(0.0, alias="yMin")
    x_min: float = Field(0.0, alias="xMin")
    y_max: float = Field(1.0, alias="yMax")
    x_max: float = Field(1.0, alias="xMax")


class AnalysisResponse(_CamelModel):
    species: SpeciesOut
    freshness: FreshnessOut
    disease: DiseaseOut
    bounding_box: BoundingBoxOut = Field(..., alias="boundingBox")


class VectorAnalysisRequest(BaseModel):
    # Left untyped so malformed scores reach the post-processor and resolve to the fallback.
    species: Any = Field(
        default_factory=list,
        description="Raw species scores, index-aligned to the 18 species labels.",
    )
    disease: Any = Field(
        default_factory=list,
        description="Raw disease scores ordered black_gill_disease, healthy, white_spot_virus.",
    )


class ModelStatusResponse(_CamelModel):
    is_model_loading: bool = Field(..., alias="isModelLoading")
    model_error: Optional[str] = Field(None, alias="modelError")
    fish_count: int = Field(0, alias="fishCount")
