from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Sequence

from fishnet.core.config import Settings, get_settings
from fishnet.core.labels import DISEASE_LABELS, SPECIES_LABELS
from fishnet.models.fish_classifier import Predictor, load_classifier_checkpoint
from fishnet.services.postprocess import FALLBACK_RESULT, AnalysisResult, analyze
from fishnet.services.preprocess import FULL_FRAME_BOX, load_image, to_input_tensor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelStatus:
    is_model_loading: bool
    model_error: Optional[str]
    fish_count: int


class FishNetService:
    """Holds the species and disease models and runs full image analyses."""

    def __init__(
        self,
        species: Optional[Predictor] = None,
        disease: Optional[Predictor] = None,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        model_error: Optional[str] = None,
    ) -> None:
        self.species = species
        self.disease = disease
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()
        self.model_error = model_error
        self.fish_count = 0

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "FishNetService":
        """Load both checkpoints. Failures are recorded, never raised."""
        settings = settings or get_settings()
        try:
            species = load_classifier_checkpoint(
                settings.model_dir,
                settings.species_model_name,
                SPECIES_LABELS,
                device=settings.device,
            )
            disease = load_classifier_checkpoint(
                settings.model_dir,
                settings.disease_model_name,
                DISEASE_LABELS,
                device=settings.device,
            )
        except FileNotFoundError as exc:
            # The models are optional; the API layer returns a friendly message if missing.
            logger.warning("FishNet model artifacts not found in %s.", settings.model_dir)
            return cls(settings=settings, model_error=str(exc))
        except Exception as exc:
            logger.exception("Failed to load FishNet models: %s", exc)
            return cls(settings=settings, model_error=str(exc))

        logger.info("FishNet models loaded from %s", settings.model_dir)
        return cls(species=species.predictor, disease=disease.predictor, settings=settings)

    def ready(self) -> bool:
        return self.species is not None and self.disease is not None

    def status(self) -> ModelStatus:
        # Loading is synchronous, so by the time anyone asks it has finished.
        return ModelStatus(
            is_model_loading=False,
            model_error=self.model_error,
            fish_count=self.fish_count,
        )

    def analyze_vectors(
        self,
        species_vector: Sequence[float],
        disease_vector: Sequence[float],
    ) -> AnalysisResult:
        return analyze(
            species_vector,
            disease_vector,
            rng=self.rng,
            verbose=self.settings.debug_diagnostics,
        )

    def analyze_image(self, image_bytes: bytes) -> Optional[AnalysisResult]:
        """Classify an uploaded photo. Returns ``None`` when models are not loaded.

        Raises ``InvalidImageError`` for bytes that are not an image.
        """
        if not self.ready():
            return None

        image = load_image(image_bytes)
        # Detection is bypassed: the whole frame counts as a single fish.
        self.fish_count = 1

        try:
            tensor = to_input_tensor(image, box=FULL_FRAME_BOX, size=self.settings.image_size)
            species_scores = self.species.predict(tensor)
            disease_scores = self.disease.predict(tensor)
        except Exception as exc:
            logger.warning("Inference failed, returning fallback result: %s", exc)
            return FALLBACK_RESULT

        return self.analyze_vectors(species_scores, disease_scores)


@lru_cache(maxsize=1)
def get_fishnet_service() -> FishNetService:
    return FishNetService.from_settings(get_settings())
