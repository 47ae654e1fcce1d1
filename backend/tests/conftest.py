from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from fishnet.core.labels import DISEASE_LABELS, SPECIES_LABELS


def make_image_bytes(size=(64, 48), color=(30, 120, 200), fmt="PNG"):
    img = Image.new("RGB", size, color)
    with BytesIO() as buf:
        img.save(buf, format=fmt)
        return buf.getvalue()


class StaticPredictor:
    """Returns the same score vector for every input."""

    def __init__(self, scores):
        self.scores = np.asarray(scores, dtype=np.float64)
        self.calls = []

    def predict(self, tensor):
        self.calls.append(tuple(tensor.shape))
        return self.scores


class BrokenPredictor:
    def predict(self, tensor):
        raise RuntimeError("inference backend crashed")


@pytest.fixture
def image_bytes():
    return make_image_bytes()


@pytest.fixture
def rohu_scores():
    scores = [0.01] * len(SPECIES_LABELS)
    scores[SPECIES_LABELS.index("rohu")] = 0.9
    return scores


@pytest.fixture
def healthy_scores():
    scores = [0.05] * len(DISEASE_LABELS)
    scores[DISEASE_LABELS.index("healthy")] = 0.9
    return scores
