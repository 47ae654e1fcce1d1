import json

import numpy as np
import pytest
import torch
from torch import nn

from fishnet.core.labels import DISEASE_LABELS
from fishnet.models.fish_classifier import (
    TorchPredictor,
    create_fish_classifier,
    load_classifier_checkpoint,
    save_classifier_checkpoint,
    sha256,
)


class TinyNet(nn.Module):
    def __init__(self, num_classes=3):
        super().__init__()
        self.pool = nn.AdaptiveAvgPool2d(1)
        self.fc = nn.Linear(3, num_classes)

    def forward(self, x):
        return self.fc(self.pool(x).flatten(1))


def test_predictor_returns_probability_vector():
    predictor = TorchPredictor(TinyNet(num_classes=3))
    scores = predictor.predict(torch.rand(1, 3, 32, 32))
    assert isinstance(scores, np.ndarray)
    assert scores.shape == (3,)
    assert scores.sum() == pytest.approx(1.0)


def test_predictor_without_softmax_returns_raw_output():
    model = TinyNet(num_classes=3)
    predictor = TorchPredictor(model, apply_softmax=False)
    x = torch.rand(1, 3, 8, 8)
    with torch.no_grad():
        expected = model(x).squeeze(0).numpy()
    assert np.allclose(predictor.predict(x), expected, atol=1e-6)


def test_classifier_head_matches_label_count():
    model = create_fish_classifier(num_classes=18)
    model.eval()
    with torch.no_grad():
        out = model(torch.rand(1, 3, 224, 224))
    assert out.shape == (1, 18)


def test_checkpoint_round_trip(tmp_path):
    model = create_fish_classifier(num_classes=len(DISEASE_LABELS))
    save_classifier_checkpoint(tmp_path, "fish_disease", model, DISEASE_LABELS, {"dropout": 0.2})

    artifacts = load_classifier_checkpoint(tmp_path, "fish_disease", DISEASE_LABELS)
    assert artifacts.labels == DISEASE_LABELS
    assert artifacts.config["dropout"] == 0.2
    scores = artifacts.predictor.predict(torch.rand(1, 3, 224, 224))
    assert scores.shape == (3,)


def test_missing_checkpoint_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_classifier_checkpoint(tmp_path, "fish_disease", DISEASE_LABELS)


def test_label_order_mismatch_raises(tmp_path):
    model = create_fish_classifier(num_classes=3)
    shuffled = list(reversed(DISEASE_LABELS))
    save_classifier_checkpoint(tmp_path, "fish_disease", model, shuffled, {})
    with pytest.raises(ValueError, match="Label order"):
        load_classifier_checkpoint(tmp_path, "fish_disease", DISEASE_LABELS)


def test_checksum_mismatch_raises(tmp_path):
    model = create_fish_classifier(num_classes=3)
    save_classifier_checkpoint(tmp_path, "fish_disease", model, DISEASE_LABELS, {})
    (tmp_path / "checksums.json").write_text(json.dumps({"fish_disease.pt": "0" * 64}))
    with pytest.raises(ValueError, match="Checksum"):
        load_classifier_checkpoint(tmp_path, "fish_disease", DISEASE_LABELS)


def test_matching_checksum_loads(tmp_path):
    model = create_fish_classifier(num_classes=3)
    save_classifier_checkpoint(tmp_path, "fish_disease", model, DISEASE_LABELS, {})
    digest = sha256(tmp_path / "fish_disease.pt")
    (tmp_path / "checksums.json").write_text(json.dumps({"fish_disease.pt": digest}))
    artifacts = load_classifier_checkpoint(tmp_path, "fish_disease", DISEASE_LABELS)
    assert artifacts.labels == DISEASE_LABELS
