from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Protocol

import numpy as np
import torch
from torch import nn
from torchvision import models


class Predictor(Protocol):
    """Anything that maps an input tensor to a 1-D score vector."""

    def predict(self, tensor: torch.Tensor) -> np.ndarray:
        ...


class TorchPredictor:
    """Adapter exposing a torch classifier through the ``Predictor`` interface."""

    def __init__(
        self,
        model: nn.Module,
        device: torch.device | str = "cpu",
        apply_softmax: bool = True,
    ) -> None:
        self.device = torch.device(device)
        self.model = model.to(self.device)
        self.model.eval()
        self.apply_softmax = apply_softmax

    def predict(self, tensor: torch.Tensor) -> np.ndarray:
        with torch.no_grad():
            output = self.model(tensor.to(self.device))
            if self.apply_softmax:
                output = torch.softmax(output, dim=-1)
        return output.squeeze(0).detach().cpu().numpy().astype(np.float64)


@dataclass(frozen=True)
class ClassifierArtifacts:
    """Container returned by the loader for convenient access."""

    predictor: TorchPredictor
    labels: List[str]
    config: Dict[str, object]


def create_fish_classifier(
    num_classes: int,
    pretrained: bool = False,
    dropout: float = 0.2,
) -> nn.Module:
    """Build a MobileNetV3-Small backbone with a custom classification head."""
    try:
        weights = models.MobileNet_V3_Small_Weights.IMAGENET1K_V1 if pretrained else None
    except AttributeError:
        weights = None
    model = models.mobilenet_v3_small(weights=weights)

    # Swap dropout and the final layer so the head matches our label set.
    in_features = model.classifier[-1].in_features
    model.classifier[-2] = nn.Dropout(p=dropout)
    model.classifier[-1] = nn.Linear(in_features, num_classes)
    return model


def sha256(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def save_classifier_checkpoint(
    output_dir: Path,
    name: str,
    model: nn.Module,
    labels: List[str],
    config: Dict[str, object],
) -> None:
    """Persist model weights plus the label order needed for inference."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    ckpt = {
        "model_state": model.state_dict(),
        "config": config,
    }
    torch.save(ckpt, output_dir / f"{name}.pt")
    (output_dir / f"{name}_classes.json").write_text(json.dumps(list(labels), indent=2))


def _verify_checksum(model_dir: Path, ckpt_path: Path) -> None:
    checksums_path = model_dir / "checksums.json"
    if not checksums_path.exists():
        return
    expected = json.loads(checksums_path.read_text()).get(ckpt_path.name)
    if expected and sha256(ckpt_path) != expected:
        raise ValueError(f"Checksum mismatch for {ckpt_path.name}")


def load_classifier_checkpoint(
    model_dir: Path,
    name: str,
    expected_labels: List[str],
    device: torch.device | str = "cpu",
) -> ClassifierArtifacts:
    """Load a trained classifier and check its output order against ``expected_labels``."""
    model_dir = Path(model_dir)

    ckpt_path = model_dir / f"{name}.pt"
    classes_path = model_dir / f"{name}_classes.json"
    if not (ckpt_path.exists() and classes_path.exists()):
        raise FileNotFoundError(
            f"Missing checkpoint files in {model_dir}. "
            f"Expected {ckpt_path.name} and {classes_path.name}."
        )

    labels = list(json.loads(classes_path.read_text()))
    if labels != list(expected_labels):
        raise ValueError(
            f"Label order in {classes_path.name} does not match the expected order: "
            f"{labels} != {list(expected_labels)}"
        )
    _verify_checksum(model_dir, ckpt_path)

    ckpt = torch.load(ckpt_path, map_location=device)
    config = ckpt.get("config", {})
    model = create_fish_classifier(
        num_classes=len(labels),
        pretrained=False,  # weights come from the checkpoint
        dropout=float(config.get("dropout", 0.2)),
    )
    model.load_state_dict(ckpt["model_state"])

    predictor = TorchPredictor(
        model,
        device=device,
        apply_softmax=bool(config.get("apply_softmax", True)),
    )
    return ClassifierArtifacts(predictor=predictor, labels=labels, config=config)
