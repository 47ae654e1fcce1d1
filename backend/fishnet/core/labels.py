from typing import Dict, List

# Index order must match the output layer of the species model.
SPECIES_LABELS: List[str] = [
    "catfish",
    "catla",
    "common_carp",
    "crab",
    "grass_carp",
    "mackerel",
    "mrigal",
    "pink_perch",
    "prawn",
    "red_mullet",
    "rohu",
    "sea_bass",
    "sea_bream",
    "silver_carp",
    "sprat",
    "tilapia",
    "trout",
    "wild_fish_background",
]

DISEASE_LABELS: List[str] = ["black_gill_disease", "healthy", "white_spot_virus"]

BACKGROUND_LABEL = "wild_fish_background"
HEALTHY_LABEL = "healthy"

SPECIES_DISPLAY_NAMES: Dict[str, str] = {
    "sprat": "Sardine (Mathi)",
    "catla": "Catla (Indian Carp)",
    "rohu": "Rohu (Rui)",
    "prawn": "Prawn / Shrimp",
    "wild_fish_background": "Unknown / Background",
}

DISEASE_DISPLAY_NAMES: Dict[str, str] = {
    "black_gill_disease": "Black Gill",
    "healthy": "Healthy",
    "white_spot_virus": "White Spot",
}


def species_display_name(label: str) -> str:
    return SPECIES_DISPLAY_NAMES.get(label, label)


def disease_display_name(label: str) -> str:
    return DISEASE_DISPLAY_NAMES.get(label, label)
