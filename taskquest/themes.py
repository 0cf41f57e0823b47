"""Unlockable colour themes.

Each theme has a light and a dark palette and a minimum level. Palettes are
exposed to the page as CSS custom properties (see ``theme_css``).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

PALETTE_KEYS = (
    "primary", "secondary", "accent", "background", "surface", "text",
    "text_secondary", "border", "success", "warning", "danger", "info",
)

# palette key -> CSS custom properties it feeds
CSS_VARIABLES: Dict[str, tuple] = {
    "primary": ("--color-primary", "--tq-primary"),
    "secondary": ("--color-secondary", "--tq-secondary"),
    "accent": ("--color-accent",),
    "background": ("--color-bg-primary",),
    "surface": ("--color-bg-secondary",),
    "text": ("--color-text-primary",),
    "text_secondary": ("--color-text-secondary",),
    "border": ("--color-border",),
    "success": ("--color-success", "--tq-success"),
    "warning": ("--color-warning", "--tq-warning"),
    "danger": ("--color-danger", "--tq-danger"),
    "info": ("--color-info", "--tq-info"),
}


@dataclass(frozen=True)
class Theme:
    id: str
    name: str
    description: str
    level_required: int
    light: Dict[str, str]
    dark: Dict[str, str]
    preview: str

    def palette(self, dark: bool) -> Dict[str, str]:
        return self.dark if dark else self.light


def _palette(*values: str) -> Dict[str, str]:
    return dict(zip(PALETTE_KEYS, values))


_STATUS_LIGHT = ("#38a169", "#ed8936", "#e53e3e", "#3182ce")
_STATUS_DARK = ("#48bb78", "#f6ad55", "#fc8181", "#63b3ed")

THEMES: List[Theme] = [
    Theme(
        id="default",
        name="Classic",
        description="The original warm design",
        level_required=1,
        light=_palette("#8B7D6B", "#A8967A", "#D4C4A8", "#FEF7E8", "#F9EED7", "#6A6258", "#7A7268", "#D4C4A8",
                       "#28a745", "#ffc107", "#dc3545", "#17a2b8"),
        dark=_palette("#D4C4A8", "#A8967A", "#8B7D6B", "#2A2520", "#3A342E", "#FEF7E8", "#E8E5E0", "#4A433C",
                      "#28a745", "#ffc107", "#dc3545", "#17a2b8"),
        preview="🎨",
    ),
    Theme(
        id="ocean",
        name="Ocean Depths",
        description="Deep blue waters and coral accents",
        level_required=5,
        light=_palette("#0066cc", "#4a90e2", "#ff6b6b", "#e8f4fd", "#d1e7f5", "#1a365d", "#2d3748", "#4a90e2",
                       "#38a169", "#ed8936", "#e53e3e", "#3182ce"),
        dark=_palette("#4a90e2", "#0066cc", "#ff6b6b", "#0a1929", "#1a2332", "#e2e8f0", "#cbd5e0", "#2d3748",
                      *_STATUS_DARK),
        preview="🌊",
    ),
    Theme(
        id="forest",
        name="Forest Guardian",
        description="Rich greens and earth tones",
        level_required=10,
        light=_palette("#2d5016", "#4a7c59", "#8b4513", "#f0f8e8", "#e6f3d6", "#1a202c", "#2d3748", "#4a7c59",
                       "#38a169", "#d69e2e", "#e53e3e", "#3182ce"),
        dark=_palette("#68d391", "#4a7c59", "#8b4513", "#0f1419", "#1a202c", "#e2e8f0", "#cbd5e0", "#2d3748",
                      *_STATUS_DARK),
        preview="🌲",
    ),
    Theme(
        id="sunset",
        name="Sunset Dreams",
        description="Warm oranges and purples",
        level_required=15,
        light=_palette("#ff6b35", "#f7931e", "#8e44ad", "#fff5e6", "#ffe8cc", "#2d1b69", "#4a5568", "#f7931e",
                       *_STATUS_LIGHT),
        dark=_palette("#ff8c42", "#f7931e", "#8e44ad", "#1a0d2e", "#2d1b69", "#f7fafc", "#e2e8f0", "#4a5568",
                      *_STATUS_DARK),
        preview="🌅",
    ),
    Theme(
        id="cosmic",
        name="Cosmic Explorer",
        description="Deep space and nebula colors",
        level_required=20,
        light=_palette("#6a0572", "#a8e6cf", "#ffd93d", "#f8f0ff", "#e6d7ff", "#2d1b69", "#4a5568", "#a8e6cf",
                       *_STATUS_LIGHT),
        dark=_palette("#a8e6cf", "#6a0572", "#ffd93d", "#0a0a1a", "#1a1a2e", "#e2e8f0", "#cbd5e0", "#2d3748",
                      *_STATUS_DARK),
        preview="🌌",
    ),
    Theme(
        id="royal",
        name="Royal Purple",
        description="Luxurious purples and golds",
        level_required=25,
        light=_palette("#4b0082", "#9370db", "#ffd700", "#f8f0ff", "#e6d7ff", "#2d1b69", "#4a5568", "#9370db",
                       *_STATUS_LIGHT),
        dark=_palette("#ffd700", "#9370db", "#4b0082", "#1a0d2e", "#2d1b69", "#f7fafc", "#e2e8f0", "#4a5568",
                      *_STATUS_DARK),
        preview="👑",
    ),
]

DEFAULT_THEME_ID = "default"
_BY_ID = {t.id: t for t in THEMES}


def get_theme(theme_id: str) -> Theme:
    return _BY_ID.get(theme_id) or _BY_ID[DEFAULT_THEME_ID]


def is_known_theme(theme_id: str) -> bool:
    return theme_id in _BY_ID


def available_themes(level: int) -> List[Theme]:
    return [t for t in THEMES if level >= t.level_required]


def locked_themes(level: int) -> List[Theme]:
    return [t for t in THEMES if level < t.level_required]


def theme_css(theme: Theme, dark: bool) -> str:
    colors = theme.palette(dark)
    lines = []
    for key, names in CSS_VARIABLES.items():
        for name in names:
            lines.append(f"  {name}: {colors[key]};")
    body = "\n".join(lines)
    scheme = "dark" if dark else "light"
    return f":root {{\n{body}\n  color-scheme: {scheme};\n}}"
