"""Prompt assembly.

``build_prompt`` is a pure function: the same tone, length, context and
message always give the same bytes. Sections appear in a fixed order: tone,
length, cultural context, weather context, directives, user message.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .profiles import LengthClass, Tone

DIRECTIVES: tuple[str, ...] = (
    "छत्तीसगढ़ी भाषा का ज्यादा इस्तेमाल करो।",
    "छत्तीसगढ़ के मौसम, संस्कृति, परंपरा, तिहार, लोक नाच, कला अउ भाखा से जुड़े सवाल के जवाब दो, दूसर बात म जादा झन भटको।",
    "छत्तीसगढ़ के बारे में अपडेट जानकारी के साथ जवाब दो।",
    "अगर कोई खास जानकारी नहीं है तो विनम्रता से बता दो अउ सामान्य सहायक तरीके से जवाब दो।",
)


@dataclass(frozen=True)
class GroundingContext:
    """Request-scoped grounding lines, already reduced to ``label: content``."""

    cultural: tuple[str, ...] = ()
    weather: tuple[str, ...] = ()

    @property
    def cultural_text(self) -> str:
        return "\n".join(self.cultural)

    @property
    def weather_text(self) -> str:
        return "\n".join(self.weather)

    @property
    def is_empty(self) -> bool:
        return not self.cultural and not self.weather


def _clean(value: Any) -> str:
    return " ".join(str(value).split()) if value is not None else ""


def culture_line(row: Mapping[str, Any]) -> str:
    """Reduce a cultural fact row to ``title: content``."""
    return f"{_clean(row.get('title'))}: {_clean(row.get('content'))}"


def weather_line(row: Mapping[str, Any]) -> str:
    """Reduce a weather observation to ``district: 32°C, condition``."""
    parts = []
    temperature = row.get("temperature")
    if temperature is not None:
        try:
            parts.append(f"{float(temperature):g}°C")
        except (TypeError, ValueError):
            parts.append(f"{_clean(temperature)}°C")
    condition = _clean(row.get("weather_condition"))
    if condition:
        parts.append(condition)
    return f"{_clean(row.get('district_name'))}: {', '.join(parts)}"


def build_prompt(tone: Tone, length: LengthClass, context: GroundingContext, message: str) -> str:
    directives = "\n".join(DIRECTIVES)
    return (
        f"तुम एक छत्तीसगढ़ी AI सहायक हो जो {tone.instruction} जवाब देता है।\n"
        f"{length.instruction} में जवाब दो।\n"
        "\n"
        "आपको निम्नलिखित छत्तीसगढ़ की जानकारी है:\n"
        "\n"
        "सांस्कृतिक जानकारी:\n"
        f"{context.cultural_text}\n"
        "\n"
        "मौसम की जानकारी:\n"
        f"{context.weather_text}\n"
        "\n"
        f"{directives}\n"
        "\n"
        f"उपयोगकर्ता का सवाल: {message}"
    )
