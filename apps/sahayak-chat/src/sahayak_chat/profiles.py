"""Tone and length tables.

Both tables are closed enums resolved with a default-on-miss rule: an unknown
or missing value never fails a request, it becomes the default member.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Voice:
    """A text-to-speech voice: display name and provider voice id."""

    name: str
    voice_id: str


@dataclass(frozen=True)
class ToneProfile:
    instruction: str
    voice: Voice


@dataclass(frozen=True)
class LengthProfile:
    instruction: str
    max_output_tokens: int


class Tone(str, Enum):
    FRIENDLY = "friendly"
    ENTHUSIASTIC = "enthusiastic"
    CALM = "calm"
    PLAYFUL = "playful"
    WISE = "wise"
    CARING = "caring"
    # Extended set
    EXCITED = "excited"
    PROFESSIONAL = "professional"
    GENTLE = "gentle"
    AUTHORITATIVE = "authoritative"

    @classmethod
    def resolve(cls, value: str | None) -> Tone:
        """Map a raw request value onto a member, falling back to DEFAULT_TONE."""
        if value is None:
            return DEFAULT_TONE
        try:
            return cls(value.strip().lower())
        except ValueError:
            return DEFAULT_TONE

    @property
    def profile(self) -> ToneProfile:
        return TONE_PROFILES[self]

    @property
    def instruction(self) -> str:
        return TONE_PROFILES[self].instruction

    @property
    def voice(self) -> Voice:
        return TONE_PROFILES[self].voice


class LengthClass(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"

    @classmethod
    def resolve(cls, value: str | None) -> LengthClass:
        """Map a raw request value onto a member, falling back to DEFAULT_LENGTH."""
        if value is None:
            return DEFAULT_LENGTH
        try:
            return cls(value.strip().lower())
        except ValueError:
            return DEFAULT_LENGTH

    @property
    def instruction(self) -> str:
        return LENGTH_PROFILES[self].instruction

    @property
    def max_output_tokens(self) -> int:
        return LENGTH_PROFILES[self].max_output_tokens


DEFAULT_TONE = Tone.FRIENDLY
DEFAULT_LENGTH = LengthClass.MEDIUM

# Voice ids are ElevenLabs premade voices.
TONE_PROFILES: dict[Tone, ToneProfile] = {
    Tone.FRIENDLY: ToneProfile("दोस्ताना अउ मिलनसार तरीका से", Voice("Aria", "9BWtsMINqrJLrRacOk9x")),
    Tone.ENTHUSIASTIC: ToneProfile("जोशीला अउ उत्साही तरीका से", Voice("Charlie", "IKne3meq5aSn9XLyUdCD")),
    Tone.CALM: ToneProfile("शांत अउ धैर्यवान तरीका से", Voice("Sarah", "EXAVITQu4vr4xnSDxMaL")),
    Tone.PLAYFUL: ToneProfile("मजेदार अउ हंसी-मजाक के साथ", Voice("River", "SAz9YHcvj6GT2YYXdXww")),
    Tone.WISE: ToneProfile("ज्ञानी अउ समझदार तरीका से", Voice("George", "JBFqnCBsd6RMkjVDRZzb")),
    Tone.CARING: ToneProfile("प्रेम अउ देखभाल के साथ", Voice("Laura", "FGY2WhTYpPnrIDTdsKH5")),
    Tone.EXCITED: ToneProfile("उमंग अउ खुसी के साथ", Voice("Liam", "TX3LPaxmHKxFdv7VOQHJ")),
    Tone.PROFESSIONAL: ToneProfile("पेसेवर अउ साफ-सुथरा तरीका से", Voice("Brian", "nPczCjzI2devNBz1zQrb")),
    Tone.GENTLE: ToneProfile("कोमल अउ नरम तरीका से", Voice("Alice", "Xb7hH8MSUJpSbSDYk0k2")),
    Tone.AUTHORITATIVE: ToneProfile("भरोसेमंद अउ जानकार तरीका से", Voice("Daniel", "onwK4e9ZLuTAKqWW03F9")),
}

LENGTH_PROFILES: dict[LengthClass, LengthProfile] = {
    LengthClass.SHORT: LengthProfile("एकदम छोटा जवाब (1-2 वाक्य)", 100),
    LengthClass.MEDIUM: LengthProfile("मध्यम जवाब (3-5 वाक्य)", 300),
    LengthClass.LONG: LengthProfile("विस्तार से जवाब (6+ वाक्य)", 600),
}


@dataclass(frozen=True)
class GenerationParams:
    """Sampling parameters sent with every generation call."""

    temperature: float
    top_p: float
    top_k: int
    max_output_tokens: int

    @classmethod
    def for_length(
        cls,
        length: LengthClass,
        temperature: float = 0.8,
        top_p: float = 0.95,
        top_k: int = 40,
    ) -> GenerationParams:
        return cls(
            temperature=temperature,
            top_p=top_p,
            top_k=top_k,
            max_output_tokens=length.max_output_tokens,
        )
