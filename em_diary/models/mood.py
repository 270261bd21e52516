from enum import Enum


class Mood(str, Enum):
    """How the report seemed during a one-on-one.

    Values are the symbols stored in note documents; ``label`` is what forms
    and summaries display.
    """

    HAPPY = "😊"
    NEUTRAL = "😐"
    SAD = "😔"
    FRUSTRATED = "😤"
    TIRED = "😴"

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def aria_label(self) -> str:
        return f"{self.label} mood"

    @classmethod
    def _missing_(cls, value):
        # Accept labels ("Happy", "tired") as well as the stored symbols
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls.__members__[key]
        return None
