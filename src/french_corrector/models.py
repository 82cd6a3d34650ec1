"""
Objets valeur du pipeline de correction.

Toutes les classes sont des dataclasses immuables : chaque appel du pipeline
produit un résultat neuf, sans état partagé entre appels concurrents.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


NO_EXPLANATION = "No explanation provided."


class CorrectionType(str, Enum):
    """Taxonomie fermée des corrections."""

    PUNCTUATION = "Punctuation"
    CONJUGATION = "Conjugation"
    SPELLING = "Spelling"
    COMPREHENSION = "Comprehension"
    GRAMMAR = "Grammar"
    OTHER = "Other"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


@dataclass(frozen=True)
class CorrectionItem:
    """
    Une correction individuelle proposée par le modèle.

    `original` est un extrait libre, pas un offset garanti dans le texte source :
    il ne sert qu'à l'affichage.
    """

    original: str = ""
    corrected: str = ""
    short_explanation: str = ""
    explanation: str = ""
    type: CorrectionType = CorrectionType.OTHER

    def to_dict(self) -> dict[str, str]:
        return {
            "original": self.original,
            "corrected": self.corrected,
            "shortExplanation": self.short_explanation,
            "explanation": self.explanation,
            "type": self.type.value,
        }


@dataclass(frozen=True)
class CorrectionResult:
    corrected_text: str
    explanation: str = NO_EXPLANATION
    corrections: tuple[CorrectionItem, ...] = ()

    @classmethod
    def empty(cls) -> "CorrectionResult":
        """Résultat renvoyé pour une entrée vide, sans appel au modèle."""
        return cls(corrected_text="", explanation="", corrections=())

    def to_dict(self) -> dict[str, Any]:
        return {
            "correctedText": self.corrected_text,
            "explanation": self.explanation,
            "corrections": [item.to_dict() for item in self.corrections],
        }


@dataclass(frozen=True)
class StoredCorrection:
    """Correction persistée : paire entrée/sortie + identité et date de création."""

    id: str
    user_id: str
    original_text: str
    corrected_text: str
    created_at: datetime
    corrections: tuple[CorrectionItem, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "originalText": self.original_text,
            "correctedText": self.corrected_text,
            "corrections": [item.to_dict() for item in self.corrections],
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoredCorrection":
        # Import local : le classifieur dépend de ce module
        from .correction.classifier import classify_correction

        return cls(
            id=data["id"],
            user_id=data["userId"],
            original_text=data.get("originalText", ""),
            corrected_text=data.get("correctedText", ""),
            created_at=datetime.fromisoformat(data["createdAt"]),
            corrections=tuple(
                classify_correction(item) for item in data.get("corrections", [])
            ),
        )


@dataclass(frozen=True)
class AdviceExample:
    original: str = ""
    corrected: str = ""
    explanation: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "original": self.original,
            "corrected": self.corrected,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class AdviceCategory:
    """Un schéma d'erreur récurrent, pas une correction individuelle."""

    category: str
    title: str
    content: str
    examples: tuple[AdviceExample, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "title": self.title,
            "content": self.content,
            "examples": [example.to_dict() for example in self.examples],
        }


@dataclass(frozen=True)
class StudyAdvice:
    summary: str
    corrections: tuple[AdviceCategory, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "corrections": [entry.to_dict() for entry in self.corrections],
        }
