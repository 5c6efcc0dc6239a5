"""
Erreurs du product_builder.

Deux familles :
  - ValidationIssue : message structuré renvoyé à l'UI (le client corrige sa sélection)
  - ProductBuilderError et dérivées : exceptions levées par le schéma / le calcul de prix
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ErrorKind(str, Enum):
    INVALID_DEFAULT           = "InvalidDefault"
    MISSING_COVER_SOURCE      = "MissingCoverSource"
    THICKNESS_EXCEEDED        = "ThicknessExceeded"
    COATING_WEIGHT_INELIGIBLE = "CoatingWeightIneligible"
    UNRESOLVED_CONFIGURATION  = "UnresolvedConfiguration"
    UNKNOWN_OPTION            = "UnknownOption"


class ValidationIssue(BaseModel):
    """{kind, message, affectedBlockId?} — sérialisé tel quel vers l'UI."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    kind: ErrorKind
    message: str
    affected_block_id: Optional[str] = None


class ProductBuilderError(Exception):
    """Racine des erreurs du module."""
    kind: ErrorKind = ErrorKind.UNRESOLVED_CONFIGURATION

    def __init__(self, message: str, issues: Optional[List[ValidationIssue]] = None):
        super().__init__(message)
        self.message = message
        self.issues: List[ValidationIssue] = list(issues or [])

    def to_dict(self) -> dict:
        return {
            "kind":    self.kind.value,
            "message": self.message,
            "issues":  [i.model_dump(by_alias=True, mode="json") for i in self.issues],
        }


class SchemaError(ProductBuilderError):
    """Erreur d'édition du schéma (défaut invalide, option inconnue) — rejetée à l'enregistrement."""

    def __init__(self, kind: ErrorKind, message: str, block_id: Optional[str] = None):
        issue = ValidationIssue(kind=kind, message=message, affected_block_id=block_id)
        super().__init__(message, [issue])
        self.kind = kind
        self.block_id = block_id

    @classmethod
    def from_issues(cls, issues: List[ValidationIssue]) -> "SchemaError":
        first = issues[0]
        err = cls(first.kind, f"Schéma invalide ({len(issues)} erreur(s)) : {first.message}",
                  first.affected_block_id)
        err.issues = list(issues)
        return err


class UnresolvedConfiguration(ProductBuilderError):
    """Sélection invalide ou lien de bloc non résolu : aucun prix n'est calculé."""
    kind = ErrorKind.UNRESOLVED_CONFIGURATION


class CatalogUnavailable(ProductBuilderError):
    """Chargement du catalogue (DB) en échec. Pas de retry interne."""


class PricingUnavailable(ProductBuilderError):
    """Appel distant du calcul de prix en échec. Pas de retry interne."""
