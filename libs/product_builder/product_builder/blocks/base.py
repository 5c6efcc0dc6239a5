"""
Blocs de base — BaseBlock discriminé par `type` + config propre à chaque type.

Chaque config sait :
  - lister ses options activées        → option_codes()
  - activer / désactiver une option    → toggle()
  - dire si une valeur est acceptable  → accepts()
  - poser / lire son défaut            → set_default() / default_value()
"""
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from ..catalog import OptionCatalog
from ..errors import ErrorKind, SchemaError


def _coerce_id(value: Any) -> Any:
    # les schémas historiques utilisent des ids numériques
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


BlockId = Annotated[str, BeforeValidator(_coerce_id)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaperChoice(CamelModel):
    paper: str
    weight: int


class PrintChoice(CamelModel):
    color: str = "color"   # color | mono
    side: str = "double"   # single | double


class BlockConfig(CamelModel):
    """Config d'un bloc. Les sous-classes redéfinissent les opérations utiles."""

    def option_codes(self) -> List[str]:
        return []

    def choice_count(self) -> Optional[int]:
        """Nombre de choix proposés au client. None : bloc sans choix exclusif (pas d'auto-lock)."""
        return len(self.option_codes())

    def toggle(self, code: Any, enabled: bool, group: Optional[str] = None,
               weight: Optional[int] = None, catalog: Optional[OptionCatalog] = None) -> None:
        raise SchemaError(ErrorKind.UNKNOWN_OPTION, f"Option {code!r} non activable sur ce bloc")

    def accepts(self, value: Any, group: Optional[str] = None) -> bool:
        return False

    def set_default(self, value: Any, group: Optional[str] = None) -> None:
        if not self.accepts(value, group):
            raise SchemaError(ErrorKind.INVALID_DEFAULT, f"Valeur par défaut {value!r} non activée")
        self.default = value  # type: ignore[attr-defined]

    def default_value(self) -> Any:
        return getattr(self, "default", None)


class BaseBlock(CamelModel):
    """Bloc de base (classe parente de tous les blocs)."""
    id: BlockId
    type: str
    label: str = ""
    on: bool = True
    optional: bool = False
    locked: bool = False
    hidden: bool = False
    config: BlockConfig = BlockConfig()


# ── Helpers partagés ────────────────────────────────────────────────────────

def toggle_in_list(options: List[Any], code: Any, enabled: bool, keep_sorted: bool = False) -> List[Any]:
    if enabled:
        if code not in options:
            options = [*options, code]
    else:
        options = [o for o in options if o != code]
    return sorted(options) if keep_sorted else options


def toggle_paper(
    papers: Dict[str, List[int]],
    code: str,
    enabled: bool,
    weight: Optional[int] = None,
    catalog: Optional[OptionCatalog] = None,
) -> Dict[str, List[int]]:
    """
    Config papier à deux niveaux : papier → grammages activés.
    - weight=None : active le papier (3 premiers grammages du catalogue) ou le retire entièrement
    - weight=N    : active / désactive un grammage
    """
    papers = {k: list(v) for k, v in papers.items()}
    if weight is None:
        if enabled:
            if code not in papers:
                papers[code] = (catalog.paper_weights(code) if catalog else [])[:3]
        else:
            papers.pop(code, None)
        return papers

    if catalog is not None and catalog.paper(code) and weight not in catalog.paper_weights(code):
        raise SchemaError(ErrorKind.UNKNOWN_OPTION, f"Grammage inconnu : {code} {weight}g")
    papers[code] = toggle_in_list(papers.get(code, []), weight, enabled, keep_sorted=True)
    return papers


def paper_enabled(papers: Dict[str, List[int]], choice: Any) -> bool:
    if isinstance(choice, dict):
        choice = PaperChoice.model_validate(choice)
    if not isinstance(choice, PaperChoice):
        return False
    return choice.weight in papers.get(choice.paper, [])


def paper_default_cleared(default: Optional[PaperChoice], code: str, weight: Optional[int]) -> bool:
    """True si la désactivation (code, weight) invalide le défaut papier."""
    if default is None or default.paper != code:
        return False
    return weight is None or default.weight == weight
