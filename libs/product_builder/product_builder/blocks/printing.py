"""Bloc Print — couleur / noir & blanc, recto / recto-verso."""
from typing import Any, List, Literal, Optional

from ..catalog import OptionCatalog
from ..errors import ErrorKind, SchemaError
from .base import BaseBlock, BlockConfig, PrintChoice

PRINT_FLAGS = ("color", "mono", "single", "double")


class PrintFlags(BlockConfig):
    color:  bool = True
    mono:   bool = True
    single: bool = True
    double: bool = True

    def print_codes(self) -> List[str]:
        return [f for f in PRINT_FLAGS if getattr(self, f)]

    def toggle_print(self, code: str, enabled: bool) -> None:
        if code not in PRINT_FLAGS:
            raise SchemaError(ErrorKind.UNKNOWN_OPTION, f"Option d'impression inconnue : {code!r}")
        setattr(self, code, enabled)

    def accepts_print(self, value: Any) -> bool:
        if isinstance(value, dict):
            value = PrintChoice.model_validate(value)
        if not isinstance(value, PrintChoice):
            return False
        return (
            value.color in PRINT_FLAGS[:2] and getattr(self, value.color)
            and value.side in PRINT_FLAGS[2:] and getattr(self, value.side)
        )

    def print_cleared(self, default: Optional[PrintChoice]) -> bool:
        return default is not None and not self.accepts_print(default)


class PrintConfig(PrintFlags):
    default: Optional[PrintChoice] = PrintChoice()

    def option_codes(self) -> List[str]:
        return self.print_codes()

    def choice_count(self) -> Optional[int]:
        return (self.color + self.mono) * (self.single + self.double)

    def toggle(self, code: Any, enabled: bool, group: Optional[str] = None,
               weight: Optional[int] = None, catalog: Optional[OptionCatalog] = None) -> None:
        self.toggle_print(code, enabled)
        if self.print_cleared(self.default):
            self.default = None

    def accepts(self, value: Any, group: Optional[str] = None) -> bool:
        return self.accepts_print(value)

    def set_default(self, value: Any, group: Optional[str] = None) -> None:
        super().set_default(value, group)
        self.default = PrintChoice.model_validate(value)


class PrintBlock(BaseBlock):
    type: Literal["print"] = "print"
    config: PrintConfig = PrintConfig()
