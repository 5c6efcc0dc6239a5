"""
Modèles de produits (flyer, perfect, saddle, spring) et config par défaut d'un nouveau bloc.

Les modèles sont écrits en JSON brut (forme persistée) puis validés en BlockSchema :
ce qui est stocké en base et ce qui sort d'ici suivent le même chemin.
"""
import copy
from typing import Any, Dict, List

from .blocks import BLOCK_CLASSES
from .blocks.base import BaseBlock
from .schema import BlockSchema

TEMPLATE_NAMES = {
    "flyer":   "전단지",
    "perfect": "무선제본",
    "saddle":  "중철제본",
    "spring":  "스프링제본",
}


def _block(id: int, type: str, label: str, config: dict, **flags) -> dict:
    block = {"id": id, "type": type, "label": label, "on": True,
             "optional": False, "locked": False, "hidden": False, "config": config}
    block.update(flags)
    return block


def _delivery(*ids: str) -> dict:
    options = [o for o in _DELIVERY_OPTIONS if o["id"] in ids]
    return {"options": copy.deepcopy(options), "default": "next2"}


_DELIVERY_OPTIONS = [
    {"id": "same",  "label": "당일",    "enabled": False, "percent": 30, "deadline": "10:00"},
    {"id": "next1", "label": "1영업일", "enabled": True,  "percent": 15, "deadline": "12:00"},
    {"id": "next2", "label": "2영업일", "enabled": True,  "percent": 0,  "deadline": "12:00"},
    {"id": "next3", "label": "3영업일", "enabled": True,  "percent": -5, "deadline": "12:00"},
]

_SIZE = {"options": ["a4", "a5", "b5"], "default": "a4"}
_COVER_FINISHING = {
    "corner": False, "punch": False, "mising": False,
    "coating": {"enabled": True, "types": ["matte", "gloss"], "sides": ["single", "double"]},
    "osi": {"enabled": False, "options": []},
    "fold": {"enabled": False, "options": []},
}
_COVER_PRINT = {"color": True, "mono": False, "single": False, "double": True,
                "default": {"color": "color", "side": "double"}}
_INNER_PAPER = {"papers": {"mojo": [80, 100], "snow": [100, 120]},
                "default": {"paper": "mojo", "weight": 80}}
_BOOK_QTY = {"options": [10, 20, 30, 50, 100], "default": 30}
_LINKS = {"coverPaper": 2, "coverPrint": 3, "innerPaper": 5, "innerPrint": 6}


def _spring_group(*options, default: str) -> dict:
    return {"enabled": True, "options": [
        {"id": i, "label": label, "enabled": True, "default": i == default} for i, label in options
    ]}


TEMPLATES: Dict[str, List[dict]] = {
    "flyer": [
        _block(1, "size", "사이즈", _SIZE),
        _block(2, "paper", "용지", {
            "papers": {"snow": [100, 120, 150, 180], "mojo": [80, 100, 120]},
            "default": {"paper": "snow", "weight": 120},
        }),
        _block(3, "print", "인쇄", {"color": True, "mono": True, "single": True, "double": True,
                                    "default": {"color": "color", "side": "double"}}),
        _block(4, "finishing", "후가공", {
            "corner": True, "punch": True, "mising": False,
            "coating": {"enabled": True, "types": ["matte", "gloss"], "sides": ["single", "double"]},
            "osi": {"enabled": True, "options": [1, 2, 3]},
            "fold": {"enabled": True, "options": [2, 3, 4]},
        }, optional=True),
        _block(5, "delivery", "출고일", _delivery("same", "next1", "next2", "next3")),
        _block(6, "quantity", "수량", {"options": [50, 100, 200, 500, 1000], "default": 100}),
    ],
    "perfect": [
        _block(1, "size", "사이즈", _SIZE),
        _block(2, "paper", "표지 용지", {"papers": {"snow": [200, 250, 300]},
                                         "default": {"paper": "snow", "weight": 250}}),
        _block(3, "print", "표지 인쇄", _COVER_PRINT, locked=True, hidden=True),
        _block(4, "finishing", "표지 후가공", _COVER_FINISHING),
        _block(5, "paper", "내지 용지", _INNER_PAPER),
        _block(6, "print", "내지 인쇄", {"color": True, "mono": True, "single": True, "double": True,
                                         "default": {"color": "color", "side": "double"}}),
        _block(7, "pages", "페이지 수", {"min": 40, "max": 500, "step": 2, "default": 100,
                                         "bindingType": "leaf", "linkedBlocks": _LINKS}),
        _block(8, "delivery", "출고일", _delivery("next2", "next3")),
        _block(9, "quantity", "수량", _BOOK_QTY),
    ],
    "saddle": [
        _block(1, "size", "사이즈", _SIZE),
        _block(2, "paper", "표지 용지", {"papers": {"snow": [150, 180, 200]},
                                         "default": {"paper": "snow", "weight": 180}}),
        _block(3, "print", "표지 인쇄", _COVER_PRINT, locked=True, hidden=True),
        _block(4, "finishing", "표지 후가공", _COVER_FINISHING, optional=True),
        _block(5, "paper", "내지 용지", _INNER_PAPER),
        _block(6, "print", "내지 인쇄", {"color": True, "mono": True, "single": False, "double": True,
                                         "default": {"color": "color", "side": "double"}}),
        _block(7, "pages", "페이지 수", {"min": 8, "max": 48, "step": 4, "default": 16,
                                         "bindingType": "saddle", "linkedBlocks": _LINKS}),
        _block(8, "delivery", "출고일", _delivery("next2", "next3")),
        _block(9, "quantity", "수량", _BOOK_QTY),
    ],
    "spring": [
        _block(1, "size", "사이즈", _SIZE),
        _block(2, "spring_options", "스프링 옵션", {
            "pp": _spring_group(("clear", "투명"), ("frosted", "불투명"), ("none", "없음"), default="clear"),
            "coverPrint": {
                **_spring_group(("none", "없음"), ("front_only", "앞표지만"), ("front_back", "앞뒤표지"),
                                default="none"),
                "papers": {"snow": [200, 250, 300], "mojo": [150, 180]},
                "defaultPaper": {"paper": "snow", "weight": 200},
            },
            "back": _spring_group(("white", "화이트"), ("black", "블랙"), ("none", "없음"), default="white"),
            "springColor": _spring_group(("black", "블랙"), ("white", "화이트"), default="black"),
        }),
        _block(3, "paper", "내지 용지", _INNER_PAPER),
        _block(4, "print", "내지 인쇄", {"color": True, "mono": True, "single": True, "double": True,
                                         "default": {"color": "color", "side": "double"}}),
        _block(5, "pages", "페이지 수", {"min": 10, "max": 400, "step": 2, "default": 50,
                                         "bindingType": "leaf",
                                         "linkedBlocks": {"innerPaper": 3, "innerPrint": 4}}),
        _block(6, "delivery", "출고일", _delivery("next2", "next3")),
        _block(7, "quantity", "수량", _BOOK_QTY),
    ],
}


def template(product_type: str) -> BlockSchema:
    """Schéma neuf à partir d'un modèle (copie profonde : le modèle n'est jamais modifié)."""
    if product_type not in TEMPLATES:
        raise KeyError(f"Modèle inconnu : {product_type}")
    return BlockSchema.model_validate({
        "productType": product_type,
        "blocks": copy.deepcopy(TEMPLATES[product_type]),
    })


# configs qui diffèrent du défaut de la classe pour un même bloc
_VARIANT_CONFIGS: Dict[str, dict] = {
    "pages_saddle": {"min": 8, "max": 48, "step": 4, "default": 16, "maxThickness": 2.5},
    "pages_leaf":   {"min": 10, "max": 500, "step": 2, "default": 50, "maxThickness": 50,
                     "bindingType": "leaf"},
    "inner_layer_saddle": {
        "papers": {"mojo": [80, 100, 120], "snow": [100, 120, 150], "art": [100, 120, 150]},
        "defaultPaper": {"paper": "mojo", "weight": 80},
        "single": False, "min": 8, "max": 48, "step": 4, "defaultPages": 16, "maxThickness": 2.5,
    },
    "inner_layer_leaf": {
        "papers": {"mojo": [80, 100, 120], "snow": [100, 120, 150], "art": [100, 120, 150]},
        "defaultPaper": {"paper": "mojo", "weight": 80},
        "min": 10, "max": 500, "step": 1, "defaultPages": 50, "maxThickness": 50,
    },
}

_CLASS_BY_TYPE = {}
for _cls in BLOCK_CLASSES:
    for _t in _cls.model_fields["type"].annotation.__args__:
        _CLASS_BY_TYPE[_t] = _cls


def block_types() -> List[str]:
    return list(_CLASS_BY_TYPE)


def default_config(block_type: str) -> Dict[str, Any]:
    """Config JSON d'un bloc fraîchement ajouté par l'admin."""
    if block_type not in _CLASS_BY_TYPE:
        raise KeyError(f"Type de bloc inconnu : {block_type}")
    if block_type in _VARIANT_CONFIGS:
        cls = _CLASS_BY_TYPE[block_type]
        config_cls = cls.model_fields["config"].annotation
        return config_cls.model_validate(_VARIANT_CONFIGS[block_type]).model_dump(by_alias=True, mode="json")
    block = _CLASS_BY_TYPE[block_type](id="new")
    return block.config.model_dump(by_alias=True, mode="json")


def new_block(block_type: str, block_id: Any, label: str = "") -> BaseBlock:
    cls = _CLASS_BY_TYPE.get(block_type)
    if cls is None:
        raise KeyError(f"Type de bloc inconnu : {block_type}")
    return cls.model_validate({
        "id": block_id, "type": block_type, "label": label,
        "config": default_config(block_type),
    })
