"""
Blocs produit — exports publics + BlockUnion discriminé par `type`.
"""
from typing import Annotated, Union
from pydantic import Field

from .base import BaseBlock, BlockConfig, BlockId, PaperChoice, PrintChoice
from .size import SizeBlock, SizeConfig, OptionListConfig
from .paper import PaperBlock, PaperConfig
from .printing import PrintBlock, PrintConfig
from .finishing import (
    FinishingBlock, FinishingConfig, FinishingDefault, CoatingConfig, CountConfig,
    COATING_TYPES, COATING_SIDES,
)
from .options import PPBlock, BackBlock, SpringColorBlock, CoverPrintBlock, CoverPrintConfig
from .spring import SpringOptionsBlock, SpringOptionsConfig, SpringGroup, SpringOption
from .delivery import DeliveryBlock, DeliveryConfig, DeliveryOption, DELIVERY_DAYS
from .quantity import QuantityBlock, QuantityConfig
from .pages import (
    PagesBlock, PagesConfig, LinkedBlocks, InnerLayerBlock, InnerLayerConfig,
    inner_page_count,
)

# Union discriminée par type — un variant par type de bloc
BlockUnion = Annotated[
    Union[
        SizeBlock,
        PaperBlock,
        PrintBlock,
        FinishingBlock,
        PPBlock,
        CoverPrintBlock,
        BackBlock,
        SpringColorBlock,
        SpringOptionsBlock,
        DeliveryBlock,
        QuantityBlock,
        PagesBlock,
        InnerLayerBlock,
    ],
    Field(discriminator="type"),
]

BLOCK_CLASSES = [
    SizeBlock, PaperBlock, PrintBlock, FinishingBlock, PPBlock, CoverPrintBlock, BackBlock,
    SpringColorBlock, SpringOptionsBlock, DeliveryBlock, QuantityBlock, PagesBlock, InnerLayerBlock,
]

__all__ = [
    # Base
    "BaseBlock", "BlockConfig", "BlockId", "PaperChoice", "PrintChoice", "OptionListConfig",
    # Variants
    "SizeBlock", "SizeConfig",
    "PaperBlock", "PaperConfig",
    "PrintBlock", "PrintConfig",
    "FinishingBlock", "FinishingConfig", "FinishingDefault", "CoatingConfig", "CountConfig",
    "COATING_TYPES", "COATING_SIDES",
    "PPBlock", "BackBlock", "SpringColorBlock", "CoverPrintBlock", "CoverPrintConfig",
    "SpringOptionsBlock", "SpringOptionsConfig", "SpringGroup", "SpringOption",
    "DeliveryBlock", "DeliveryConfig", "DeliveryOption", "DELIVERY_DAYS",
    "QuantityBlock", "QuantityConfig",
    "PagesBlock", "PagesConfig", "LinkedBlocks", "InnerLayerBlock", "InnerLayerConfig",
    "inner_page_count",
    # Union
    "BlockUnion", "BLOCK_CLASSES",
]
