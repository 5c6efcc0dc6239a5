"""
product_builder — configuration de produits imprimés par blocs + calcul de prix.

Usage :
    from product_builder import template, Selection, PriceCalculator, default_catalog

    schema = template("flyer")
    sel    = Selection.from_schema(schema)
    quote  = PriceCalculator(default_catalog()).quote(schema, sel, qty=100)
    print(quote.unit_price, quote.total)
"""
from .blocks import *  # noqa: F401,F403
from .blocks import __all__ as _blocks_all
from .business_days import business_date, format_business_date, is_business_day
from .cache import TTLCache
from .catalog import OptionCatalog, default_catalog
from .client import PriceClient
from .errors import (
    CatalogUnavailable, ErrorKind, PricingUnavailable, ProductBuilderError, SchemaError,
    UnresolvedConfiguration, ValidationIssue,
)
from .packaging import Packaging, ShippingConfig, binding_packaging, sheet_packaging, shipping_cost
from .pricing import AddonOption, PriceCalculator, PriceQuote, addon_total
from .resolver import Resolution, Resolver, resolve
from .schema import BINDING_TYPES, PRODUCT_TYPES, BlockSchema, OutsourcedConfig, QtyDiscount
from .selection import FinishingSelection, Selection
from .templates import TEMPLATE_NAMES, TEMPLATES, block_types, default_config, new_block, template
from .thickness import binding_thickness, thickness_limit

__version__ = "0.3.0"

__all__ = list(_blocks_all) + [
    "business_date", "format_business_date", "is_business_day",
    "TTLCache",
    "OptionCatalog", "default_catalog",
    "PriceClient",
    "CatalogUnavailable", "ErrorKind", "PricingUnavailable", "ProductBuilderError", "SchemaError",
    "UnresolvedConfiguration", "ValidationIssue",
    "Packaging", "ShippingConfig", "binding_packaging", "sheet_packaging", "shipping_cost",
    "AddonOption", "PriceCalculator", "PriceQuote", "addon_total",
    "Resolution", "Resolver", "resolve",
    "BINDING_TYPES", "PRODUCT_TYPES", "BlockSchema", "OutsourcedConfig", "QtyDiscount",
    "FinishingSelection", "Selection",
    "TEMPLATE_NAMES", "TEMPLATES", "block_types", "default_config", "new_block", "template",
    "binding_thickness", "thickness_limit",
]
