"""
Route mapping strategies, in the order they are applied.
"""

from typing import Iterable, List, Optional

from ...classfile import AnnotationDecoder
from .base import MappingStrategy
from .explicit import ExplicitUrlMapStrategy
from .class_name import ClassNameConventionStrategy, url_segment
from .bean_name import BeanNameConventionStrategy
from .annotations import AnnotationMappingStrategy, mapping_urls


def default_strategies(
    decoder: AnnotationDecoder,
    controller_annotations: Optional[Iterable[str]] = None,
) -> List[MappingStrategy]:
    """The four strategies in their fixed application order."""
    return [
        ExplicitUrlMapStrategy(decoder),
        ClassNameConventionStrategy(decoder),
        BeanNameConventionStrategy(decoder),
        AnnotationMappingStrategy(decoder, controller_annotations),
    ]


__all__ = [
    "MappingStrategy",
    "ExplicitUrlMapStrategy",
    "ClassNameConventionStrategy",
    "BeanNameConventionStrategy",
    "AnnotationMappingStrategy",
    "default_strategies",
    "url_segment",
    "mapping_urls",
]
