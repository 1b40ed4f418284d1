"""
Annotation-driven mapping (@Controller + @RequestMapping).

URLs are built from the class-level mapping (one prefix per value) and the
method-level mapping (one suffix per value); request methods come from the
mapping's 'method' attribute or the composed annotation used
(@GetMapping, ...), defaulting to GET, POST, PUT and DELETE.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from ...classfile import Annotation, AnnotationDecoder, ClassFile, MethodInfo, find_annotation
from ...routing import ComponentDestination, HttpMethod, RequestParameter, RouteTable
from .. import constants
from ..definitions import ComponentDefinition, DiscoveredDefinition
from ..registry import Registry
from .base import MappingStrategy

logger = logging.getLogger("warmap.spring.strategies.annotations")

# Compiler-generated bridge and synthetic methods repeat their target's annotations
ACC_BRIDGE = 0x0040
ACC_SYNTHETIC = 0x1000

METHOD_MAPPINGS = (constants.REQUEST_MAPPING,) + tuple(constants.COMPOSED_MAPPINGS)


def mapping_urls(url_prefix: str, mapping: Optional[Annotation]) -> List[str]:
    """
    Combine a prefix with the values of a mapping annotation.

    The prefix loses its trailing slashes and each value its leading ones,
    so exactly one '/' separates them. Without values the prefix is used
    alone.
    """
    prefix = url_prefix.rstrip("/")
    values = mapping.first_of("value", "path").as_list() if mapping is not None else []
    if not values:
        return [prefix]
    return [f"{prefix}/{str(value).lstrip('/')}" for value in values]


class AnnotationMappingStrategy(MappingStrategy):
    """
    Maps the handler methods of annotated controllers.

    Args:
        decoder: Decoder for bean classes
        controller_annotations: Class annotations that mark a controller
    """

    name = "annotation-mapping"

    def __init__(self, decoder: AnnotationDecoder, controller_annotations: Optional[Iterable[str]] = None):
        super().__init__(decoder)
        self.controller_annotations = tuple(
            controller_annotations
            if controller_annotations is not None
            else (constants.CONTROLLER_ANNOTATION, constants.REST_CONTROLLER_ANNOTATION)
        )

    def apply(self, registry: Registry, url_prefix: str, table: RouteTable) -> int:
        count = 0
        for definition in registry.concrete_beans():
            decoded = self._decoded(definition)
            if decoded is None:
                continue
            if find_annotation(decoded.annotations, *self.controller_annotations) is None:
                continue
            count += self._map_controller(definition, decoded, url_prefix, table)
        return count

    def _decoded(self, definition: ComponentDefinition) -> Optional[ClassFile]:
        if isinstance(definition, DiscoveredDefinition):
            return definition.decoded
        class_name = definition.class_name
        if not class_name:
            return None
        return self.decoder.try_decode(class_name)

    def _map_controller(
        self,
        definition: ComponentDefinition,
        decoded: ClassFile,
        url_prefix: str,
        table: RouteTable,
    ) -> int:
        class_mapping = find_annotation(decoded.annotations, constants.REQUEST_MAPPING)
        prefixes = mapping_urls(url_prefix, class_mapping)

        count = 0
        for method in decoded.methods:
            if method.access_flags & (ACC_BRIDGE | ACC_SYNTHETIC):
                continue
            mapping = find_annotation(method.annotations, *METHOD_MAPPINGS)
            if mapping is None:
                continue

            methods = self.request_methods(mapping, decoded, method)
            if not methods:
                continue
            destination = ComponentDestination.of(
                definition,
                method_name=method.name,
                params=self.request_params(decoded, method),
            )
            for prefix in prefixes:
                for url in mapping_urls(prefix, mapping):
                    for http_method in methods:
                        table.put(url or "/", destination, http_method)
                        count += 1
        return count

    @staticmethod
    def request_methods(mapping: Annotation, decoded: ClassFile, method: MethodInfo) -> List[HttpMethod]:
        """HTTP methods a mapping applies to; all four when it names none."""
        implied = constants.COMPOSED_MAPPINGS.get(mapping.type_name)
        if implied is not None:
            return [HttpMethod(implied)]

        names = mapping.get("method").as_list()
        if not names:
            return list(HttpMethod.specific())

        result: List[HttpMethod] = []
        for name in names:
            parsed = HttpMethod.parse(str(name))
            if parsed is None:
                logger.warning(
                    f"Unsupported request method {name} on {decoded.name}.{method.name}(); ignored"
                )
            elif parsed not in result:
                result.append(parsed)
        return result

    def request_params(self, decoded: ClassFile, method: MethodInfo) -> Dict[str, RequestParameter]:
        """
        Request parameters bound by @RequestParam, sorted by name.

        A parameter without an explicit name takes its name from the local
        variable table and is required with no default.
        """
        params: Dict[str, RequestParameter] = {}
        types = method.parameter_types
        for index, param_type in enumerate(types):
            annotation = self.decoder.parameter_annotation(decoded.name, method, index, constants.REQUEST_PARAM)
            if annotation is None:
                continue

            param = self._from_annotation(annotation, param_type)
            if param is None:
                param = self._from_debug_info(decoded, method, index, param_type)
            if param is None:
                logger.warning(
                    f"Cannot determine the name of request parameter {index} of "
                    f"{decoded.name}.{method.name}(); compile with debug information or name it explicitly"
                )
                continue
            params[param.name] = param
        return dict(sorted(params.items()))

    @staticmethod
    def _from_annotation(annotation: Annotation, param_type: str) -> Optional[RequestParameter]:
        name = annotation.first_of("value", "name").as_scalar()
        if not isinstance(name, str) or not name:
            return None
        default = annotation.get("defaultValue").as_scalar()
        required = annotation.get("required").as_scalar()
        return RequestParameter(
            name=name,
            type=param_type,
            default_value="" if default is None else str(default),
            required=True if required is None else bool(required),
        )

    def _from_debug_info(
        self,
        decoded: ClassFile,
        method: MethodInfo,
        index: int,
        param_type: str,
    ) -> Optional[RequestParameter]:
        name = self.decoder.parameter_debug_name(decoded.name, method, index)
        if not name:
            return None
        return RequestParameter(name=name, type=param_type, default_value="", required=True)
