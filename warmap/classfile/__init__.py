"""
Class file decoding - annotations and debug names from compiled classes.
"""

from .annotations import (
    ABSENT,
    Absent,
    Annotation,
    AttributeValue,
    Scalar,
    ScalarList,
    find_annotation,
)
from .reader import (
    ClassFile,
    ClassFileReader,
    ClassFormatError,
    LocalVariable,
    MethodInfo,
    split_method_descriptor,
    type_name,
)
from .decoder import AnnotationDecoder, class_file_name

__all__ = [
    "ABSENT",
    "Absent",
    "Annotation",
    "AttributeValue",
    "Scalar",
    "ScalarList",
    "find_annotation",
    "ClassFile",
    "ClassFileReader",
    "ClassFormatError",
    "LocalVariable",
    "MethodInfo",
    "split_method_descriptor",
    "type_name",
    "AnnotationDecoder",
    "class_file_name",
]
