"""
Compiled class file reader.

Parses the parts of a JVM class file needed for static route discovery:
class hierarchy names, runtime-visible annotations on classes, methods and
method parameters, and the local variable table of method bodies.
Everything else is skipped.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .annotations import Annotation

MAGIC = 0xCAFEBABE

ACC_STATIC = 0x0008
ACC_INTERFACE = 0x0200

# Constant pool tags
CONSTANT_UTF8 = 1
CONSTANT_INTEGER = 3
CONSTANT_FLOAT = 4
CONSTANT_LONG = 5
CONSTANT_DOUBLE = 6
CONSTANT_CLASS = 7
CONSTANT_STRING = 8
CONSTANT_FIELDREF = 9
CONSTANT_METHODREF = 10
CONSTANT_INTERFACE_METHODREF = 11
CONSTANT_NAME_AND_TYPE = 12
CONSTANT_METHOD_HANDLE = 15
CONSTANT_METHOD_TYPE = 16
CONSTANT_DYNAMIC = 17
CONSTANT_INVOKE_DYNAMIC = 18
CONSTANT_MODULE = 19
CONSTANT_PACKAGE = 20

# Payload size of constant pool entries that are skipped
_SKIPPED_SIZES = {
    CONSTANT_FIELDREF: 4,
    CONSTANT_METHODREF: 4,
    CONSTANT_INTERFACE_METHODREF: 4,
    CONSTANT_NAME_AND_TYPE: 4,
    CONSTANT_METHOD_HANDLE: 3,
    CONSTANT_METHOD_TYPE: 2,
    CONSTANT_DYNAMIC: 4,
    CONSTANT_INVOKE_DYNAMIC: 4,
    CONSTANT_MODULE: 2,
    CONSTANT_PACKAGE: 2,
}

_PRIMITIVES = {
    "B": "byte",
    "C": "char",
    "D": "double",
    "F": "float",
    "I": "int",
    "J": "long",
    "S": "short",
    "Z": "boolean",
    "V": "void",
}


class ClassFormatError(ValueError):
    """The bytes are not a well-formed class file."""


# ============================================================================
# Descriptors
# ============================================================================

def split_method_descriptor(descriptor: str) -> Tuple[List[str], str]:
    """
    Split a method descriptor into parameter and return field descriptors.

    Example:
        "(ILjava/lang/String;[J)V" -> (["I", "Ljava/lang/String;", "[J"], "V")
    """
    if not descriptor.startswith("("):
        raise ClassFormatError(f"bad method descriptor {descriptor!r}")
    params: List[str] = []
    i = 1
    try:
        while descriptor[i] != ")":
            start = i
            while descriptor[i] == "[":
                i += 1
            if descriptor[i] == "L":
                end = descriptor.find(";", i)
                if end < 0:
                    raise ClassFormatError(f"bad method descriptor {descriptor!r}")
                i = end + 1
            elif descriptor[i] in _PRIMITIVES:
                i += 1
            else:
                raise ClassFormatError(f"bad method descriptor {descriptor!r}")
            params.append(descriptor[start:i])
    except IndexError as e:
        raise ClassFormatError(f"bad method descriptor {descriptor!r}") from e
    return params, descriptor[i + 1:]


def type_name(descriptor: str) -> str:
    """
    External type name of a field descriptor.

    "I" -> "int", "Ljava/lang/String;" -> "java.lang.String", "[[B" -> "byte[][]"
    """
    dims = 0
    while descriptor.startswith("["):
        dims += 1
        descriptor = descriptor[1:]
    if descriptor.startswith("L") and descriptor.endswith(";"):
        name = descriptor[1:-1].replace("/", ".")
    elif descriptor in _PRIMITIVES:
        name = _PRIMITIVES[descriptor]
    else:
        raise ClassFormatError(f"bad field descriptor {descriptor!r}")
    return name + "[]" * dims


def slot_width(descriptor: str) -> int:
    """Local variable slots taken by a value of the given type."""
    return 2 if descriptor in ("J", "D") else 1


# ============================================================================
# Class model
# ============================================================================

@dataclass(frozen=True)
class LocalVariable:
    start_pc: int
    length: int
    name: str
    descriptor: str
    index: int


@dataclass
class MethodInfo:
    """A method with its annotations and debug information."""
    name: str
    descriptor: str
    access_flags: int
    annotations: List[Annotation] = field(default_factory=list)
    parameter_annotations: List[List[Annotation]] = field(default_factory=list)
    local_variables: List[LocalVariable] = field(default_factory=list)
    parameter_descriptors: List[str] = field(default_factory=list)

    @property
    def is_static(self) -> bool:
        return bool(self.access_flags & ACC_STATIC)

    @property
    def parameter_types(self) -> List[str]:
        return [type_name(d) for d in self.parameter_descriptors]

    def annotations_of_parameter(self, index: int) -> List[Annotation]:
        """
        Annotations on the index-th declared parameter.

        The parameter annotation table may omit leading synthetic parameters,
        so it is aligned to the end of the parameter list.
        """
        count = len(self.parameter_descriptors)
        offset = count - len(self.parameter_annotations)
        position = index - max(offset, 0)
        if 0 <= position < len(self.parameter_annotations):
            return self.parameter_annotations[position]
        return []


@dataclass
class ClassFile:
    """The decoded parts of a class file."""
    name: str
    super_name: Optional[str]
    interfaces: List[str]
    access_flags: int
    annotations: List[Annotation] = field(default_factory=list)
    methods: List[MethodInfo] = field(default_factory=list)

    @property
    def is_interface(self) -> bool:
        return bool(self.access_flags & ACC_INTERFACE)

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def find_methods(self, name: str) -> List[MethodInfo]:
        return [m for m in self.methods if m.name == name]


# ============================================================================
# Reader
# ============================================================================

class ClassFileReader:
    """
    Single-use parser over the bytes of one class file.

    Usage:
        ```python
        cls = ClassFileReader(data).read()
        ```
    """

    def __init__(self, data: bytes):
        self._data = data
        self._pos = 0
        self._pool: List[Any] = []

    # -- primitives ------------------------------------------------------

    def _unpack(self, fmt: str) -> Any:
        try:
            values = struct.unpack_from(fmt, self._data, self._pos)
        except struct.error as e:
            raise ClassFormatError(f"truncated class file at offset {self._pos}") from e
        self._pos += struct.calcsize(fmt)
        return values[0]

    def _u1(self) -> int:
        return self._unpack(">B")

    def _u2(self) -> int:
        return self._unpack(">H")

    def _u4(self) -> int:
        return self._unpack(">I")

    def _skip(self, length: int) -> None:
        if self._pos + length > len(self._data):
            raise ClassFormatError(f"truncated class file at offset {self._pos}")
        self._pos += length

    # -- constant pool ---------------------------------------------------

    def _read_constant_pool(self) -> None:
        count = self._u2()
        pool: List[Any] = [None] * count
        index = 1
        while index < count:
            tag = self._u1()
            if tag == CONSTANT_UTF8:
                length = self._u2()
                raw = self._data[self._pos:self._pos + length]
                self._skip(length)
                pool[index] = _decode_modified_utf8(raw)
            elif tag == CONSTANT_INTEGER:
                pool[index] = self._unpack(">i")
            elif tag == CONSTANT_FLOAT:
                pool[index] = self._unpack(">f")
            elif tag == CONSTANT_LONG:
                pool[index] = self._unpack(">q")
                index += 1
            elif tag == CONSTANT_DOUBLE:
                pool[index] = self._unpack(">d")
                index += 1
            elif tag in (CONSTANT_CLASS, CONSTANT_STRING):
                pool[index] = (tag, self._u2())
            elif tag in _SKIPPED_SIZES:
                self._skip(_SKIPPED_SIZES[tag])
            else:
                raise ClassFormatError(f"unknown constant pool tag {tag} at entry {index}")
            index += 1
        self._pool = pool

    def _constant(self, index: int) -> Any:
        if not 0 < index < len(self._pool) or self._pool[index] is None:
            raise ClassFormatError(f"bad constant pool index {index}")
        return self._pool[index]

    def _utf8(self, index: int) -> str:
        value = self._constant(index)
        if not isinstance(value, str):
            raise ClassFormatError(f"constant {index} is not a UTF8 entry")
        return value

    def _class_name(self, index: int) -> Optional[str]:
        if index == 0:
            return None
        value = self._constant(index)
        if not (isinstance(value, tuple) and value[0] == CONSTANT_CLASS):
            raise ClassFormatError(f"constant {index} is not a class entry")
        return self._utf8(value[1]).replace("/", ".")

    # -- annotations -----------------------------------------------------

    def _read_annotations(self) -> List[Annotation]:
        return [self._read_annotation() for _ in range(self._u2())]

    def _read_annotation(self) -> Annotation:
        annotation_type = type_name(self._utf8(self._u2()))
        elements: Dict[str, Any] = {}
        for _ in range(self._u2()):
            name = self._utf8(self._u2())
            elements[name] = self._read_element_value()
        return Annotation(annotation_type, elements)

    def _read_element_value(self) -> Any:
        tag = chr(self._u1())
        if tag in "BIS":
            return self._constant(self._u2())
        if tag == "C":
            return chr(self._constant(self._u2()))
        if tag == "Z":
            return bool(self._constant(self._u2()))
        if tag in "DFJ":
            return self._constant(self._u2())
        if tag == "s":
            return self._utf8(self._u2())
        if tag == "e":
            self._u2()  # enum type
            return self._utf8(self._u2())
        if tag == "c":
            return type_name(self._utf8(self._u2()))
        if tag == "@":
            return self._read_annotation()
        if tag == "[":
            return tuple(self._read_element_value() for _ in range(self._u2()))
        raise ClassFormatError(f"unknown element value tag {tag!r}")

    # -- members ---------------------------------------------------------

    def _skip_attributes(self) -> None:
        for _ in range(self._u2()):
            self._u2()
            self._skip(self._u4())

    def _read_method(self) -> MethodInfo:
        method = MethodInfo(
            access_flags=self._u2(),
            name=self._utf8(self._u2()),
            descriptor=self._utf8(self._u2()),
        )
        method.parameter_descriptors = split_method_descriptor(method.descriptor)[0]
        for _ in range(self._u2()):
            attribute = self._utf8(self._u2())
            length = self._u4()
            end = self._pos + length
            if attribute == "RuntimeVisibleAnnotations":
                method.annotations = self._read_annotations()
            elif attribute == "RuntimeVisibleParameterAnnotations":
                method.parameter_annotations = [
                    self._read_annotations() for _ in range(self._u1())
                ]
            elif attribute == "Code":
                method.local_variables = self._read_code(end)
            self._pos = end
        return method

    def _read_code(self, end: int) -> List[LocalVariable]:
        self._skip(4)  # max_stack, max_locals
        self._skip(self._u4())
        self._skip(8 * self._u2())
        variables: List[LocalVariable] = []
        for _ in range(self._u2()):
            attribute = self._utf8(self._u2())
            length = self._u4()
            attribute_end = self._pos + length
            if attribute == "LocalVariableTable":
                for _ in range(self._u2()):
                    variables.append(LocalVariable(
                        start_pc=self._u2(),
                        length=self._u2(),
                        name=self._utf8(self._u2()),
                        descriptor=self._utf8(self._u2()),
                        index=self._u2(),
                    ))
            self._pos = attribute_end
        if self._pos > end:
            raise ClassFormatError("Code attribute overruns its length")
        return variables

    # -- entry point -----------------------------------------------------

    def read(self) -> ClassFile:
        """
        Parse the class file.

        Raises:
            ClassFormatError: The data is not a well-formed class file
        """
        if self._u4() != MAGIC:
            raise ClassFormatError("bad magic number")
        self._skip(4)  # minor, major version
        self._read_constant_pool()

        access_flags = self._u2()
        name = self._class_name(self._u2())
        if name is None:
            raise ClassFormatError("missing this_class")
        super_name = self._class_name(self._u2())
        interfaces = [self._class_name(self._u2()) for _ in range(self._u2())]

        for _ in range(self._u2()):  # fields
            self._skip(6)
            self._skip_attributes()

        methods = [self._read_method() for _ in range(self._u2())]

        annotations: List[Annotation] = []
        for _ in range(self._u2()):
            attribute = self._utf8(self._u2())
            length = self._u4()
            end = self._pos + length
            if attribute == "RuntimeVisibleAnnotations":
                annotations = self._read_annotations()
            self._pos = end

        return ClassFile(
            name=name,
            super_name=super_name,
            interfaces=[i for i in interfaces if i],
            access_flags=access_flags,
            annotations=annotations,
            methods=methods,
        )


def _decode_modified_utf8(raw: bytes) -> str:
    return raw.replace(b"\xc0\x80", b"\x00").decode("utf-8", errors="surrogatepass")
