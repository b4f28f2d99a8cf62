"""Custom exceptions for glTF loading operations"""


class GLTFError(Exception):
    """Base exception for glTF errors"""
    pass


class MalformedContainerError(GLTFError):
    """GLB framing errors (bad magic, wrong chunk type)"""
    pass


class TruncatedError(MalformedContainerError):
    """Stream ended inside a header or chunk body"""
    pass


class UnsupportedVersionError(GLTFError):
    """GLB container version other than 2"""
    pass


class InvalidDocumentError(GLTFError):
    """JSON segment is not valid JSON or does not match the schema"""
    pass


class UnknownEnumValueError(GLTFError):
    """Enumerated wire code outside the allowed set"""

    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"bad {field} {value!r}")


class IndexOutOfRangeError(GLTFError):
    """Index into buffers/bufferViews/accessors/images does not exist"""
    pass


class RangeOverflowError(GLTFError):
    """Byte range does not fit inside its backing buffer or view"""
    pass


class UnsupportedFeatureError(GLTFError):
    """Valid glTF this loader does not handle (sparse accessors)"""
    pass


class InvalidAccessorError(GLTFError):
    """Accessor that cannot describe any bytes (zero count, no view)"""
    pass


class MissingResourceError(GLTFError):
    """Binary resource absent or unreadable"""
    pass


class InvalidDataURIError(GLTFError):
    """Malformed data: URI"""
    pass
