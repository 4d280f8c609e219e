class TextClipError(Exception):
    """Base class for textclip-specific errors."""


# Container level
class CannotLoad(TextClipError):
    """The input could not be opened or is not a clipping container."""


class SerializationFailure(TextClipError):
    """The property list serializer rejected the assembled container tree."""


# Rich-text collaborators; identifier rules turn these into empty slots
class RTFError(ValueError):
    pass


class RTFDError(ValueError):
    pass
