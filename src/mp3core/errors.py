class Mp3FormatError(ValueError): ...

class NoValidFramesError(Mp3FormatError):
    def __init__(self, message: str = "No valid frames found"):
        super().__init__(message)

class FrameSyncError(Mp3FormatError): ...

class InvalidFrameError(Mp3FormatError): ...

class XingHeaderError(Mp3FormatError): ...
