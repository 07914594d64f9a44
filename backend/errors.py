class PersonalColorError(Exception):
    """Base class for analysis and simulation failures"""


class FaceNotFoundError(PersonalColorError):
    """No face was detected in the uploaded image"""


class InvalidLandmarksError(PersonalColorError):
    """Landmarks are missing or describe a zero-sized face"""


class AnalysisInProgressError(PersonalColorError):
    """A second image analysis was started while one is running"""


class RemoteEditError(PersonalColorError):
    """Base class for remote image edit failures"""


class RemoteTransportFailure(RemoteEditError):
    """Network or HTTP level failure talking to the edit service"""


class RemoteParseFailure(RemoteEditError):
    """The edit service answered but no image could be extracted"""

    def __init__(self, message, raw_text=None):
        super().__init__(message)
        self.raw_text = raw_text


class CredentialError(RemoteEditError):
    """Missing or invalid access password"""


class RemoteConfigurationError(RemoteEditError):
    """The server side of the edit proxy is not configured"""
