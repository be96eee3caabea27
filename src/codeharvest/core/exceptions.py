class CodeHarvestError(Exception):
    """Base class for codeharvest exceptions."""
    pass

class ConfigurationError(CodeHarvestError):
    """Exception for configuration errors."""
    pass

class ArchivePayloadError(CodeHarvestError):
    """Raised when an archive payload is requested for an empty or invalid structure."""
    def __init__(self, message=None, item=None):
        self.item = item
        self.message = message or "Project structure is empty"
        super().__init__(self.message)

class FileServiceError(CodeHarvestError):
    """Exception for file service errors."""
    pass
