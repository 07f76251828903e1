"""Parameter errors for ftp-deploy deployments."""


class DeployParameterError(ValueError):
    """Base exception for invalid deployment parameters."""

    def __init__(self, parameter: str, message: str):
        super().__init__(message)
        self.parameter = parameter
        self.message = message

    def __str__(self) -> str:
        return self.message


class MissingParameterError(DeployParameterError):
    """A mandatory deployment parameter was not given."""

    def __init__(self, parameter: str):
        super().__init__(parameter, f"{parameter} parameter is mandatory")


class InvalidParameterError(DeployParameterError):
    """A deployment parameter has an unusable value."""
