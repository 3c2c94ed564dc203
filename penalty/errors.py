"""Exception types raised by the penalty inference pipeline."""


class PenaltyError(Exception):
    pass


class MetadataError(PenaltyError):
    """Metadata document missing, unreadable, or inconsistent."""


class ModelLoadError(PenaltyError):
    """Model artifact missing or unusable."""


class NotReadyError(PenaltyError):
    """Metadata or model did not load at startup; predictions are blocked."""

    def __init__(self, errors=()):
        self.errors = list(errors)
        detail = "; ".join(self.errors) if self.errors else "startup load incomplete"
        super().__init__(f"Modelo o metadatos no cargados ({detail})")


class InputValidationError(PenaltyError):
    def __init__(self, result):
        self.result = result
        super().__init__(result.message)


class PredictionError(PenaltyError):
    """Model call failed or returned something that is not a probability."""
