"""Exception hierarchy. Every failure is scoped to the operation that raised it."""


class ChartflowError(Exception):
    """Base class for all chartflow errors."""


# Input shape: recoverable by re-entering data
class InputShapeError(ChartflowError):
    pass


class CsvFormatError(InputShapeError):
    pass


class EmptyDatasetError(InputShapeError):
    pass


# Analysis collaborator: recoverable by falling back to manual entry
class AnalysisError(ChartflowError):
    pass


class AnalysisNotConfiguredError(AnalysisError):
    pass


class AnalysisServiceError(AnalysisError):
    pass


class InvalidAnalysisResponseError(AnalysisError):
    pass


class ExportError(ChartflowError):
    pass


class PaletteError(ChartflowError):
    pass
