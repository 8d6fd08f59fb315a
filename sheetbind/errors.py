"""Custom exceptions used across sheetbind."""


class SheetBindError(Exception):
    """Base error for the package."""


class SchemaError(SheetBindError):
    """Record schema declaration is malformed."""


class TemplateOpenError(SheetBindError):
    """Raised when a template or existing workbook cannot be opened."""


class ColumnResolutionError(SheetBindError):
    """Raised when a cell's column letter cannot be determined."""


class SaveError(SheetBindError):
    """Raised when the workbook cannot be persisted."""
