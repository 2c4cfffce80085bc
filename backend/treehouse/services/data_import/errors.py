"""Exceptions raised by the data import pipeline.

Run-level errors (ParseError, UnsupportedImportTypeError) abort an import and
propagate to the caller. Row-level errors (RowImportError subclasses) are
raised inside a single row's savepoint and collected by the importer, never
propagated out of it.
"""


class DataImportError(Exception):
    """Base class for every import pipeline error."""


class ParseError(DataImportError):
    """CSV text could not be tokenized into rows."""


class UnsupportedImportTypeError(DataImportError):
    def __init__(self, import_type: str):
        self.import_type = import_type
        super().__init__(f"Unsupported import type: {import_type}")


class RowImportError(DataImportError):
    """A single row was rejected; the batch carries on."""


class DuplicateRecordError(RowImportError):
    pass


class ReferenceResolutionError(RowImportError):
    def __init__(self, entity: str, key: str):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")


class RollbackStateError(DataImportError):
    """Rollback requested for a run that is missing or already rolled back."""


class RecordNotFoundError(DataImportError):
    def __init__(self, model: str, record_id: str):
        self.model = model
        self.record_id = record_id
        super().__init__(f"{model} {record_id} not found")


class ImportRunNotFoundError(RollbackStateError):
    def __init__(self, import_history_id):
        self.import_history_id = import_history_id
        super().__init__("Import history not found")
