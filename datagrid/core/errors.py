from __future__ import annotations


class ListingError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class MalformedSortError(ListingError):
    status_code = 400

    def __init__(self, raw: str, reason: str):
        super().__init__(f'Malformed sort directive "{raw}": {reason}')
        self.raw = raw


class UnknownColumnError(ListingError):
    status_code = 400

    def __init__(self, column: str):
        super().__init__(f'Unknown column "{column}"')
        self.column = column


class DerivedFieldEditError(ListingError):
    def __init__(self, column: str):
        super().__init__(f"Can not edit the '{column}' attribute, it is a derived field on the record.")
        self.column = column


class ColumnAlreadyExistsError(ListingError):
    def __init__(self, column: str):
        super().__init__(f"Can not add the '{column}' column, the results already have that column.")
        self.column = column
