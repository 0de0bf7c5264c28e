from __future__ import annotations


class EveDBError(Exception):
    """
    Base for every error the gateway turns into a `{code, message}` response.
    """

    status_code = 500

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        self.message = message
        super().__init__(message)


class AuthError(EveDBError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class NotFound(EveDBError):
    status_code = 404


class TableNotFound(NotFound):
    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f'Doesn\'t a table named: "{table}"')


class PathNotFound(NotFound):
    def __init__(self, table: str, path: str) -> None:
        self.table = table
        self.path = path
        super().__init__(f'"{path}" doesn\'t exists on {table}')


class BackupNotFound(NotFound):
    def __init__(self, backup_id: str, table: str | None = None) -> None:
        self.backup_id = backup_id
        self.table = table
        if table is None:
            message = f'Doesn\'t a backup with the id: "{backup_id}"'
        else:
            message = f'"{table}" doesn\'t exists on {backup_id}'
        super().__init__(message)


class InvalidInput(EveDBError):
    status_code = 400


class InvalidKeyPath(InvalidInput):
    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"Invalid key path: {path!r}")


class ReadError(EveDBError):
    """A table or snapshot file is missing or does not hold a JSON object."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Could not read {key}: {reason}")
