"""
Error taxonomy shared by the store and the services
"""


class CantineoError(Exception):
    """Base class for every error raised by Cantineo"""


class StorageError(CantineoError):
    """A storage operation failed"""


class StorageUnavailable(StorageError):
    """The underlying database cannot be opened or created"""


class TransactionFailed(StorageError):
    """A multi-record write could not complete and was rolled back"""


class InvalidArgument(CantineoError, ValueError):
    """Caller supplied a value that is rejected before reaching storage"""


class DuplicateMeal(InvalidArgument):
    """An employee already has a meal recorded for that day"""

    def __init__(self, employee_id: str, date: str):
        self.employee_id = employee_id
        self.date = date
        super().__init__(f"Employee {employee_id} already has a meal on {date}")
