from typing import Dict, Optional


class RegistryError(Exception):
    """The registry could not be reached or answered with a failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RegistryFieldErrors(RegistryError):
    def __init__(self, errors: Dict[str, str], status_code: Optional[int] = None):
        super().__init__("Registration has invalid fields", status_code)
        self.errors = errors


class CollegeNotFound(RegistryError):
    def __init__(self, college_id: str):
        super().__init__(f"College not found: {college_id}", 404)
        self.college_id = college_id
