"""Typed failures raised by services and gateways.

Each class carries the HTTP status the API answers with; the mapping to a
response lives in a single exception handler in ``taskmanager.main``.
"""


class TaskManagerError(Exception):
    status_code = 400


class NotFoundError(TaskManagerError):
    status_code = 404


class ConflictError(TaskManagerError):
    status_code = 400


class DuplicateUsernameError(ConflictError):
    def __init__(self, username: str):
        super().__init__("Username is already taken")
        self.username = username


class DuplicateEmailError(ConflictError):
    def __init__(self, email: str):
        super().__init__("Email is already in use")
        self.email = email


class InvalidReferenceError(TaskManagerError):
    status_code = 400


class RoleNotFoundError(InvalidReferenceError):
    def __init__(self, role_name: str):
        super().__init__(f"Role not found: {role_name}")
        self.role_name = role_name


class UserNotFoundError(InvalidReferenceError):
    def __init__(self, reference: str):
        super().__init__(f"User not found: {reference}")
        self.reference = reference


class TaskNotFoundError(InvalidReferenceError):
    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class InvalidQueryError(TaskManagerError):
    status_code = 422


class AuthenticationError(TaskManagerError):
    status_code = 401


class InvalidCredentialsError(AuthenticationError):
    def __init__(self):
        super().__init__("Incorrect username or password")


class AuthorizationError(TaskManagerError):
    status_code = 403
