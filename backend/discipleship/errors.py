"""
Typed failures for the discipleship engine.

Each error carries a stable `code` so callers can render a precise message
("finish the modules first" vs. "already concluded") without parsing text.
Expected business conditions (invalid transition, incomplete modules,
duplicate enrollment) and store failures share this hierarchy; none of them
is retried by the engine.
"""


class DiscipleshipError(Exception):
    code = "discipleship_error"

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code, **self.context}


class InvalidTransition(DiscipleshipError):
    code = "invalid_transition"


class IncompleteModules(DiscipleshipError):
    code = "incomplete_modules"

    def __init__(self, done_modules: int, total_modules: int):
        if total_modules == 0:
            message = "Case has no enrolled modules to conclude"
        else:
            message = f"Finish all modules before concluding ({done_modules}/{total_modules} done)"
        super().__init__(message, done_modules=done_modules, total_modules=total_modules)


class DuplicateEnrollment(DiscipleshipError):
    code = "duplicate_enrollment"


class NotFound(DiscipleshipError):
    code = "not_found"


class InvalidValue(DiscipleshipError):
    code = "invalid_value"


class PersistenceFailure(DiscipleshipError):
    code = "persistence_failure"
