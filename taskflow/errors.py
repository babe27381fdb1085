# backend/taskflow/errors.py


class TaskFlowError(Exception):
    """Base error rendered as {"message": ...} with `status_code`."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"message": self.message}


class NotFound(TaskFlowError):
    """Referenced task, user, category or class does not exist."""

    status_code = 404


class InvalidRange(TaskFlowError):
    """Heatmap dates missing or unparseable."""

    status_code = 400


class ValidationFailure(TaskFlowError):
    status_code = 400
