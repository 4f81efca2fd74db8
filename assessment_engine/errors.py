"""
Domain exceptions raised by the assessment services

Routers translate these into HTTP errors; str(exc) is always the
human-readable message shown to the caller.
"""
from typing import Optional, Dict, Any


class AssessmentError(Exception):
    """Base exception for all assessment engine errors"""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)


class NotFoundError(AssessmentError):
    """A referenced record does not exist"""
    pass


class FolderNotFoundError(NotFoundError):
    pass


class QuizNotFoundError(NotFoundError):
    pass


class QuestionNotFoundError(NotFoundError):
    pass


class FolderNotEmptyError(AssessmentError):
    """Folder still has child folders or owned items"""
    pass


class FolderCycleError(AssessmentError):
    """Parent references loop or exceed the allowed depth"""
    pass


class FolderValidationError(AssessmentError):
    pass


class QuizValidationError(AssessmentError):
    """Quiz payload rejected before anything was written"""
    pass


class QuizPersistenceError(AssessmentError):
    """A write failed while storing a quiz; the transaction was rolled back"""

    def __init__(self, message: str, question_number: Optional[int] = None):
        super().__init__(message, context={"question_number": question_number})
        self.question_number = question_number


class AttemptValidationError(AssessmentError):
    """Submitted answer is missing or does not name an option"""
    pass


class AttemptClosedError(AssessmentError):
    """The attempt is already completed and cannot be changed"""
    pass


class AttemptNotCompletedError(AssessmentError):
    """Results were requested before the respondent finished the quiz"""
    pass
