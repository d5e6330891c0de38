"""Domain exceptions raised by the survey response services.

Every error carries a stable ``code`` that API clients can switch on. None of
them indicate corrupted state: services roll back their open transaction
before raising.
"""


class SurveyFlowError(RuntimeError):
    """Base class for recoverable survey response errors."""

    code = "survey_flow_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code


class SurveyUnavailable(SurveyFlowError):
    """Survey is missing, not active, or outside its start/end window."""

    code = "survey_unavailable"


class InvalidInvitation(SurveyFlowError):
    """Invitation token does not belong to the requested survey."""

    code = "invalid_invitation"


class AuthenticationRequired(SurveyFlowError):
    """Survey only accepts authenticated respondents."""

    code = "authentication_required"


class SessionNotFound(SurveyFlowError):
    """No response session matches the token."""

    code = "session_not_found"


class SessionAlreadyCompleted(SurveyFlowError):
    """The response session is completed and can no longer change."""

    code = "session_already_completed"


class QuestionNotFound(SurveyFlowError):
    """Question is not an active question of the session's survey."""

    code = "question_not_found"


class RequiredFieldEmpty(SurveyFlowError):
    """A required question was submitted without a value."""

    code = "required_field_empty"


class EmailAlreadyExists(SurveyFlowError):
    """Registration email already belongs to an account."""

    code = "email_already_exists"
