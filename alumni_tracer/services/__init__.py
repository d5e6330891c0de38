from alumni_tracer.services.auth_service import AuthService, AuthError
from alumni_tracer.services.user_service import UserService
from alumni_tracer.services.survey_service import SurveyService
from alumni_tracer.services.progress_service import ProgressService, ProgressSnapshot, completion_percentage
from alumni_tracer.services.invitation_service import InvitationService, ReminderPolicy
from alumni_tracer.services.activity_log_service import (
    ActivityLogService,
    EntityRef,
    EntityRepository,
    RequestContext,
)
from alumni_tracer.services.registration_service import RegistrationService, project_answers_to_profile
from alumni_tracer.services.response_service import SurveyResponseService

__all__ = [
    "AuthService",
    "AuthError",
    "UserService",
    "SurveyService",
    "ProgressService",
    "ProgressSnapshot",
    "completion_percentage",
    "InvitationService",
    "ReminderPolicy",
    "ActivityLogService",
    "EntityRef",
    "EntityRepository",
    "RequestContext",
    "RegistrationService",
    "project_answers_to_profile",
    "SurveyResponseService",
]
