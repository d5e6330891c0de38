"""Database models."""
from alumni_tracer.models.user import User
from alumni_tracer.models.batch import Batch
from alumni_tracer.models.alumni_profile import AlumniProfile
from alumni_tracer.models.survey import Survey
from alumni_tracer.models.survey_question import SurveyQuestion
from alumni_tracer.models.survey_response import SurveyResponse
from alumni_tracer.models.survey_answer import SurveyAnswer
from alumni_tracer.models.survey_invitation import SurveyInvitation
from alumni_tracer.models.activity_log import ActivityLog

__all__ = [
    "User",
    "Batch",
    "AlumniProfile",
    "Survey",
    "SurveyQuestion",
    "SurveyResponse",
    "SurveyAnswer",
    "SurveyInvitation",
    "ActivityLog",
]
