"""Imports every model module so Base.metadata knows all tables."""
from sukejuru.db.assignments.models import Assignment  # noqa: F401
from sukejuru.db.courses.models import Course, CourseEvaluation  # noqa: F401
from sukejuru.db.events.models import Event  # noqa: F401
from sukejuru.db.forum.models import ForumMessage  # noqa: F401
from sukejuru.db.google.models import GoogleToken, GoogleOAuthState  # noqa: F401
from sukejuru.db.messages.models import Message  # noqa: F401
from sukejuru.db.profiles.models import Profile  # noqa: F401
