from sukejuru.db.base import DatabaseSession
from sukejuru.db.profiles.models import Profile

_UPDATABLE_FIELDS = ("email", "name", "program", "graduation_year", "university_name")


def get_profile(user_id: str) -> Profile | None:
    with DatabaseSession() as db_session:
        return db_session.get(Profile, user_id)


def upsert_profile(user_id: str, fields: dict) -> Profile:
    with DatabaseSession() as db_session:
        profile = db_session.get(Profile, user_id)
        if profile is None:
            profile = Profile(id=user_id)
            db_session.add(profile)

        for name, value in fields.items():
            if name in _UPDATABLE_FIELDS:
                setattr(profile, name, value)

        db_session.commit()
        db_session.refresh(profile)
        return profile
