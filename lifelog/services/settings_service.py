from sqlalchemy.orm import Session

from lifelog.models import User, UserSettings


def get_or_create_settings(db: Session, user: User) -> UserSettings:
    """Settings are created with the user; recreate lazily if missing."""
    settings = db.query(UserSettings).filter(UserSettings.user_id == user.id).first()
    if not settings:
        settings = UserSettings(user_id=user.id)
        db.add(settings)
        db.commit()
        db.refresh(settings)
    return settings
