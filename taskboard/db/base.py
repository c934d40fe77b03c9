from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import the models so they are registered with Base
from taskboard.models import (  # noqa: E402,F401
    user,
    team,
    team_member,
    project,
    task,
    comment,
)
