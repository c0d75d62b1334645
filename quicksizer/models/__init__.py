"""
models/__init__.py — imports all ORM models so Alembic's env.py and
database.create_tables() see them via Base.metadata.

Import order matters: estimates has a foreign key to questionnaires.
"""
from quicksizer.models.questionnaire import QuestionnaireORM
from quicksizer.models.estimate import EstimateORM

__all__ = ["QuestionnaireORM", "EstimateORM"]
