from app.db.base import Base
from app.db import models  # noqa: F401  ensure models are loaded


def test_metadata_contains_core_tables() -> None:
    table_names = set(Base.metadata.tables.keys())
    expected = {
        "users",
        "ai_body_analysis_results",
        "ai_diet_recommendations",
        "ai_workout_recommendations",
    }

    assert expected.issubset(table_names)


def test_recommendation_tables_index_user_and_time() -> None:
    for name in ("ai_body_analysis_results", "ai_diet_recommendations", "ai_workout_recommendations"):
        table = Base.metadata.tables[name]
        indexed = {tuple(column.name for column in index.columns) for index in table.indexes}
        assert ("user_id", "created_at") in indexed
        assert {fk.column.table.name for fk in table.foreign_keys} == {"users"}
