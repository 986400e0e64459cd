from typing import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session


def insert_ignore(db: Session, model, key_columns: Sequence[str], **values) -> None:
    """
    INSERT a row unless one already exists for the unique key.

    SQLite and PostgreSQL get a single ON CONFLICT DO NOTHING statement, so two
    requests creating the same (user, date) row cannot both win. Other
    dialects fall back to a savepoint-guarded insert.
    """
    dialect = db.get_bind().dialect.name

    if dialect in ("sqlite", "postgresql"):
        if dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            from sqlalchemy.dialects.postgresql import insert

        stmt = (
            insert(model.__table__)
            .values(**values)
            .on_conflict_do_nothing(index_elements=list(key_columns))
        )
        db.execute(stmt)
        return

    filters = [getattr(model, column) == values[column] for column in key_columns]
    if db.query(model).filter(*filters).first() is not None:
        return
    try:
        with db.begin_nested():
            db.add(model(**values))
    except IntegrityError:
        pass
