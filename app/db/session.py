# app/db/session.py
from typing import Iterator
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError
from app.db.engine import SessionLocal, engine

def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
        # draft services commit their own transactions; this flushes anything left over
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
    finally:
        try:
            db.close()
        except OperationalError:
            # connection already dead; drop the pool
            engine.dispose()
