from fastapi import FastAPI
from sqlalchemy import text

from app.db import engine
from app.logging_setup import configure_logging
from app.routers import people

configure_logging()

app = FastAPI(title="People Service")

app.include_router(people.router)


@app.get("/api/v1/health")
def health():
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok"}
