import os
from dotenv import load_dotenv

load_dotenv()

POSTGRES_DB = os.getenv("POSTGRES_DB", "people")
POSTGRES_USER = os.getenv("POSTGRES_USER", "people")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "peoplepass")
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "postgres")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")

REDIS_HOST = os.getenv("REDIS_HOST", "redis")
REDIS_PORT = os.getenv("REDIS_PORT", "6379")

TZ = os.getenv("TZ", "UTC")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# External directory polled by the scheduled lookup job
PERSON_LOOKUP_URL = os.getenv("PERSON_LOOKUP_URL", "https://api.mocki.io/v1/b043df5a")
PERSON_LOOKUP_TIMEOUT = float(os.getenv("PERSON_LOOKUP_TIMEOUT", "30"))
# 5-field cron: every 5th minute
PERSON_LOOKUP_CRON = os.getenv("PERSON_LOOKUP_CRON", "*/5 * * * *")

REPORT_CREATED_BY = os.getenv("REPORT_CREATED_BY", "javacodegeek.com")

SQLALCHEMY_DATABASE_URL = (
    f"postgresql+psycopg2://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}"
)

REDIS_URL = f"redis://{REDIS_HOST}:{REDIS_PORT}/0"
