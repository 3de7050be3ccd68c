import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.database import Base, SessionLocal, engine
from backend.models import course, user  # noqa: F401
from backend.routes import auth_routes, course_routes, user_routes
from backend.seed import seed_demo_data
from backend.store import RecordStore

app = FastAPI(title='CraftConnect API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)
logging.getLogger('backend').setLevel(config.LOG_LEVEL)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        if config.SEED_DEMO_DATA:
            db = SessionLocal()
            try:
                seed_demo_data(RecordStore(db))
            finally:
                db.close()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'CraftConnect API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(user_routes.router, prefix='/users')
app.include_router(course_routes.router, prefix='/courses')
