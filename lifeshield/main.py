import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from lifeshield.core import config
from lifeshield.database import dispose_database, init_database
from lifeshield.routes import (
    application_routes,
    blog_routes,
    community_routes,
    payment_routes,
    policy_routes,
    user_routes,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    config.validate_runtime_config()
    try:
        init_database()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
    try:
        yield
    finally:
        dispose_database()


app = FastAPI(title='Life Shield API', lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.exception_handler(RequestValidationError)
async def invalid_input_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {'loc': [str(part) for part in error.get('loc', ())], 'msg': error.get('msg', '')}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': 'Invalid request', 'errors': errors},
    )


@app.exception_handler(SQLAlchemyError)
async def database_failure_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error('Unhandled database error: %s', exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'detail': 'Internal server error'},
    )


@app.get('/')
def root():
    return {'status': 'Life Shield Server is running...'}


app.include_router(user_routes.router)
app.include_router(policy_routes.router)
app.include_router(blog_routes.router)
app.include_router(community_routes.router)
app.include_router(application_routes.router)
app.include_router(payment_routes.router)


if __name__ == '__main__':
    import uvicorn

    uvicorn.run(app, host='0.0.0.0', port=int(os.getenv('PORT', '5000')))
