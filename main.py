import logging
from contextlib import asynccontextmanager

import boto3
import firebase_admin
from botocore.config import Config
from fastapi import FastAPI
from firebase_admin import credentials
from starlette.middleware.cors import CORSMiddleware

from config import Settings
from routes.posts import router as posts_router
from routes.session import router as session_router
from services.board_session import SessionRegistry
from services.comments import CommentRepository
from services.firestore import FirestoreDB
from services.posts import PostRepository
from services.s3 import S3Service

settings = Settings.from_env()

logging.basicConfig(level=settings.log_level,
                    format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# S3 client
s3_client = boto3.client(
    's3',
    aws_access_key_id=settings.aws_access_key_id,
    aws_secret_access_key=settings.aws_secret_access_key,
    region_name=settings.aws_region,
    config=Config(signature_version="s3v4")
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize Firebase Admin SDK
    cred = credentials.Certificate(settings.firebase_credentials)
    firebase_app = firebase_admin.initialize_app(cred)

    # Initialize dependencies
    s3 = S3Service(settings.s3_bucket_name, s3_client, settings.s3_public_base_url)
    firestore = FirestoreDB(firebase_app)

    post_repository = PostRepository(firestore, s3, max_image_mb=settings.max_image_mb)
    comment_repository = CommentRepository(firestore)

    app.state.s3_service = s3
    app.state.firestore = firestore
    app.state.post_repository = post_repository
    app.state.comment_repository = comment_repository
    app.state.sessions = SessionRegistry(
        post_repository, comment_repository, idle_seconds=settings.session_idle_minutes * 60
    )
    logger.info("Board services ready (bucket=%s)", settings.s3_bucket_name)

    yield
    # Cleanup resources
    app.state.sessions.close_all()
    firebase_admin.delete_app(firebase_app)


app = FastAPI(lifespan=lifespan)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(posts_router, prefix="/posts", tags=["posts"])
app.include_router(session_router, prefix="/session", tags=["session"])


@app.get("/health")
async def health():
    return {"status": "ok"}
