import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@dataclass
class Settings:
    firebase_credentials: str = "./firebase.json"
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-2"
    s3_bucket_name: Optional[str] = None
    s3_public_base_url: Optional[str] = None
    max_image_mb: int = 5
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"
    session_idle_minutes: int = 30

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from the process environment, reading a .env file first if present
        """
        load_dotenv()
        return cls(
            firebase_credentials=os.environ.get("FIREBASE_CREDENTIALS", "./firebase.json"),
            aws_access_key_id=os.environ.get("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY"),
            aws_region=os.environ.get("AWS_REGION", "us-east-2"),
            s3_bucket_name=os.environ.get("S3_BUCKET_NAME"),
            s3_public_base_url=os.environ.get("S3_PUBLIC_BASE_URL") or None,
            max_image_mb=int(os.environ.get("MAX_IMAGE_MB", "5")),
            cors_origins=_split_origins(os.environ.get("CORS_ORIGINS", "http://localhost:3000")),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            session_idle_minutes=int(os.environ.get("SESSION_IDLE_MINUTES", "30")),
        )
