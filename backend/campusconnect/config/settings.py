import os
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load the appropriate environment file
env_file = '.env.local'
load_dotenv(env_file)

class Settings(BaseSettings):
    """Application settings."""
    # App settings
    APP_ENV: str = os.getenv('APP_ENV', 'production')
    PORT: int = int(os.getenv('PORT', 5000))
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')

    # Database settings
    DATABASE_URL: Optional[str] = os.getenv('DATABASE_URL')
    DB_HOST: str = os.getenv('DB_HOST', 'localhost')
    DB_PORT: str = os.getenv('DB_PORT', '5432')
    DB_NAME: str = os.getenv('DB_NAME', 'campusconnect')
    DB_USER: str = os.getenv('DB_USER', 'postgres')
    DB_PASSWORD: str = os.getenv('DB_PASSWORD', 'postgres')

    # Access codes, one per role
    ACCESS_CODE_ADMIN: str = os.getenv('ACCESS_CODE_ADMIN', 'PROFESSOR2024')
    ACCESS_CODE_OFFICE: str = os.getenv('ACCESS_CODE_OFFICE', 'OFFICE2024')
    ACCESS_CODE_STUDENT: str = os.getenv('ACCESS_CODE_STUDENT', 'STUDENT2024')

    # AWS settings
    AWS_ACCESS_KEY_ID: str = os.getenv('AWS_ACCESS_KEY_ID', '')
    AWS_SECRET_ACCESS_KEY: str = os.getenv('AWS_SECRET_ACCESS_KEY', '')
    AWS_REGION: str = os.getenv('AWS_REGION', 'ap-south-1')

    # Object storage: "s3" or "local"
    STORAGE_MODE: str = os.getenv('STORAGE_MODE', 's3')
    STORAGE_LOCAL_ROOT: str = os.getenv('STORAGE_LOCAL_ROOT', 'uploads')
    STORAGE_PUBLIC_BASE_URL: str = os.getenv('STORAGE_PUBLIC_BASE_URL', '')
    FILES_BUCKET: str = os.getenv('FILES_BUCKET', 'school-files')
    NOTICES_BUCKET: str = os.getenv('NOTICES_BUCKET', 'notices')

    # API settings
    API_TITLE: str = "CampusConnect API"
    API_DESCRIPTION: str = "School management API: students, attendance, results, timetable, notices and fees"
    API_VERSION: str = "1.0.0"
    API_DOCS_URL: str = "/api/docs"
    API_REDOC_URL: str = "/api/redoc"
    API_OPENAPI_URL: str = "/api/openapi.json"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    class Config:
        env_file = env_file
        extra = 'ignore'

settings = Settings()
