import os
from dotenv import load_dotenv

# Load .env file only in development environment
if os.environ.get('FLASK_ENV') != 'production':
    load_dotenv()

class Config:
    GOOGLE_API_KEY = os.environ.get('GOOGLE_API_KEY')
    SEARCH_API_KEY = os.environ.get('RAPIDAPI_KEY')
    PORT = int(os.environ.get('PORT', 8080))
    FLASK_ENV = os.environ.get('FLASK_ENV', 'development')
    TESTING = False

    # Cache and polling windows
    CACHE_TTL_SECONDS = 5 * 60
    POLL_INTERVAL_MINUTES = 5
    INITIAL_LOAD_TIMEOUT_SECONDS = 10
    MAX_ARTICLES_PER_CATEGORY = 10

    # Feed fetching
    FEED_MAX_ATTEMPTS = 3
    FEED_TIMEOUT_SECONDS = 5
    FEED_DELAY_SECONDS = 2
    ANALYSIS_DELAY_SECONDS = 1

    # Gemini
    GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.0-flash-001')
    TRANSCRIPTION_MODEL = 'gemini-2.0-flash-001'
    TRANSCRIPTION_LANGUAGE = 'en'
    MAX_AUDIO_BYTES = 24 * 1024 * 1024

    @classmethod
    def missing_keys(cls):
        """Names of API keys that are not configured."""
        missing = []
        if not cls.GOOGLE_API_KEY:
            missing.append('GOOGLE_API_KEY')
        if not cls.SEARCH_API_KEY:
            missing.append('RAPIDAPI_KEY')
        return missing

class DevelopmentConfig(Config):
    DEBUG = True

class ProductionConfig(Config):
    DEBUG = False
    FLASK_ENV = 'production'

class TestingConfig(Config):
    TESTING = True
    GOOGLE_API_KEY = 'test-google-key'
    SEARCH_API_KEY = 'test-rapidapi-key'
    FEED_DELAY_SECONDS = 0
    ANALYSIS_DELAY_SECONDS = 0

def get_config():
    env = os.environ.get('FLASK_ENV', 'development')
    if env == 'development':
        return DevelopmentConfig
    if env == 'testing':
        return TestingConfig
    return ProductionConfig
