import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./reisign.db")

# Firebase Configuration
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")

# Cloudflare R2 Configuration
R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY")
R2_BUCKET_NAME = os.getenv("R2_BUCKET_NAME", "reisign")

# Dodo Payments Configuration
DODO_PAYMENTS_API_KEY = os.getenv("DODO_PAYMENTS_API_KEY")
# "test_mode" or "live_mode" - default to test for safety
DODO_PAYMENTS_ENVIRONMENT = os.getenv("DODO_PAYMENTS_ENVIRONMENT", "test_mode")

# Subscription products, one per plan and billing interval
DODO_PRODUCT_IDS = {
    ("individual", "monthly"): os.getenv("DODO_PRODUCT_INDIVIDUAL_MONTHLY"),
    ("individual", "yearly"): os.getenv("DODO_PRODUCT_INDIVIDUAL_YEARLY"),
    ("team", "monthly"): os.getenv("DODO_PRODUCT_TEAM_MONTHLY"),
    ("team", "yearly"): os.getenv("DODO_PRODUCT_TEAM_YEARLY"),
    ("business", "monthly"): os.getenv("DODO_PRODUCT_BUSINESS_MONTHLY"),
    ("business", "yearly"): os.getenv("DODO_PRODUCT_BUSINESS_YEARLY"),
}
# Add-on used to bill seats beyond the plan allowance
DODO_EXTRA_SEAT_ADDON_ID = os.getenv("DODO_EXTRA_SEAT_ADDON_ID")

# Frontend base URL for redirects and invite links
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "REI Sign <noreply@reisign.com>")
# Receives support tickets and other internal notices
ADMIN_NOTIFICATION_EMAIL = os.getenv("ADMIN_NOTIFICATION_EMAIL")

# OpenAI Configuration (AI clause generation)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")

# CORS
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", FRONTEND_URL)
