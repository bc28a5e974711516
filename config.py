import os
import sys
import logging
from logging.handlers import RotatingFileHandler

from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

###############################################
# HOSTED INFERENCE ENDPOINTS
###############################################
# The bearer credential is shared by both hosted models.
HUGGING_FACE_API_KEY = os.getenv('HUGGING_FACE_API_KEY', '')

PRIMARY_MODEL_URL = os.getenv(
    'PRIMARY_MODEL_URL',
    'https://api-inference.huggingface.co/models/j-hartmann/emotion-english-distilroberta-base'
)
FALLBACK_MODEL_URL = os.getenv(
    'FALLBACK_MODEL_URL',
    'https://api-inference.huggingface.co/models/cardiffnlp/twitter-roberta-base-sentiment-latest'
)

# Seconds for a single outbound call; there is no other timeout.
INFERENCE_TIMEOUT = float(os.getenv('INFERENCE_TIMEOUT', '30'))

###############################################
# RETRY POLICY
###############################################
# Total calls per endpoint, the first one included (3 = 1 call + 2 retries).
RETRY_MAX_ATTEMPTS = int(os.getenv('RETRY_MAX_ATTEMPTS', '3'))
RETRY_BASE_DELAY = float(os.getenv('RETRY_BASE_DELAY', '1.0'))

###############################################
# INPUT / HISTORY LIMITS
###############################################
MAX_TEXT_LENGTH = 1000
LOCAL_HISTORY_LIMIT = 50
# Anonymous devices whose history is kept in memory at once.
MAX_DEVICES = int(os.getenv('MAX_DEVICES', '10000'))
HISTORY_DEFAULT_LIMIT = 50

###############################################
# OTHER ENVIRONMENT VARIABLES
###############################################
FLASK_SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'YOUR_FLASK_SECRET_KEY')

###############################################
# SQLALCHEMY CONFIGURATION
###############################################
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
SQLALCHEMY_DATABASE_URI = os.getenv(
    'DATABASE_URL',
    f"sqlite:///{os.path.join(BASE_DIR, 'sentiscope.db')}"
)
SECRET_KEY = FLASK_SECRET_KEY

###############################################
# LOGGING
###############################################
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_FILE = os.getenv('LOG_FILE', '')

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s : %(message)s'


def configure_logging():
    """
    Attach the console handler (and the rotating file handler, when LOG_FILE
    is set) to the root logger. Safe to call more than once.
    """
    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    if getattr(root, '_sentiscope_configured', False):
        return root

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if LOG_FILE:
        file_handler = RotatingFileHandler(LOG_FILE, maxBytes=100000, backupCount=1)
        file_handler.setLevel(LOG_LEVEL)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root._sentiscope_configured = True
    return root
