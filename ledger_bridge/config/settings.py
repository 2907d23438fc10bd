"""Global settings and configuration."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Package and project directories
PACKAGE_DIR = Path(__file__).parent.parent
PROJECT_ROOT = PACKAGE_DIR.parent

LOGS_DIR = PROJECT_ROOT / "logs"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = Path(os.getenv("LOG_FILE", str(LOGS_DIR / "ledger_bridge.log")))

# CSV layouts
BUNDLED_LAYOUTS_DIR = PACKAGE_DIR / "config" / "layouts"
CSV_LAYOUTS_DIR = Path(os.getenv("CSV_LAYOUTS_DIR", str(BUNDLED_LAYOUTS_DIR)))
DEFAULT_CSV_LAYOUT = os.getenv("DEFAULT_CSV_LAYOUT", "simple")

# Validation
BALANCE_TOLERANCE = float(os.getenv("BALANCE_TOLERANCE", "0.01"))

# MT940 envelope (basic header block sender, application header receiver)
MT940_SENDER_BIC = os.getenv("MT940_SENDER_BIC", "BANKXXXXXX")
MT940_RECEIVER_BIC = os.getenv("MT940_RECEIVER_BIC", "BANKXXXXXX")
