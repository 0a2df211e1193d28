import os
import platform
from azure.identity import DefaultAzureCredential
from azure.keyvault.secrets import SecretClient
from dotenv import load_dotenv
from core.security import redact_log
from logger import logger

load_dotenv()

# === Exception for Missing Required Configs ===
class ConfigError(Exception):
    pass

# === Azure Key Vault Setup (lazy initialization) ===
_keyvault_client = None

def get_from_secret_manager(var_name: str) -> str:
    """
    Attempts to retrieve a secret from Azure Key Vault.
    Returns None if Key Vault is not available or the secret is not found.
    """
    global _keyvault_client
    try:
        vault_url = os.getenv("AZURE_KEYVAULT_URL")
        if not vault_url:
            return None  # Key Vault not configured

        if not _keyvault_client:
            credential = DefaultAzureCredential()
            _keyvault_client = SecretClient(vault_url=vault_url, credential=credential)

        # Key Vault names only allow alphanumerics and dashes
        secret = _keyvault_client.get_secret(var_name.replace("_", "-"))
        return secret.value
    except Exception as e:
        logger.warning(redact_log(f"⚠️ Key Vault lookup failed for {var_name}: {e}"))
        return None  # Fall back to the environment

def get_env(var_name: str, required: bool = True, default: str = None) -> str:
    """
    Retrieves a configuration value in the following order:
    1. Azure Key Vault (if ENV=production or AZURE_KEYVAULT_URL is set)
    2. Environment variable or .env file
    3. Default (if provided)
    """
    value = None

    # 1. Azure Key Vault
    if os.getenv("ENV", "").lower() == "production" or os.getenv("AZURE_KEYVAULT_URL"):
        value = get_from_secret_manager(var_name)

    # 2. Environment variable / .env
    if value is None:
        value = os.getenv(var_name, default)

    # 3. Enforce required
    if required and not value:
        logger.error(f"❌ Missing required environment variable: {var_name}")
        raise ConfigError(f"Missing required environment variable: {var_name}")

    return value

def _is_windows() -> bool:
    return platform.system().lower().startswith("win")

def _get_int(var_name: str, default: int) -> int:
    raw = get_env(var_name, required=False, default=str(default))
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"Environment variable {var_name} must be an integer, got {raw!r}")

# === Centralized Configuration Loader ===
class AppConfig:
    def __init__(self):
        # === License ===
        self.LICENSE_KEY = get_env("LICENSE_KEY", required=False)

        # === LibreOffice ===
        self.SOFFICE_PATH = get_env(
            "SOFFICE_PATH",
            default=r"C:\Program Files\LibreOffice\program\soffice.exe" if _is_windows() else "soffice"
        )
        self.CONVERT_TIMEOUT_SECONDS = _get_int("CONVERT_TIMEOUT_SECONDS", 120)

        # === Temp files ===
        self.TEMP_DIR = get_env(
            "TEMP_DIR",
            default=r"C:\na\contract\temp" if _is_windows() else "/na/contract/temp"
        )
        self.MAX_TEMPLATE_MB = _get_int("MAX_TEMPLATE_MB", 10)

        # === HTML → PDF fonts ===
        self.FONT_REGULAR_PATH = get_env("FONT_REGULAR_PATH", default="fonts/NotoSerifSC-Regular.ttf")
        self.FONT_BOLD_PATH = get_env("FONT_BOLD_PATH", default="fonts/NotoSerifSC-Bold.ttf")

        # === Images ===
        self.IMAGE_DOWNLOAD_TIMEOUT_SECONDS = _get_int("IMAGE_DOWNLOAD_TIMEOUT_SECONDS", 15)

# === Accessor ===
def get_config() -> AppConfig:
    return AppConfig()
