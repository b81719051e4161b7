# storefront.config
from pathlib import Path
import os
import logging
from typing import Dict, List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from storefront.errors import ConfigurationError

"""
Configuration centrale du service.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Construit un objet Settings unique, validé au démarrage puis stocké sur app.state
- Aucune relecture de l'environnement par requête: les clients reçoivent Settings à la construction
"""

BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"

logger = logging.getLogger(__name__)

# Clés obligatoires pour chaque flux (nom de variable d'environnement -> attribut Settings)
REQUIRED_KEYS: Dict[str, str] = {
    "STRIPE_SECRET_KEY": "stripe_secret_key",
    "STRIPE_WEBHOOK_SECRET": "stripe_webhook_secret",
    "SHOPIFY_STORE_DOMAIN": "shopify_store_domain",
    "SHOPIFY_ADMIN_ACCESS_TOKEN": "shopify_access_token",
}


def _clean_env(v: Optional[str]) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")


def _split_list(v: str) -> List[str]:
    return [x.strip() for x in (v or "").split(",") if x.strip()]


def _parse_number(key: str, raw: str, cast):
    """Convertit une valeur numérique; ConfigurationError nommant la clé si invalide."""
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(f"Invalid value for {key}: expected {cast.__name__}")


class Settings(BaseModel):
    # Stripe (fournisseur de paiement)
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_api_base: str = "https://api.stripe.com/v1"
    stripe_webhook_tolerance_seconds: int = 0

    # Shopify (back-office)
    shopify_store_domain: str = ""
    shopify_access_token: str = ""
    shopify_api_version: str = "2024-10"

    # Site public (URLs de redirection du checkout)
    public_site_url: str = "http://localhost:4321"

    http_timeout_seconds: float = 10.0

    # CORS / hosts
    cors_origins: List[str] = ["*"]
    allowed_hosts: List[str] = ["*"]

    # Rate limiting: "redis", "memory" ou "disabled"
    rate_limit_backend: str = "redis"
    rate_limit_redis_url: str = "redis://127.0.0.1:6379/0"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Construit Settings depuis un mapping (os.environ par défaut).
        - PUBLIC_SITE_URL, sinon SITE, sinon http://localhost:4321
        - Les URLs sont normalisées sans slash final
        """
        env = os.environ if environ is None else environ

        def get(key: str, default: str = "") -> str:
            return _clean_env(env.get(key)) or default

        site_url = get("PUBLIC_SITE_URL") or get("SITE") or "http://localhost:4321"
        domain = get("SHOPIFY_STORE_DOMAIN")
        # Le domaine est attendu sans schéma (ex: ma-boutique.myshopify.com)
        for prefix in ("https://", "http://"):
            if domain.startswith(prefix):
                domain = domain[len(prefix):]

        return cls(
            stripe_secret_key=get("STRIPE_SECRET_KEY"),
            stripe_webhook_secret=get("STRIPE_WEBHOOK_SECRET"),
            stripe_api_base=get("STRIPE_API_BASE", "https://api.stripe.com/v1").rstrip("/"),
            stripe_webhook_tolerance_seconds=_parse_number(
                "STRIPE_WEBHOOK_TOLERANCE_SECONDS", get("STRIPE_WEBHOOK_TOLERANCE_SECONDS", "0"), int
            ),
            shopify_store_domain=domain.rstrip("/"),
            shopify_access_token=get("SHOPIFY_ADMIN_ACCESS_TOKEN"),
            shopify_api_version=get("SHOPIFY_API_VERSION", "2024-10"),
            public_site_url=site_url.rstrip("/"),
            http_timeout_seconds=_parse_number("HTTP_TIMEOUT_SECONDS", get("HTTP_TIMEOUT_SECONDS", "10"), float),
            cors_origins=_split_list(get("CORS_ORIGINS", "*")),
            allowed_hosts=_split_list(get("ALLOWED_HOSTS", "*")),
            rate_limit_backend=get("RATE_LIMIT_BACKEND", "redis").lower(),
            rate_limit_redis_url=get("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0"),
        )

    def require(self, key: str) -> str:
        """
        Retourne la valeur d'une clé obligatoire (nom de variable d'environnement).
        Soulève ConfigurationError si elle est absente.
        """
        value = getattr(self, REQUIRED_KEYS[key], "")
        if not value:
            raise ConfigurationError(f"Missing required environment variable: {key}")
        return value

    def missing_keys(self) -> List[str]:
        return [key for key, attr in REQUIRED_KEYS.items() if not getattr(self, attr, "")]


def load_settings() -> Settings:
    """Charge .env (explicitement, depuis BASE_DIR) puis construit Settings."""
    load_dotenv(dotenv_path=ENV_PATH, override=False)
    settings = Settings.from_env()
    missing = settings.missing_keys()
    if missing:
        logger.warning("config.missing keys=%s", ",".join(missing))
    return settings
