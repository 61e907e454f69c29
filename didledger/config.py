from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource
from pydantic import BaseModel, Field
from typing import List, Optional, Tuple, Type
from pathlib import Path

"""
Manages application settings using Pydantic Settings.

This module defines the `Settings` class, which loads configuration from environment variables,
.env files, and a YAML configuration file (`config.yaml` at the project root).
It provides a single `settings` instance for easy access to configuration values throughout the application.
"""


class OrganizationConfig(BaseModel):
    """A member organization of the ledger network."""
    name: str
    msp_id: str
    peer: Optional[str] = None


DEFAULT_ORGANIZATIONS = [
    OrganizationConfig(
        name="CompanyA",
        msp_id="m-FQEEX22AZNEGDDJL4WCQP6KYHU",
        peer="nd-lhf6gjm2mrg2bkl4k2fycpwrd4.m-fqeex22aznegddjl4wcqp6kyhu.n-lhs7rblbt5drppe2pfry3il3yu.managedblockchain.us-east-1.amazonaws.com:30003",
    ),
    OrganizationConfig(
        name="CompanyB",
        msp_id="m-JLGL2ZEX6BDIXIEFYD4RJVZSTI",
        peer="nd-7sfv4dmoobf77guclpma7za2je.m-jlgl2zex6bdixiefyd4rjvzsti.n-lhs7rblbt5drppe2pfry3il3yu.managedblockchain.us-east-1.amazonaws.com:30006",
    ),
]


class Settings(BaseSettings):
    """
    Application settings model.

    Defines all configurable parameters for the application, their default values, and validation rules.
    Settings are loaded from multiple sources with a defined priority (see `settings_customise_sources`).
    """
    # Server settings
    host: str = Field(default="127.0.0.1", description="Host to bind the VDR gateway to.")
    port: int = Field(default=8000, description="Port to bind the VDR gateway to.")
    reload: bool = Field(default=False, description="Enable auto-reload for the gateway (for development). Uvicorn's --reload flag.")

    # Application metadata
    app_name: str = Field(default="didledger", description="Application name, used for logging and the API title.")

    # Operational settings
    debug: bool = Field(default=False, description="Enable debug mode. This might affect logging verbosity and FastAPI debug features.")
    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING, ERROR, CRITICAL).")
    log_format: str = Field(
        default="json",
        description="Log format. Supported values: 'json' for structured JSON logs, 'text' for plain text logs."
    )

    # World state storage
    database_url: str = Field(
        default="sqlite:///./ledger.db",
        description="SQLAlchemy URL of the world-state database backing the development ledger."
    )

    # Ledger network metadata
    ledger_version: str = Field(default="1.2x", description="Version reported by GetVersion.")
    ledger_description: str = Field(
        default="DID ledger for a two-organization network",
        description="Description reported by GetVersion."
    )
    network_type: str = Field(default="two-organization", description="Network type reported by GetNetworkInfo.")
    channel: str = Field(default="mychannel", description="Channel name reported by GetNetworkInfo.")
    endorsement_policy: str = Field(
        default="MAJORITY (requires both organizations)",
        description="Endorsement policy reported by GetNetworkInfo."
    )

    # Authorization and attribution
    proof_scheme: str = Field(
        default="digest",
        description="Proof validation scheme. Supported values: 'digest' (placeholder hash prefix) and 'ed25519'."
    )
    unknown_organization: str = Field(
        default="unknown",
        description="Label attributed to callers whose identity matches no configured organization."
    )
    organizations: List[OrganizationConfig] = Field(
        default_factory=lambda: list(DEFAULT_ORGANIZATIONS),
        description="Member organizations. The MSP id is matched against caller identity bytes."
    )

    model_config = SettingsConfigDict(
        env_prefix="DIDLEDGER_", # Prefix for environment variables (e.g., DIDLEDGER_HOST, DIDLEDGER_PORT)
        extra="ignore",    # Ignore extra fields from sources rather than raising an error
        validate_default=True,
        # config.yaml lives at the project root, one level above the package directory
        yaml_file=Path(__file__).resolve().parent.parent / "config.yaml"
    )


    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """
        Customizes the priority of settings sources for Pydantic.

        The order defines the override precedence (earlier sources override later ones):
        1. `init_settings`: Values provided during `Settings` class initialization (highest priority).
        2. `env_settings`: Environment variables (e.g., `DIDLEDGER_PORT`).
        3. `dotenv_settings`: Variables loaded from a `.env` file.
        4. `YamlConfigSettingsSource`: Variables loaded from the `config.yaml` file specified in `model_config`.
        5. `file_secret_settings`: Settings loaded from files typically used for secrets (e.g., Docker secrets).

        Returns:
            A tuple of settings sources in the desired order of precedence.
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


# Single shared Settings object, populated from the sources above.
settings = Settings()
