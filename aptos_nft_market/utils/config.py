import yaml
from pydantic import BaseModel, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from typing import Optional

# Versions of the on-chain NFT record layout the decoder understands
SUPPORTED_SCHEMA_VERSIONS = {1}


class MarketplaceConfig(BaseModel):
    # Account holding the Marketplace resource
    marketplace_address: str
    # Account the NFTMarketplace module is published under. Defaults to the marketplace account.
    module_address: Optional[str] = None
    module_name: str = "NFTMarketplace"
    resource_name: str = "Marketplace"
    schema_version: int = 1

    @field_validator("schema_version")
    @classmethod
    def check_schema_version(cls, value: int) -> int:
        if value not in SUPPORTED_SCHEMA_VERSIONS:
            raise ValueError(
                f"Unsupported marketplace schema version {value}, "
                f"supported: {sorted(SUPPORTED_SCHEMA_VERSIONS)}"
            )
        return value

    def get_module_address(self) -> str:
        return self.module_address or self.marketplace_address

    def function_id(self, function_name: str) -> str:
        return f"{self.get_module_address()}::{self.module_name}::{function_name}"

    def resource_type(self) -> str:
        return f"{self.get_module_address()}::{self.module_name}::{self.resource_name}"


class LedgerConfig(BaseModel):
    fullnode_url: str = "https://fullnode.testnet.aptoslabs.com/v1"
    request_timeout_in_secs: float = 30.0
    # Upper bound on waiting for a submitted transaction to be committed
    finalization_timeout_in_secs: float = 60.0


class Config(BaseSettings):
    marketplace_config: MarketplaceConfig
    ledger_config: LedgerConfig = LedgerConfig()
    page_size: int = 8
    owner_nfts_limit: int = 100
    owner_nfts_offset: int = 0

    model_config = SettingsConfigDict(env_nested_delimiter="__")

    # Change order of priority of settings sources such that environment variables take precedence over config file settings
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, file_secret_settings

    @classmethod
    def from_yaml_file(cls, path: str):
        with open(path, "r") as file:
            config = yaml.safe_load(file)

        return cls(**config)
