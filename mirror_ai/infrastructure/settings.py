"""Service settings read from the environment."""

import os

from pydantic import BaseModel, Field

from .ai.chat_completion_adapter import ChatCompletionConfig
from .dkg.dkg_adapter import DEFAULT_PORT, LOCAL_NODE, TESTNET_GATEWAY, DKGConfig

SERVICE_NAME = "MirrorAI"


class PipelineConfig(BaseModel):
    """Configuration for the verification pipeline."""

    max_concurrency: int = Field(default=5, ge=1, description="Claims processed at once")
    stage_timeout: float = Field(default=30.0, gt=0, description="Timeout for each external call in seconds")


class Settings(BaseModel):
    """Top-level service settings."""

    service_name: str = SERVICE_NAME
    port: int = 3000
    oracle: ChatCompletionConfig = Field(default_factory=ChatCompletionConfig)
    dkg: DKGConfig = Field(default_factory=DKGConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables.

        Missing values fall back to defaults; nothing here is mandatory.
        """
        use_local_dkg = os.getenv("USE_LOCAL_DKG", "false").lower() == "true"
        if use_local_dkg:
            dkg_endpoint = os.getenv("DKG_ENDPOINT", LOCAL_NODE)
            dkg_port = int(os.getenv("DKG_PORT", str(DEFAULT_PORT)))
        else:
            dkg_endpoint = TESTNET_GATEWAY
            dkg_port = DEFAULT_PORT

        return cls(
            port=int(os.getenv("PORT", "3000")),
            oracle=ChatCompletionConfig(
                api_key=os.getenv("ASI_API_KEY", ""),
                base_url=os.getenv("ASI_BASE_URL", "https://api.asi1.ai/v1"),
                model=os.getenv("ASI_MODEL", "asi1-mini"),
            ),
            dkg=DKGConfig(
                endpoint=dkg_endpoint,
                port=dkg_port,
                blockchain=os.getenv("DKG_BLOCKCHAIN", "otp:20430"),
                public_key=os.getenv("PUBLISH_WALLET_PUBLIC_KEY") or None,
                private_key=os.getenv("PUBLISH_WALLET_PRIVATE_KEY") or None,
            ),
            pipeline=PipelineConfig(
                max_concurrency=int(os.getenv("PIPELINE_MAX_CONCURRENCY", "5")),
                stage_timeout=float(os.getenv("PIPELINE_STAGE_TIMEOUT", "30")),
            ),
        )
