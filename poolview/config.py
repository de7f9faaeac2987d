import os
from typing import Literal, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, ValidationError

from poolview.core.errors import ConfigError

DEFAULT_GATEWAY_URL = "https://gateway.thegraph.com/api"

# env var -> Settings field
ENV_OVERRIDES = {
    "GRAPH_GATEWAY_URL": "gateway_base_url",
    "POOLVIEW_REQUEST_TIMEOUT": "request_timeout_seconds",
    "POOLVIEW_MAX_RETRIES": "max_retries",
    "POOLVIEW_RETRY_BACKOFF": "retry_backoff_seconds",
    "POOLVIEW_TOP_PROVIDERS": "top_providers_limit",
    "POOLVIEW_INCLUDE_NON_POSITIVE": "include_non_positive",
    "POOLVIEW_TIMESTAMP_FIELD": "event_timestamp_field",
    "POOLVIEW_EVENT_PAGE_SIZE": "event_page_size",
    "LOG_LEVEL": "log_level",
    "HOST": "host",
    "PORT": "port",
}


class Settings(BaseModel):
    """
    Process-wide configuration, built once at startup and handed to the
    gateway and request handlers.
    """
    graph_api_key: SecretStr
    subgraph_id: str = Field(min_length=1)
    gateway_base_url: str = DEFAULT_GATEWAY_URL

    request_timeout_seconds: float = Field(30.0, gt=0)
    max_retries: int = Field(0, ge=0, le=10)
    retry_backoff_seconds: float = Field(0.5, ge=0)

    top_providers_limit: int = Field(20, ge=1, le=1000)
    include_non_positive: bool = False
    # Subgraph schemas disagree on the event time field
    event_timestamp_field: Literal["timestamp", "blockTimestamp"] = "timestamp"
    event_page_size: int = Field(1000, ge=1, le=1000)

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5001

    @property
    def endpoint_url(self) -> str:
        # The API key travels in the Authorization header, never in the URL
        return f"{self.gateway_base_url.rstrip('/')}/subgraphs/id/{self.subgraph_id}"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Reads settings from the environment (and a local .env file when env is not given).
        Raises ConfigError if GRAPH_API_KEY or SUBGRAPH_ID is missing or a value is invalid.
        """
        if env is None:
            load_dotenv()
            env = os.environ

        missing = [name for name in ("GRAPH_API_KEY", "SUBGRAPH_ID") if not (env.get(name) or "").strip()]
        if missing:
            raise ConfigError(f"Missing required environment variables: {' or '.join(missing)}")

        data = {
            "graph_api_key": env["GRAPH_API_KEY"].strip(),
            "subgraph_id": env["SUBGRAPH_ID"].strip(),
        }
        for var, field in ENV_OVERRIDES.items():
            value = env.get(var)
            if value:
                data[field] = value

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors())
            raise ConfigError(f"Invalid configuration value(s): {fields}") from e
