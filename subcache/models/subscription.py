import datetime
from typing import Annotated, Any, List, Optional

import yaml
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictBool, StrictInt, ValidationError, field_validator


class SubscriptionError(Exception):
    """Raised when a fetched payload is not a well-formed Clash subscription."""


def _scalar_as_text(v: Any) -> Any:
    # YAML resolves `name: true` or `uuid: 2024-01-01` to non-strings; keep their text
    if isinstance(v, (bool, int, float, datetime.date)):
        return str(v)
    return v


ScalarStr = Annotated[str, BeforeValidator(_scalar_as_text)]


class _ClashModel(BaseModel):
    # Clash configs carry many protocol-specific keys we don't check
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class WSHeaders(_ClashModel):
    # "Host" and "host" both appear in the wild
    host: Optional[ScalarStr] = Field(default=None, alias="Host")


class Proxy(_ClashModel):
    name: Optional[ScalarStr] = None
    server: Optional[ScalarStr] = None
    port: Optional[StrictInt] = None
    type: Optional[ScalarStr] = None
    uuid: Optional[ScalarStr] = None
    alter_id: Optional[StrictInt] = Field(default=None, alias="alterId", ge=-128, le=127)
    cipher: Optional[ScalarStr] = None
    tls: Optional[StrictBool] = None
    network: Optional[ScalarStr] = None
    ws_path: Optional[ScalarStr] = Field(default=None, alias="ws-path")
    ws_headers: Optional[WSHeaders] = Field(default=None, alias="ws-headers")
    udp: Optional[StrictBool] = None


class ProxyGroup(_ClashModel):
    name: Optional[ScalarStr] = None
    type: Optional[ScalarStr] = None
    proxies: List[ScalarStr] = Field(default_factory=list)

    @field_validator("proxies", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class SubscriptionDocument(_ClashModel):
    proxies: List[Proxy] = Field(default_factory=list)
    proxy_groups: List[ProxyGroup] = Field(default_factory=list, alias="proxy-groups")
    rules: List[ScalarStr] = Field(default_factory=list)

    @field_validator("proxies", "rules", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("proxy_groups", mode="before")
    @classmethod
    def single_group_as_list(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, dict):
            return [v]
        return v


def validate_subscription(data: bytes) -> None:
    """
    Checks that data parses as a Clash subscription document.
    The parsed model is thrown away; callers keep the raw bytes.
    """
    try:
        text = data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise SubscriptionError(f"payload is not UTF-8: {e}") from e

    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SubscriptionError(f"payload is not valid YAML: {e}") from e

    # An empty document is an empty subscription
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise SubscriptionError(f"payload must be a mapping, got {type(parsed).__name__}")

    try:
        SubscriptionDocument.model_validate(parsed)
    except ValidationError as e:
        raise SubscriptionError(f"payload does not match the subscription schema: {e}") from e
