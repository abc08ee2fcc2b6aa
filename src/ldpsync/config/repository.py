"""Remote repository connection settings."""

from __future__ import annotations

from dataclasses import dataclass, field

from ldpsync.domain.tombstones import DEFAULT_TOMBSTONE_SEGMENT

from .env import optional_env, optional_env_bool, require_env_var
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class RepositoryConfig:
    """Where resources live and how the coordinator talks to the server.

    ``root_path`` is an optional container below ``base_url`` that holds every
    resource created by this process. ``send_version_token`` forwards the last
    seen ``ETag`` as ``If-Match`` on partial updates; the server decides what to
    do with it.
    """

    base_url: str
    root_path: str | None = None
    tombstone_segment: str = DEFAULT_TOMBSTONE_SEGMENT
    send_version_token: bool = False
    resilience: ResilienceConfig = field(
        default_factory=lambda: ResilienceConfig(
            name="ldp", timeout_seconds=DEFAULT_TIMEOUT_SECONDS
        )
    )

    def __post_init__(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"Repository base URL must be http(s): {self.base_url!r}")
        if not self.tombstone_segment or "/" in self.tombstone_segment:
            raise ConfigurationError(f"Invalid tombstone segment: {self.tombstone_segment!r}")

    @property
    def normalized_base_url(self) -> str:
        return self.base_url.rstrip("/")

    @property
    def normalized_root_path(self) -> str | None:
        if self.root_path is None:
            return None
        stripped = self.root_path.strip("/")
        return stripped or None


def get_repository_config() -> RepositoryConfig:
    base_url = require_env_var("LDP_BASE_URL")
    user = optional_env("LDP_USER")
    password = optional_env("LDP_PASSWORD")
    auth = (user, password) if user is not None and password is not None else None

    rate = optional_env("LDP_MAX_CALLS_PER_SECOND")
    try:
        ratelimit = RateLimit(max_calls=int(rate), per_seconds=1.0) if rate else None
    except ValueError as exc:
        raise ConfigurationError(f"Invalid LDP_MAX_CALLS_PER_SECOND: {rate!r}") from exc

    resilience = ResilienceConfig(
        name="ldp",
        base_url=base_url,
        timeout_seconds=DEFAULT_TIMEOUT_SECONDS,
        retry=RetryPolicy(),
        ratelimit=ratelimit,
        auth=auth,
    )
    return RepositoryConfig(
        base_url=base_url,
        root_path=optional_env("LDP_ROOT_PATH"),
        tombstone_segment=optional_env("LDP_TOMBSTONE_SEGMENT", DEFAULT_TOMBSTONE_SEGMENT)
        or DEFAULT_TOMBSTONE_SEGMENT,
        send_version_token=optional_env_bool("LDP_SEND_VERSION_TOKEN", default=False),
        resilience=resilience,
    )
