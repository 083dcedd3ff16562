"""Infrastructure layer for the Agent Lounge engine.

Re-exports the public API surface for convenience::

    from agent_lounge.infrastructure import (
        EventBus, EventStore,
        GamificationConfig, FeedConfig, SessionConfig,
        PreferenceStore, to_json, restore_session,
    )
"""

from agent_lounge.infrastructure.config import (
    FeedConfig,
    GamificationConfig,
    SessionConfig,
    load_config_from_json,
    load_config_from_yaml,
)
from agent_lounge.infrastructure.event_bus import (
    EventBus,
    EventStore,
)
from agent_lounge.infrastructure.preferences import (
    ONBOARDING_COMPLETED,
    PreferenceStore,
)
from agent_lounge.infrastructure.serialization import (
    from_json,
    from_yaml,
    restore_session,
    session_to_dict,
    to_json,
    to_yaml,
)

__all__ = [
    # config
    "GamificationConfig",
    "FeedConfig",
    "SessionConfig",
    "load_config_from_json",
    "load_config_from_yaml",
    # event bus
    "EventBus",
    "EventStore",
    # preferences
    "PreferenceStore",
    "ONBOARDING_COMPLETED",
    # serialization
    "session_to_dict",
    "restore_session",
    "to_json",
    "from_json",
    "to_yaml",
    "from_yaml",
]
