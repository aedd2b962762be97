"""Settings management for AI Studio.

This module holds the versioned settings data model that is persisted to
disk, the provider configuration entries the user maintains, and the
``SettingsManager`` that loads, migrates, snapshots and writes them back.
"""

import json
import os
import threading
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, MutableMapping, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from aistudio.core.assistant_options import CommonLanguages, IconSources
from aistudio.core.settings_migrations import migrate_settings
from aistudio.utils.log import get_logger
from aistudio.utils.paths import data_dir


logger = get_logger()

SETTINGS_FILENAME = "settings.json"


class LLMProviders(str, Enum):
    """LLM vendors a provider configuration can point at."""

    NONE = "none"
    OPEN_AI = "open_ai"
    ANTHROPIC = "anthropic"
    MISTRAL = "mistral"
    GOOGLE = "google"
    GROQ = "groq"
    FIREWORKS = "fireworks"
    SELF_HOSTED = "self_hosted"

    def to_name(self) -> str:
        """Return the human-readable name of the provider."""
        return _PROVIDER_NAMES.get(self, "Unknown")

    def provides_embeddings(self) -> bool:
        """Self-hosted providers are treated as a special case and report False."""
        return self in _EMBEDDING_PROVIDERS


_PROVIDER_NAMES = {
    LLMProviders.NONE: "No provider selected",
    LLMProviders.OPEN_AI: "OpenAI",
    LLMProviders.ANTHROPIC: "Anthropic",
    LLMProviders.MISTRAL: "Mistral",
    LLMProviders.GOOGLE: "Google",
    LLMProviders.GROQ: "Groq",
    LLMProviders.FIREWORKS: "Fireworks.ai",
    LLMProviders.SELF_HOSTED: "Self-hosted",
}

_EMBEDDING_PROVIDERS = frozenset(
    {LLMProviders.OPEN_AI, LLMProviders.MISTRAL, LLMProviders.GOOGLE}
)

_USA_PROVIDERS = frozenset(
    {
        LLMProviders.OPEN_AI,
        LLMProviders.ANTHROPIC,
        LLMProviders.GOOGLE,
        LLMProviders.GROQ,
        LLMProviders.FIREWORKS,
    }
)
_EUROPE_PROVIDERS = frozenset({LLMProviders.MISTRAL})


def api_key_env_candidates(provider: LLMProviders) -> list[str]:
    """Environment variables to check for an API key."""
    if provider == LLMProviders.OPEN_AI:
        return ["OPENAI_API_KEY"]
    if provider == LLMProviders.ANTHROPIC:
        return ["ANTHROPIC_API_KEY", "ANTHROPIC_AUTH_TOKEN"]
    if provider == LLMProviders.MISTRAL:
        return ["MISTRAL_API_KEY"]
    if provider == LLMProviders.GOOGLE:
        return ["GEMINI_API_KEY", "GOOGLE_API_KEY"]
    if provider == LLMProviders.GROQ:
        return ["GROQ_API_KEY"]
    if provider == LLMProviders.FIREWORKS:
        return ["FIREWORKS_API_KEY"]
    if provider == LLMProviders.SELF_HOSTED:
        return ["SELF_HOSTED_API_KEY"]
    return []


class Host(str, Enum):
    """Local inference servers a self-hosted provider can talk to."""

    NONE = "none"
    LM_STUDIO = "lm_studio"
    LLAMACPP = "llamacpp"
    OLLAMA = "ollama"

    def to_name(self) -> str:
        return {
            Host.NONE: "None",
            Host.LM_STUDIO: "LM Studio",
            Host.LLAMACPP: "llama.cpp",
            Host.OLLAMA: "ollama",
        }.get(self, "Unknown")

    def base_path(self) -> str:
        """Path of the OpenAI-compatible API below the configured hostname."""
        return "/v1/"


class ConfidenceLevel(str, Enum):
    """How far the user trusts a provider with their data."""

    UNKNOWN = "unknown"
    NONE = "none"
    UNTRUSTED = "untrusted"
    VERY_LOW = "very_low"
    LOW = "low"
    MODERATE = "moderate"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANKS[self]


_CONFIDENCE_RANKS = {
    ConfidenceLevel.UNKNOWN: 0,
    ConfidenceLevel.NONE: 0,
    ConfidenceLevel.UNTRUSTED: 1,
    ConfidenceLevel.VERY_LOW: 2,
    ConfidenceLevel.LOW: 3,
    ConfidenceLevel.MODERATE: 4,
    ConfidenceLevel.MEDIUM: 5,
    ConfidenceLevel.HIGH: 6,
}


class ConfidenceSchemes(str, Enum):
    """Presets that assign a confidence level to every provider."""

    TRUST_ALL = "trust_all"
    TRUST_USA_EUROPE = "trust_usa_europe"
    TRUST_USA = "trust_usa"
    TRUST_EUROPE = "trust_europe"
    LOCAL_TRUST_ONLY = "local_trust_only"
    CUSTOM = "custom"


class SettingsVersion(str, Enum):
    V1 = "V1"
    V2 = "V2"
    V3 = "V3"


class UpdateBehavior(str, Enum):
    NO_CHECK = "no_check"
    ONCE_STARTUP = "once_startup"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"


class NavBehavior(str, Enum):
    EXPAND_ON_HOVER = "expand_on_hover"
    NEVER_EXPAND_USE_TOOLTIPS = "never_expand_use_tooltips"
    ALWAYS_EXPAND = "always_expand"


class SendBehavior(str, Enum):
    NO_KEY_IS_SENDING = "no_key_is_sending"
    MODIFER_ENTER_IS_SENDING = "modifier_enter_is_sending"
    ENTER_IS_SENDING = "enter_is_sending"


class WorkspaceStorageBehavior(str, Enum):
    DISABLE_WORKSPACES = "disable_workspaces"
    STORE_CHATS_MANUALLY = "store_chats_manually"
    STORE_CHATS_AUTOMATICALLY = "store_chats_automatically"


class WorkspaceStorageTemporaryMaintenancePolicy(str, Enum):
    NO_AUTOMATIC_MAINTENANCE = "no_automatic_maintenance"
    DELETE_OLDER_THAN_7_DAYS = "delete_older_than_7_days"
    DELETE_OLDER_THAN_30_DAYS = "delete_older_than_30_days"
    DELETE_OLDER_THAN_90_DAYS = "delete_older_than_90_days"
    DELETE_OLDER_THAN_180_DAYS = "delete_older_than_180_days"
    DELETE_OLDER_THAN_365_DAYS = "delete_older_than_365_days"

    def retention_days(self) -> Optional[int]:
        """Days temporary chats are kept, or None when nothing is deleted."""
        if self is WorkspaceStorageTemporaryMaintenancePolicy.NO_AUTOMATIC_MAINTENANCE:
            return None
        return int(self.value.rsplit("_", 2)[-2])


class Components(str, Enum):
    """Workflows that can have a preselected provider."""

    NONE = "none"
    CHAT = "chat"
    TRANSLATION_ASSISTANT = "translation_assistant"
    ICON_FINDER_ASSISTANT = "icon_finder_assistant"


class ProviderSettings(BaseModel):
    """A provider configuration entry maintained by the user."""

    num: int = 0
    id: str = Field(default_factory=lambda: uuid4().hex)
    instance_name: str = ""
    used_provider: LLMProviders = LLMProviders.NONE
    model: str = ""
    is_self_hosted: bool = False
    hostname: str = ""
    host: Host = Host.NONE
    # The provider's environment variables take precedence over this value.
    api_key: Optional[str] = None


class LLMProviderSettings(BaseModel):
    """Confidence configuration applied to all providers."""

    enforce_global_minimum_confidence: bool = False
    global_minimum_confidence: ConfidenceLevel = ConfidenceLevel.NONE
    show_provider_confidence: bool = True
    confidence_scheme: ConfidenceSchemes = ConfidenceSchemes.TRUST_ALL
    custom_confidence_scheme: Dict[LLMProviders, ConfidenceLevel] = Field(default_factory=dict)


class SettingsData(BaseModel):
    """The data model for the settings file."""

    # Allows upgrading the settings file when a new version is available.
    version: SettingsVersion = SettingsVersion.V3

    providers: List[ProviderSettings] = Field(default_factory=list)
    next_provider_num: int = 1

    llm_providers: LLMProviderSettings = Field(default_factory=LLMProviderSettings)

    # App settings
    # When saving energy, streamed content refreshes the UI less frequently.
    is_saving_energy: bool = False
    enable_spellchecking: bool = False
    update_behavior: UpdateBehavior = UpdateBehavior.ONCE_STARTUP
    navigation_behavior: NavBehavior = NavBehavior.EXPAND_ON_HOVER

    # Chat settings
    shortcut_send_behavior: SendBehavior = SendBehavior.MODIFER_ENTER_IS_SENDING

    # Workspace settings
    workspace_storage_behavior: WorkspaceStorageBehavior = (
        WorkspaceStorageBehavior.STORE_CHATS_AUTOMATICALLY
    )
    workspace_storage_temporary_maintenance_policy: WorkspaceStorageTemporaryMaintenancePolicy = (
        WorkspaceStorageTemporaryMaintenancePolicy.DELETE_OLDER_THAN_90_DAYS
    )

    # Assistant: icon finder
    preselect_icon_options: bool = False
    preselected_icon_source: IconSources = IconSources.GENERIC
    preselected_icon_provider: str = ""

    # Assistant: translation
    live_translation_debounce_interval_ms: int = 1_000
    preselect_translation_options: bool = False
    preselect_live_translation: bool = False
    preselected_translation_target_language: CommonLanguages = CommonLanguages.EN_US
    preselect_translation_other_language: str = ""
    preselected_translation_provider: str = ""


class SettingsManager:
    """Loads, snapshots and persists the settings data.

    Reads return deep copies so callers never observe a half-applied edit.
    All writes go through ``edit()``, which holds a lock for the duration of
    the mutation and the write-back.
    """

    def __init__(self, settings_path: Optional[Path] = None) -> None:
        self.settings_path = settings_path or data_dir() / SETTINGS_FILENAME
        self._lock = threading.RLock()
        self._data: Optional[SettingsData] = None

    @property
    def configuration_data(self) -> SettingsData:
        """Return a snapshot of the current settings."""
        with self._lock:
            return self._ensure_loaded().model_copy(deep=True)

    def _ensure_loaded(self) -> SettingsData:
        if self._data is None:
            self._data = self._read()
        return self._data

    def _read(self) -> SettingsData:
        if not self.settings_path.exists():
            logger.debug(
                "[settings] Settings file not found; using defaults",
                extra={"path": str(self.settings_path)},
            )
            return SettingsData()
        try:
            payload = json.loads(self.settings_path.read_text(encoding="utf-8"))
            if not isinstance(payload, dict):
                raise ValueError("settings root must be an object")
            data = SettingsData.model_validate(migrate_settings(payload))
        except (
            json.JSONDecodeError,
            OSError,
            UnicodeDecodeError,
            ValueError,
            TypeError,
        ) as e:
            logger.warning(
                "Error loading settings: %s: %s",
                type(e).__name__,
                e,
                extra={"error": str(e), "path": str(self.settings_path)},
            )
            return SettingsData()
        logger.debug(
            "[settings] Loaded settings",
            extra={
                "path": str(self.settings_path),
                "version": data.version.value,
                "provider_count": len(data.providers),
            },
        )
        return data

    def _write(self, data: SettingsData) -> None:
        self.settings_path.parent.mkdir(parents=True, exist_ok=True)
        self.settings_path.write_text(data.model_dump_json(indent=2), encoding="utf-8")
        logger.debug(
            "[settings] Saved settings",
            extra={"path": str(self.settings_path), "provider_count": len(data.providers)},
        )

    def load_settings(self) -> SettingsData:
        """(Re)load the settings from disk and return a snapshot."""
        with self._lock:
            self._data = self._read()
            return self._data.model_copy(deep=True)

    def store_settings(self) -> None:
        """Write the current settings back to disk."""
        with self._lock:
            self._write(self._ensure_loaded())

    @contextmanager
    def edit(self) -> Iterator[SettingsData]:
        """Mutate a draft of the settings; it replaces the current data and is
        persisted when the block exits without an exception."""
        with self._lock:
            draft = self._ensure_loaded().model_copy(deep=True)
            yield draft
            self._data = draft
            self._write(draft)

    # Providers

    def get_provider(self, name_or_id: str) -> Optional[ProviderSettings]:
        """Find a configured provider by instance name (case-insensitive) or id."""
        for provider in self.configuration_data.providers:
            if provider.id == name_or_id or provider.instance_name.lower() == name_or_id.lower():
                return provider
        return None

    def add_provider(self, provider: ProviderSettings) -> ProviderSettings:
        """Number and store a new provider configuration."""
        if not provider.instance_name.strip():
            raise ValueError("The instance name must not be empty.")
        with self.edit() as data:
            if any(
                p.instance_name.lower() == provider.instance_name.lower() for p in data.providers
            ):
                raise ValueError(f"Provider '{provider.instance_name}' already exists.")
            stored = provider.model_copy(
                update={
                    "num": data.next_provider_num,
                    "is_self_hosted": provider.used_provider == LLMProviders.SELF_HOSTED,
                }
            )
            data.providers.append(stored)
            data.next_provider_num += 1
        logger.info(
            "[settings] Added provider",
            extra={"instance_name": stored.instance_name, "provider": stored.used_provider.value},
        )
        return stored

    def remove_provider(self, name_or_id: str) -> ProviderSettings:
        """Delete a provider configuration and clear preselections pointing at it."""
        target = self.get_provider(name_or_id)
        if target is None:
            raise KeyError(f"Provider '{name_or_id}' does not exist.")
        with self.edit() as data:
            data.providers = [p for p in data.providers if p.id != target.id]
            if data.preselected_translation_provider == target.id:
                data.preselected_translation_provider = ""
            if data.preselected_icon_provider == target.id:
                data.preselected_icon_provider = ""
        return target

    def get_available_providers(self) -> List[ProviderSettings]:
        """Providers that satisfy the enforced global minimum confidence, if any."""
        data = self.configuration_data
        if not data.llm_providers.enforce_global_minimum_confidence:
            return list(data.providers)
        minimum = data.llm_providers.global_minimum_confidence.rank
        return [
            p
            for p in data.providers
            if self.get_configured_confidence_level(p.used_provider).rank >= minimum
        ]

    def get_preselected_provider(self, component: Components) -> Optional[ProviderSettings]:
        """Return the provider preselected for a workflow.

        With exactly one configured provider, that provider is always chosen.
        """
        data = self.configuration_data
        if len(data.providers) == 1:
            return data.providers[0]

        preselected_id = ""
        if component == Components.TRANSLATION_ASSISTANT and data.preselect_translation_options:
            preselected_id = data.preselected_translation_provider
        elif component == Components.ICON_FINDER_ASSISTANT and data.preselect_icon_options:
            preselected_id = data.preselected_icon_provider

        if not preselected_id:
            return None
        return next((p for p in data.providers if p.id == preselected_id), None)

    def get_api_key(self, provider: LLMProviders, instance_name: str) -> Optional[str]:
        """Resolve an API key from the environment, then from the provider entry."""
        for env_var in api_key_env_candidates(provider):
            value = os.environ.get(env_var)
            if value:
                return value
        for entry in self.configuration_data.providers:
            if entry.used_provider == provider and entry.instance_name == instance_name:
                return entry.api_key
        return None

    # Confidence

    def get_configured_confidence_level(self, provider: LLMProviders) -> ConfidenceLevel:
        """Resolve the user's confidence level for a provider from the active scheme."""
        if provider == LLMProviders.NONE:
            return ConfidenceLevel.NONE

        settings = self.configuration_data.llm_providers
        scheme = settings.confidence_scheme
        if scheme == ConfidenceSchemes.CUSTOM:
            return settings.custom_confidence_scheme.get(provider, ConfidenceLevel.UNKNOWN)
        if provider == LLMProviders.SELF_HOSTED:
            return ConfidenceLevel.HIGH
        if scheme in (ConfidenceSchemes.TRUST_ALL, ConfidenceSchemes.TRUST_USA_EUROPE):
            return ConfidenceLevel.MEDIUM
        if scheme == ConfidenceSchemes.TRUST_USA:
            return ConfidenceLevel.MEDIUM if provider in _USA_PROVIDERS else ConfidenceLevel.LOW
        if scheme == ConfidenceSchemes.TRUST_EUROPE:
            return ConfidenceLevel.MEDIUM if provider in _EUROPE_PROVIDERS else ConfidenceLevel.LOW
        if scheme == ConfidenceSchemes.LOCAL_TRUST_ONLY:
            return ConfidenceLevel.VERY_LOW
        return ConfidenceLevel.UNKNOWN

    # UI helpers

    def inject_spellchecking(self, attributes: MutableMapping[str, Any]) -> None:
        """Set the spellcheck attribute for user input fields."""
        attributes["spellcheck"] = (
            "true" if self.configuration_data.enable_spellchecking else "false"
        )

