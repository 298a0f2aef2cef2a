import asyncio
import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import case, func

from backend.providers.credentials import encrypt_credential
from backend.providers.models import (
    Capability,
    ProviderConfig,
    ProviderStatus,
    ProviderUsageSummary,
    UsageLogEntry,
)

logger = logging.getLogger(__name__)

# Fields update_provider may change; identity and timestamps are managed here
UPDATABLE_FIELDS = {
    "display_name",
    "default_model",
    "base_url",
    "encrypted_credential",
    "priority",
    "capabilities",
    "status",
    "is_healthy",
    "consecutive_failures",
    "total_failures",
    "last_failure_at",
}


class ProviderExistsError(ValueError):
    pass


def _check_fields(fields: dict) -> None:
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update provider fields: {', '.join(sorted(unknown))}")


def _coerce(fields: dict) -> dict:
    coerced = dict(fields)
    if "status" in coerced:
        coerced["status"] = ProviderStatus(coerced["status"])
    if "capabilities" in coerced:
        coerced["capabilities"] = [Capability(c) for c in coerced["capabilities"]]
    return coerced


def _summarize(entries: list[UsageLogEntry]) -> list[ProviderUsageSummary]:
    by_provider: dict[str, ProviderUsageSummary] = {}
    latency_totals: dict[str, int] = {}
    for entry in entries:
        summary = by_provider.setdefault(entry.provider, ProviderUsageSummary(provider=entry.provider))
        summary.requests += 1
        if entry.success:
            summary.successes += 1
        else:
            summary.failures += 1
        summary.input_tokens += entry.input_tokens
        summary.output_tokens += entry.output_tokens
        summary.total_tokens += entry.total_tokens
        summary.estimated_cost = round(summary.estimated_cost + entry.estimated_cost, 6)
        latency_totals[entry.provider] = latency_totals.get(entry.provider, 0) + entry.latency_ms
    for name, summary in by_provider.items():
        summary.avg_latency_ms = round(latency_totals[name] / summary.requests, 1)
    return [by_provider[name] for name in sorted(by_provider)]


class InMemoryProviderStore:
    """Process-local store; used in tests and when no database is wanted."""

    def __init__(self, providers: Optional[list[ProviderConfig]] = None):
        self._providers: dict[str, ProviderConfig] = {}
        self._usage: list[UsageLogEntry] = []
        self._lock = asyncio.Lock()
        for config in providers or []:
            self._providers[config.provider] = config

    async def list_providers(self, status: Optional[ProviderStatus] = None) -> list[ProviderConfig]:
        async with self._lock:
            configs = list(self._providers.values())
        if status is not None:
            configs = [c for c in configs if c.status == status]
        # Copies, so callers attaching decrypted keys never touch stored state
        return [c.model_copy(deep=True) for c in configs]

    async def get_provider(self, name: str) -> Optional[ProviderConfig]:
        async with self._lock:
            config = self._providers.get(name)
        return config.model_copy(deep=True) if config else None

    async def save_provider(self, config: ProviderConfig) -> ProviderConfig:
        async with self._lock:
            if config.provider in self._providers:
                raise ProviderExistsError(f"Provider '{config.provider}' already exists")
            stored = config.model_copy(update={"api_key": ""}, deep=True)
            self._providers[config.provider] = stored
        return stored.model_copy(deep=True)

    async def update_provider(self, name: str, **fields) -> Optional[ProviderConfig]:
        _check_fields(fields)
        async with self._lock:
            config = self._providers.get(name)
            if config is None:
                return None
            updated = config.model_copy(update={**_coerce(fields), "updated_at": datetime.now(timezone.utc)})
            self._providers[name] = updated
            return updated.model_copy(deep=True)

    async def deactivate_provider(self, name: str) -> bool:
        return await self.update_provider(name, status=ProviderStatus.INACTIVE) is not None

    async def log_usage(self, entry: UsageLogEntry) -> None:
        async with self._lock:
            self._usage.append(entry)

    async def list_usage(self, provider: Optional[str] = None, limit: int = 100) -> list[UsageLogEntry]:
        async with self._lock:
            entries = [e for e in self._usage if provider is None or e.provider == provider]
        return list(reversed(entries))[:limit]

    async def summarize_usage(self) -> list[ProviderUsageSummary]:
        async with self._lock:
            entries = list(self._usage)
        return _summarize(entries)


class SQLProviderStore:
    """Persistent provider/usage store via SQLAlchemy."""

    def __init__(self, session_factory=None):
        if session_factory is None:
            from backend.database import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory

    def _to_config(self, row) -> ProviderConfig:
        capabilities = json.loads(row.capabilities_json) if row.capabilities_json else []
        return ProviderConfig(
            id=row.id,
            provider=row.provider,
            display_name=row.display_name,
            default_model=row.default_model,
            base_url=row.base_url,
            encrypted_credential=row.encrypted_credential,
            priority=row.priority,
            capabilities=[Capability(c) for c in capabilities],
            status=ProviderStatus(row.status),
            is_healthy=row.is_healthy,
            consecutive_failures=row.consecutive_failures,
            total_failures=row.total_failures,
            last_failure_at=row.last_failure_at,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _to_entry(self, row) -> UsageLogEntry:
        return UsageLogEntry(
            id=row.id,
            provider=row.provider,
            model=row.model,
            input_tokens=row.input_tokens,
            output_tokens=row.output_tokens,
            total_tokens=row.total_tokens,
            estimated_cost=row.estimated_cost,
            request_type=row.request_type,
            capability=row.capability,
            success=row.success,
            error_message=row.error_message,
            latency_ms=row.latency_ms,
            user_id=row.user_id,
            created_at=row.created_at,
        )

    async def list_providers(self, status: Optional[ProviderStatus] = None) -> list[ProviderConfig]:
        from backend.models_db import ProviderConfigRow
        db = self._session_factory()
        try:
            query = db.query(ProviderConfigRow)
            if status is not None:
                query = query.filter(ProviderConfigRow.status == ProviderStatus(status).value)
            rows = query.order_by(ProviderConfigRow.priority.asc(), ProviderConfigRow.created_at.asc()).all()
            return [self._to_config(r) for r in rows]
        finally:
            db.close()

    async def get_provider(self, name: str) -> Optional[ProviderConfig]:
        from backend.models_db import ProviderConfigRow
        db = self._session_factory()
        try:
            row = db.query(ProviderConfigRow).filter(ProviderConfigRow.provider == name).first()
            if not row:
                return None
            return self._to_config(row)
        finally:
            db.close()

    async def save_provider(self, config: ProviderConfig) -> ProviderConfig:
        from backend.models_db import ProviderConfigRow
        db = self._session_factory()
        try:
            if db.query(ProviderConfigRow).filter(ProviderConfigRow.provider == config.provider).first():
                raise ProviderExistsError(f"Provider '{config.provider}' already exists")
            row = ProviderConfigRow(
                id=config.id,
                provider=config.provider,
                display_name=config.display_name,
                default_model=config.default_model,
                base_url=config.base_url,
                encrypted_credential=config.encrypted_credential,
                priority=config.priority,
                capabilities_json=json.dumps([c.value for c in config.capabilities]),
                status=config.status.value,
                is_healthy=config.is_healthy,
                consecutive_failures=config.consecutive_failures,
                total_failures=config.total_failures,
                last_failure_at=config.last_failure_at,
                created_at=config.created_at,
                updated_at=config.updated_at,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return self._to_config(row)
        finally:
            db.close()

    async def update_provider(self, name: str, **fields) -> Optional[ProviderConfig]:
        from backend.models_db import ProviderConfigRow
        _check_fields(fields)
        db = self._session_factory()
        try:
            row = db.query(ProviderConfigRow).filter(ProviderConfigRow.provider == name).first()
            if not row:
                return None
            for key, value in fields.items():
                if key == "capabilities":
                    row.capabilities_json = json.dumps([Capability(c).value for c in value])
                elif key == "status":
                    row.status = ProviderStatus(value).value
                else:
                    setattr(row, key, value)
            row.updated_at = datetime.now(timezone.utc)
            db.commit()
            db.refresh(row)
            return self._to_config(row)
        finally:
            db.close()

    async def deactivate_provider(self, name: str) -> bool:
        return await self.update_provider(name, status=ProviderStatus.INACTIVE) is not None

    async def log_usage(self, entry: UsageLogEntry) -> None:
        from backend.models_db import UsageLogRow
        db = self._session_factory()
        try:
            db.add(UsageLogRow(**entry.model_dump()))
            db.commit()
        finally:
            db.close()

    async def list_usage(self, provider: Optional[str] = None, limit: int = 100) -> list[UsageLogEntry]:
        from backend.models_db import UsageLogRow
        db = self._session_factory()
        try:
            query = db.query(UsageLogRow)
            if provider:
                query = query.filter(UsageLogRow.provider == provider)
            rows = query.order_by(UsageLogRow.created_at.desc()).limit(limit).all()
            return [self._to_entry(r) for r in rows]
        finally:
            db.close()

    async def summarize_usage(self) -> list[ProviderUsageSummary]:
        from backend.models_db import UsageLogRow
        db = self._session_factory()
        try:
            rows = (
                db.query(
                    UsageLogRow.provider,
                    func.count(UsageLogRow.id),
                    func.sum(case((UsageLogRow.success == True, 1), else_=0)),  # noqa: E712
                    func.sum(UsageLogRow.input_tokens),
                    func.sum(UsageLogRow.output_tokens),
                    func.sum(UsageLogRow.total_tokens),
                    func.sum(UsageLogRow.estimated_cost),
                    func.avg(UsageLogRow.latency_ms),
                )
                .group_by(UsageLogRow.provider)
                .order_by(UsageLogRow.provider.asc())
                .all()
            )
            return [
                ProviderUsageSummary(
                    provider=provider,
                    requests=requests,
                    successes=successes or 0,
                    failures=requests - (successes or 0),
                    input_tokens=input_tokens or 0,
                    output_tokens=output_tokens or 0,
                    total_tokens=total_tokens or 0,
                    estimated_cost=round(cost or 0.0, 6),
                    avg_latency_ms=round(float(latency or 0.0), 1),
                )
                for provider, requests, successes, input_tokens, output_tokens, total_tokens, cost, latency in rows
            ]
        finally:
            db.close()


# (env var, provider, display name, default model, priority, capabilities)
_ENV_PROVIDERS = [
    ("ANTHROPIC_API_KEY", "anthropic", "Anthropic Claude", "claude-sonnet-4-20250514", 1,
     [Capability.CHAT, Capability.CODING, Capability.TOOLING]),
    ("OPENAI_API_KEY", "openai", "OpenAI", "gpt-4o", 2,
     [Capability.CHAT, Capability.CODING, Capability.IMAGE, Capability.EMBEDDING, Capability.TOOLING]),
    ("GOOGLE_API_KEY", "google", "Google Gemini", "gemini-2.0-flash", 3,
     [Capability.CHAT, Capability.CODING]),
]


async def seed_providers_from_env(store) -> int:
    """Register providers for the API keys found in the environment.

    Does nothing if the store already has providers. Returns the number seeded.
    """
    if await store.list_providers():
        return 0

    seeded = 0
    for env_var, name, display_name, model, priority, capabilities in _ENV_PROVIDERS:
        api_key = os.getenv(env_var)
        if not api_key:
            continue
        await store.save_provider(ProviderConfig(
            provider=name,
            display_name=display_name,
            default_model=model,
            encrypted_credential=encrypt_credential(api_key),
            priority=priority,
            capabilities=capabilities,
        ))
        seeded += 1
        logger.info("Seeded AI provider '%s' from %s", name, env_var)
    return seeded
